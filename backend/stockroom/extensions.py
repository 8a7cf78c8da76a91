# Overview: Flask extension instances shared by the app factory, models and CLI.

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
# compare_type: autogenerate picks up Numeric precision / String length changes
migrate = Migrate(compare_type=True)
