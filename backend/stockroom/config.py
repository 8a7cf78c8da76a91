# backend/stockroom/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///stockroom.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Compare-and-swap retry budget for stock writes
    STOCK_ADJUST_MAX_ATTEMPTS = int(os.environ.get("STOCK_ADJUST_MAX_ATTEMPTS", "3"))
    STOCK_ADJUST_BACKOFF_BASE = float(os.environ.get("STOCK_ADJUST_BACKOFF_BASE", "0.05"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
