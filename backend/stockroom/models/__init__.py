from .tenancy import Store
from .catalog import Category, Supplier
from .inventory import Product, StockAdjustment, ADJUSTMENT_TYPES

__all__ = [
    'Store',
    'Category', 'Supplier',
    'Product', 'StockAdjustment', 'ADJUSTMENT_TYPES',
]
