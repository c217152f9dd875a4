from .catalog import Product, Supplier, Customer, PRODUCT_CATEGORIES
from .ledger import Sale, Expense, EXPENSE_TYPES
from .held import HeldCart

__all__ = [
    'Product', 'Supplier', 'Customer', 'PRODUCT_CATEGORIES',
    'Sale', 'Expense', 'EXPENSE_TYPES',
    'HeldCart',
]
