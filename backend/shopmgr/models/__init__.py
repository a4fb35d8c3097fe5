from .inventory import Product
from .customers import Customer
from .sales import Sale
from .auth import User

__all__ = [
    'Product',
    'Customer',
    'Sale',
    'User',
]
