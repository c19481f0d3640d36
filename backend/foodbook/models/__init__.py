from .tenancy import Owner
from .inventory import Product
from .orders import Order, OrderLine
from .auth import SessionToken, OneTimeCode, RoleCredential

__all__ = [
    'Owner',
    'Product',
    'Order', 'OrderLine',
    'SessionToken', 'OneTimeCode', 'RoleCredential',
]
