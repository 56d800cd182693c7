from .auth import User, SessionToken
from .catalog import Product, IMAGE_SLOTS

__all__ = [
    'User', 'SessionToken',
    'Product', 'IMAGE_SLOTS',
]
