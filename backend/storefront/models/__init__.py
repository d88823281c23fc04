from .accounts import User, Position, Employee
from .catalog import Category, Provider, App
from .sales import Sale
from .reviews import Review
from .support import SupportRequest, SupportMessage

__all__ = [
    'User', 'Position', 'Employee',
    'Category', 'Provider', 'App',
    'Sale',
    'Review',
    'SupportRequest', 'SupportMessage',
]
