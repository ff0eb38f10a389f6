from .transactions import Transaction, TRANSACTION_TYPES
from .customers import Customer
from .activity import ActivityLog

__all__ = [
    'Transaction', 'TRANSACTION_TYPES',
    'Customer',
    'ActivityLog',
]
