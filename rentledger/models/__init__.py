"""ORM models package."""
from .account import Account
from .base import Base, CreatedAtMixin, TimestampMixin
from .marco_zero import MarcoZero
from .property import Property, PropertyStatus
from .reconciliation import ReconciliationAdjustment
from .transaction import PENDING_MARKER, Transaction, TransactionType

__all__ = [
    "Account",
    "Base",
    "CreatedAtMixin",
    "MarcoZero",
    "PENDING_MARKER",
    "Property",
    "PropertyStatus",
    "ReconciliationAdjustment",
    "TimestampMixin",
    "Transaction",
    "TransactionType",
]
