"""
SQLAlchemy models for the crypto ledger.

This module exports all models and the Base class for easy imports:
    from cryptoledger.models import Base, User, Cryptocurrency, Transaction
"""

from cryptoledger.database import Base
from cryptoledger.models.cryptocurrency import Cryptocurrency
from cryptoledger.models.user import User
from cryptoledger.models.transaction import Transaction, TransactionSide

__all__ = [
    "Base",
    "Cryptocurrency",
    "User",
    "Transaction",
    "TransactionSide",
]
