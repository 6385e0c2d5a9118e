"""Error taxonomy for the trading ledger.

Business-rule rejections (InvalidArgument, NotFound, InsufficientFunds,
InsufficientHolding) guarantee that nothing was mutated. StorageFailure is the
only kind with an unknown outcome: the trade was either fully applied or not
at all, and the caller should reconcile against the transaction history.
"""

from decimal import Decimal


class LedgerError(Exception):
    """Base class for every error raised by the ledger services."""


class InvalidArgument(LedgerError):
    """Malformed request: non-positive quantity, missing id, bad price."""


class NotFound(LedgerError):
    """Unknown cryptocurrency or user."""

    def __init__(self, kind: str, identifier: object):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind.capitalize()} '{identifier}' not found")


class InsufficientFunds(LedgerError):
    """A debit would drive the cash balance below zero."""

    def __init__(self, balance: Decimal, required: Decimal):
        self.balance = balance
        self.required = required
        super().__init__(
            f"Insufficient funds: have {balance} available, need {required}"
        )


class InsufficientHolding(LedgerError):
    """A sell would drive the derived holding below zero."""

    def __init__(self, held: Decimal, requested: Decimal):
        self.held = held
        self.requested = requested
        super().__init__(
            f"Insufficient holding: have {held} available, need {requested}"
        )


class StorageFailure(LedgerError):
    """Underlying persistence fault; the commit outcome is unknown."""


class DuplicateEmail(LedgerError):
    """Registration with an email that is already taken."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email '{email}' is already registered")


class InvalidCredentials(LedgerError):
    """Unknown email or wrong password."""


class AccountInactive(LedgerError):
    """The account has been deactivated."""
