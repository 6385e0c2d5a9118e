"""Translation of ledger errors into HTTP responses."""

from fastapi import HTTPException, status

from cryptoledger.errors import (
    AccountInactive,
    DuplicateEmail,
    InsufficientFunds,
    InsufficientHolding,
    InvalidArgument,
    InvalidCredentials,
    LedgerError,
    NotFound,
    StorageFailure,
)

_STATUS_BY_ERROR = [
    (InvalidArgument, status.HTTP_400_BAD_REQUEST),
    (InsufficientFunds, status.HTTP_400_BAD_REQUEST),
    (InsufficientHolding, status.HTTP_400_BAD_REQUEST),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (DuplicateEmail, status.HTTP_409_CONFLICT),
    (InvalidCredentials, status.HTTP_401_UNAUTHORIZED),
    (AccountInactive, status.HTTP_403_FORBIDDEN),
]


def to_http_exception(exc: LedgerError) -> HTTPException:
    """Map a ledger error to the HTTPException a router should raise."""
    if isinstance(exc, StorageFailure):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage unavailable; the outcome is unknown, "
            "check your transaction history before retrying",
        )
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
