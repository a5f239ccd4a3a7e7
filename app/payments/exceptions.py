"""
Payment-specific exceptions.

Exception Hierarchy:
    PaymentError (base for payment domain)
    ├── PaymentNotFoundError - Payment lookup failures
    ├── PersistenceFailure - Database write failed; work was rolled back
    └── RefundError - Refund preconditions violated
        ├── RefundExceedsOriginal - Refund larger than what is refundable
        ├── OriginalNotCompleted - Original payment not COMPLETED
        └── RefundOfRefundError - Original is itself a refund

    GatewayError (ExternalServiceError) - Device gateway problems
    ├── GatewayFailure - Gateway declined or could not process the payment
    ├── GatewayTimeoutError - Gateway did not answer in time
    └── GatewayUnavailableError - Gateway unreachable or returned garbage

    InvalidStateTransitionError - FSM transition not allowed (ConflictError)

Usage:
    from payments.exceptions import RefundExceedsOriginal

    raise RefundExceedsOriginal(
        "Refund amount cannot exceed original payment",
        details={"refund_amount": "150.00", "refundable_amount": "100.00"},
    )
"""

from __future__ import annotations

from core.exceptions import (
    BaseApplicationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
)


# =============================================================================
# Payment Domain Errors
# =============================================================================


class PaymentError(BaseApplicationError):
    """Base exception for payment operations."""

    default_error_code: str = "PAYMENT_ERROR"


class PaymentNotFoundError(PaymentError, NotFoundError):
    """Raised when a referenced payment does not exist."""

    default_error_code: str = "PAYMENT_NOT_FOUND"


class PersistenceFailure(PaymentError):
    """
    Raised when writing payment or ledger state fails.

    The surrounding transaction has been rolled back by the time this
    is raised, so no partial state remains.
    """

    default_error_code: str = "PERSISTENCE_FAILURE"


class RefundError(PaymentError):
    """Base exception for rejected refunds. Nothing is persisted."""

    default_error_code: str = "REFUND_ERROR"


class RefundExceedsOriginal(RefundError):
    """Raised when a refund is larger than the original (or what remains of it)."""

    default_error_code: str = "REFUND_EXCEEDS_ORIGINAL"


class OriginalNotCompleted(RefundError):
    """Raised when refunding a payment that never completed."""

    default_error_code: str = "ORIGINAL_NOT_COMPLETED"


class RefundOfRefundError(RefundError):
    """Raised when the payment being refunded is itself a refund."""

    default_error_code: str = "REFUND_OF_REFUND"


# =============================================================================
# Gateway Errors
# =============================================================================


class GatewayError(ExternalServiceError):
    """
    Base exception for device gateway errors.

    A device payment that ends in any GatewayError is persisted as
    FAILED and never reaches the booking ledger. Retrying is left to
    the caller.
    """

    default_error_code: str = "GATEWAY_ERROR"


class GatewayFailure(GatewayError):
    """The gateway answered but did not process the payment."""

    default_error_code: str = "GATEWAY_FAILURE"


class GatewayTimeoutError(GatewayError):
    """The gateway did not answer within the configured timeout."""

    default_error_code: str = "GATEWAY_TIMEOUT"


class GatewayUnavailableError(GatewayError):
    """The gateway could not be reached or returned an unreadable response."""

    default_error_code: str = "GATEWAY_UNAVAILABLE"


# Error code for exceptions that are not application errors
UNEXPECTED_ERROR_CODE = "UNEXPECTED_ERROR"


# =============================================================================
# Concurrency Errors
# =============================================================================


class InvalidStateTransitionError(ConflictError):
    """
    Raised when a payment status transition is not allowed.

    Example:
        raise InvalidStateTransitionError(
            "Cannot complete payment in FAILED status",
            details={"current_status": "FAILED", "target_status": "COMPLETED"},
        )
    """

    default_error_code: str = "INVALID_STATE_TRANSITION"


__all__ = [
    "GatewayError",
    "GatewayFailure",
    "GatewayTimeoutError",
    "GatewayUnavailableError",
    "InvalidStateTransitionError",
    "OriginalNotCompleted",
    "PaymentError",
    "PaymentNotFoundError",
    "PersistenceFailure",
    "RefundError",
    "RefundExceedsOriginal",
    "RefundOfRefundError",
    "UNEXPECTED_ERROR_CODE",
]
