# app/core/errors.py
"""
Taxonomía de errores del servicio.

Every error carries the machine-readable ``code`` and the HTTP status it is
surfaced with; the app factory turns them into ``{code, message}`` bodies.
"""


class ServiceError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_SERVER_ERROR"
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


# --- 400
class InvalidRequest(ServiceError):
    status_code = 400
    code = "INVALID_REQUEST"
    default_message = "Invalid request"


ValidationError = InvalidRequest


class InvalidIdentifier(InvalidRequest):
    code = "INVALID_ID"
    default_message = "Invalid identifier format"


# --- 404
class NotFound(ServiceError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class CardNotFound(NotFound):
    code = "CARD_NOT_FOUND"
    default_message = "Card not found"


class ChargeNotFound(NotFound):
    code = "CHARGE_NOT_FOUND"
    default_message = "Charge not found"


# --- 409 / 422
class CardStatusConflict(ServiceError):
    status_code = 409
    code = "CARD_STATUS_CONFLICT"
    default_message = "Card status changed concurrently"


class BusinessRuleViolation(ServiceError):
    status_code = 422
    code = "UNPROCESSABLE"


class CardNotChargeable(BusinessRuleViolation):
    code = "CARD_NOT_CHARGEABLE"
    default_message = "Card cannot be charged"


class InsufficientFunds(BusinessRuleViolation):
    code = "INSUFFICIENT_FUNDS"
    default_message = "Card has insufficient funds for this charge"


class CurrencyMismatch(BusinessRuleViolation):
    code = "CURRENCY_MISMATCH"
    default_message = "Charge currency must match card currency"


# --- 500
class RemoteCallFailure(ServiceError):
    """Network error, timeout or unexpected status from the card service."""

    default_message = "Card service call failed"


class CardUpdateFailed(ServiceError):
    code = "CARD_UPDATE_FAILED"
    default_message = "Failed to update card status after charge"


class InternalError(ServiceError):
    default_message = "An error occurred while processing the charge"
