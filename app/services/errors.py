"""
Error taxonomy for the registration service.
Every error is terminal: it is returned to the caller with a stable code and
never retried by the service itself. main.py renders them as JSON.
"""

from typing import Optional


class FoodBankError(Exception):
    status_code = 400
    code = "bad_request"
    default_message = "Request could not be processed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code}


# ── Identity & access ─────────────────────────────────────────────────────
class Unauthorized(FoodBankError):
    status_code = 401
    code = "unauthorized"
    default_message = "Invalid or expired token"


class Forbidden(FoodBankError):
    status_code = 403
    code = "forbidden"
    default_message = "You do not have permission to perform this action"


# ── Lookups ───────────────────────────────────────────────────────────────
class NotFound(FoodBankError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found"


class EventNotFound(NotFound):
    code = "event_not_found"
    default_message = "Event not found"


class RegistrationNotFound(NotFound):
    code = "registration_not_found"
    default_message = "Registration not found"


class UserNotFound(NotFound):
    code = "user_not_found"
    default_message = "User not found"


class SessionNotFound(NotFound):
    code = "session_not_found"
    default_message = "Invalid QR code session"


# ── Admission rejections ──────────────────────────────────────────────────
class EventNotActive(FoodBankError):
    code = "event_not_active"
    default_message = "This event is no longer active"


class EventOutsideWindow(FoodBankError):
    code = "event_outside_window"
    default_message = "This event is not currently accepting registrations"


class EventFull(FoodBankError):
    code = "event_full"
    default_message = "This event has reached maximum capacity"


class SessionExpired(FoodBankError):
    code = "session_expired"
    default_message = "This QR code has expired"


class SessionInactive(FoodBankError):
    code = "session_inactive"
    default_message = "This QR code is no longer active"


class CooldownActive(FoodBankError):
    code = "cooldown_active"

    def __init__(self, days: int):
        self.days = days
        super().__init__(
            f"You have already registered within the last {days} days. "
            f"Please wait before registering again."
        )

    def to_dict(self) -> dict:
        return {**super().to_dict(), "cooldown_days": self.days}


class InvalidRequest(FoodBankError):
    code = "invalid_request"


class Conflict(FoodBankError):
    status_code = 409
    code = "conflict"
    default_message = "Resource already exists"


# ── Internal ──────────────────────────────────────────────────────────────
class OrderNumberCollision(FoodBankError):
    status_code = 500
    code = "order_number_collision"
    default_message = "Could not generate a unique order number, please try again"


class SessionCodeCollision(FoodBankError):
    status_code = 500
    code = "session_code_collision"
    default_message = "Could not generate a unique QR session code"
