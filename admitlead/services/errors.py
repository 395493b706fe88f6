"""
Webhook error taxonomy.
Each error knows its HTTP status and JSON body; handlers never retry in-process.
"""
from typing import Any, Optional

# PostgreSQL SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


class WebhookError(Exception):
    """Base class for errors that reject a webhook delivery."""
    status_code = 500
    error = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.error
        super().__init__(self.message)

    def to_response(self) -> dict[str, Any]:
        return {"error": self.error}


class AuthenticationError(WebhookError):
    """Shared secret configured but missing or wrong."""
    status_code = 401
    error = "Unauthorized"


class PayloadValidationError(WebhookError):
    """Body does not match the Tally webhook schema."""
    status_code = 400
    error = "Invalid payload"

    def __init__(self, details: list[dict[str, Any]], message: Optional[str] = None):
        self.details = details
        super().__init__(message or self.error)

    def to_response(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class MissingRequiredFieldError(WebhookError):
    """Parent name or phone could not be resolved from the submission."""
    status_code = 400
    error = "Missing required fields: parent_name, parent_phone"

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(self.error)


class StoreError(WebhookError):
    """
    Persistence failure. `code` is the store's own error code
    (SQLSTATE where the driver exposes one).
    """
    status_code = 500
    error = "Database error"

    def __init__(self, message: str, code: Optional[str] = None):
        self.code = code
        super().__init__(message)

    @property
    def is_unique_violation(self) -> bool:
        return self.code == UNIQUE_VIOLATION

    def to_response(self) -> dict[str, Any]:
        return {"error": self.error, "details": self.message}


class LeadNotFoundError(Exception):
    def __init__(self, lead_id: str):
        self.lead_id = lead_id
        super().__init__(f"Lead with id '{lead_id}' not found")
