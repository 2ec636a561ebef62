# app/core/errors.py

from typing import Optional

class AppError(Exception):
    """
    Base class for failures that map onto an HTTP response.
    Handled in main.py and rendered as {"message": ..., "details": ...}.
    """
    status_code: int = 500
    message: str = "An unexpected server error occurred."

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None):
        if message is not None:
            self.message = message
        self.details = details
        super().__init__(self.message)

    def to_content(self) -> dict:
        content = {"message": self.message}
        if self.details:
            content["details"] = self.details
        return content


class MissingField(AppError):
    status_code = 400
    message = "Please fill all required fields."


class InvalidField(AppError):
    status_code = 400
    message = "Validation Error"


class RegistrationClosed(AppError):
    status_code = 403
    message = "Registration is currently closed."


class DuplicateRegistration(AppError):
    status_code = 409

    FIELD_LABELS = {
        "nim": "NIM",
        "binusianEmail": "Binusian Email",
    }

    def __init__(self, field: Optional[str] = None):
        self.field = field
        label = self.FIELD_LABELS.get(field)
        if label:
            message = f"A registration with this {label} already exists."
        else:
            message = "A registration conflict occurred."
        super().__init__(message)


class Unauthorized(AppError):
    status_code = 401
    message = "Could not validate credentials"


class NotFound(AppError):
    status_code = 404
    message = "Registration not found."


class StoreUnavailable(AppError):
    status_code = 500
    message = "An unexpected server error occurred."
