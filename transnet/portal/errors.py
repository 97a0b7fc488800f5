"""
Exceptions raised by the application services.

Exception Hierarchy:
    PortalError (base, carries an HTTP status)
    ├── ValidationFailed (422, field -> message map)
    ├── AuthenticationRequired (401)
    ├── OrganizationRequiredError (400)
    ├── PermissionDeniedError (403)
    ├── NotFoundError (404)
    ├── ConflictError (409)
    └── CredentialValidationError (400)

The web layer maps these to responses with an error toast; services never
build HTTP responses themselves.
"""

from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

FormT = TypeVar("FormT", bound=BaseModel)

ORGANIZATION_REQUIRED_MESSAGE = (
    "Organization access required. Please join or create an organization."
)


class PortalError(Exception):
    """
    Base exception for application service errors.

    Attributes:
        message: User-facing message.
        status_code: HTTP status the web layer responds with.
    """

    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationFailed(PortalError):
    """
    Raised when submitted form data is invalid.

    Attributes:
        errors: Field name to message, rendered next to each field.
    """

    status_code = 422

    def __init__(self, errors: Dict[str, str], message: Optional[str] = None):
        self.errors = errors
        super().__init__(message or next(iter(errors.values()), "Invalid input"))

    @classmethod
    def from_pydantic(cls, error: ValidationError) -> "ValidationFailed":
        return cls(field_errors(error))


class AuthenticationRequired(PortalError):
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class OrganizationRequiredError(PortalError):
    """Raised when a request needs an organization and the user has none."""

    status_code = 400

    def __init__(self, message: str = ORGANIZATION_REQUIRED_MESSAGE):
        super().__init__(message)


class PermissionDeniedError(PortalError):
    status_code = 403


class NotFoundError(PortalError):
    status_code = 404


class ConflictError(PortalError):
    status_code = 409


class CredentialValidationError(PortalError):
    """Raised when exchange credentials fail their connection test."""

    status_code = 400


def field_errors(error: ValidationError) -> Dict[str, str]:
    """
    Flatten a pydantic ValidationError to a field -> message map.

    Only the first message per field is kept. Model-level errors are
    reported under "__all__".

    Example:
        >>> try:
        ...     WithdrawalRequest(amount="0", ...)
        ... except ValidationError as e:
        ...     field_errors(e)
        {'amount': 'Amount must be greater than 0'}
    """
    errors: Dict[str, str] = {}
    for item in error.errors():
        field = ".".join(str(part) for part in item.get("loc", ())) or "__all__"
        message = item.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, message)
    return errors


def parse_form(model: Type[FormT], data: Mapping[str, Any]) -> FormT:
    """
    Validate submitted form data with a pydantic model.

    Raises:
        ValidationFailed: With a field -> message map.
    """
    try:
        return model(**data)
    except ValidationError as e:
        raise ValidationFailed.from_pydantic(e) from e
