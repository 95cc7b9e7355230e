from typing import Optional


class ActionError(Exception):
    """An expected failure whose message is safe to show to the caller."""

    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class AuthenticationRequired(ActionError):
    status_code = 401

    def __init__(self, message: str = "Utilisateur non authentifié"):
        super().__init__(message)


class ClientProfileNotFound(ActionError):
    status_code = 404

    def __init__(self, message: str = "Profil client introuvable"):
        super().__init__(message)


class PermissionDenied(ActionError):
    status_code = 403

    def __init__(self, message: str = "Accès réservé aux administrateurs"):
        super().__init__(message)


class NotFound(ActionError):
    status_code = 404


class ValidationFailed(ActionError):
    status_code = 400


def first_error_message(exc, default: str = "Validation échouée") -> str:
    """Return the first human readable message of a validation failure.

    Accepts a pydantic ValidationError, FastAPI's RequestValidationError or
    their `errors()` list. Messages raised from our own validators
    (ValueError) are returned as-is, without pydantic's "Value error, " prefix.
    """
    errors = exc if isinstance(exc, list) else exc.errors()
    if not errors:
        return default
    first = errors[0]
    ctx_error = (first.get("ctx") or {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)
    return first.get("msg") or default
