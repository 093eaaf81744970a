from fastapi import status


class ConsentError(Exception):
    """Base for consent failures surfaced to callers of the store and guard."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Consent error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ConsentNotFound(ConsentError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Consent not found"


class ConsentForbidden(ConsentError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied"


class InvalidConsentState(ConsentError):
    default_detail = "Operation not allowed for the current consent status"


class ConsentAlreadyRevoked(ConsentError):
    default_detail = "Consent is already revoked"


class ConsentExpired(ConsentError):
    default_detail = "Consent has expired"


class TermsNotAccepted(ConsentError):
    default_detail = "Terms and conditions must be accepted"


class InvalidDuration(ConsentError):
    default_detail = "Invalid duration"


class InvalidScope(ConsentError):
    default_detail = "At least one scope must be specified"

    def __init__(self, invalid_scopes: list[str] | None = None):
        self.invalid_scopes = list(invalid_scopes or [])
        detail = f"Invalid scopes: {', '.join(self.invalid_scopes)}" if self.invalid_scopes else None
        super().__init__(detail)


class ConsentIdMissing(ConsentError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Consent ID is required"


class InsufficientConsent(ConsentError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Invalid or insufficient consent"
