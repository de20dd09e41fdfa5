"""Domain errors rendered as ``{"ok": false, "error": CODE}`` responses."""


class XpotError(Exception):
    """Base error carrying an API error code and HTTP status."""

    status_code: int = 500

    def __init__(self, code: str, message: str | None = None, **extra):
        super().__init__(message or code)
        self.code = code
        self.message = message
        self.extra = extra

    def to_payload(self) -> dict:
        payload = {"ok": False, "error": self.code}
        if self.message:
            payload["message"] = self.message
        payload.update(self.extra)
        return payload


class ValidationFailed(XpotError):
    status_code = 400


class Unauthorized(XpotError):
    status_code = 401


class Forbidden(XpotError):
    status_code = 403


class NotFound(XpotError):
    status_code = 404


class Conflict(XpotError):
    """Business-rule violation, e.g. a draw with no eligible tickets."""

    status_code = 400


class AlreadyExists(XpotError):
    status_code = 409


class NotConfigured(XpotError):
    status_code = 500
