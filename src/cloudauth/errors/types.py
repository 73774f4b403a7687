"""Error types and classifications."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path


class ErrorCategory(StrEnum):
    """Error categories for handling decisions."""

    NOT_FOUND = "not_found"
    PARSE = "parse"
    AUTHENTICATION = "authentication"
    NETWORK = "network"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


class RefreshStep(StrEnum):
    """Which step of a token refresh failed."""

    NETWORK = "network"
    ENDPOINT = "endpoint"
    SIGNING = "signing"
    PARSING = "parsing"


class CloudAuthError(Exception):
    """Base class for all cloudauth errors."""

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        *,
        remediation: str | None = None,
        details: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.remediation = remediation
        self.details = details or {}


class NotFoundError(CloudAuthError):
    """No credential source was available after exhausting the chain."""

    category = ErrorCategory.NOT_FOUND

    def __init__(self, attempted: list[str]) -> None:
        self.attempted = list(attempted)
        message = "Could not find credentials. Sources tried:\n" + "\n".join(
            f"  - {source}" for source in self.attempted
        )
        super().__init__(
            message,
            remediation=(
                "Set GOOGLE_APPLICATION_CREDENTIALS to a credential file or run "
                "'gcloud auth application-default login'."
            ),
            details={"attempted": self.attempted},
        )


class CredentialParseError(CloudAuthError):
    """A credential file is malformed or of an unsupported kind."""

    category = ErrorCategory.PARSE

    def __init__(
        self,
        message: str,
        *,
        path: Path | str | None = None,
        field: str | None = None,
    ) -> None:
        self.path = Path(path) if path is not None else None
        self.field = field
        if self.path is not None:
            message = f"{self.path}: {message}"
        details = {}
        if self.path is not None:
            details["path"] = str(self.path)
        if field is not None:
            details["field"] = field
        super().__init__(message, details=details)


class RefreshError(CloudAuthError):
    """Acquiring a new token failed."""

    category = ErrorCategory.AUTHENTICATION

    def __init__(
        self,
        message: str,
        *,
        step: RefreshStep,
        provider: str | None = None,
        status_code: int | None = None,
        remediation: str | None = None,
    ) -> None:
        self.step = step
        self.provider = provider
        self.status_code = status_code
        if step == RefreshStep.NETWORK:
            self.category = ErrorCategory.NETWORK
        details: dict = {"step": str(step)}
        if provider is not None:
            details["provider"] = provider
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(
            f"{step} error: {message}", remediation=remediation, details=details
        )


class ConfigurationError(CloudAuthError):
    """The cloudauth configuration file or overrides are invalid."""

    category = ErrorCategory.CONFIGURATION
