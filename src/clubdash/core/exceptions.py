"""Application-level exceptions."""


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str, code: str = "VALIDATION_ERROR"):
        super().__init__(message, code=code)


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class ConfigurationError(AppError):
    """Raised when a static table (TTLs, tier delays) is inconsistent."""

    def __init__(self, message: str):
        super().__init__(message, code="CONFIGURATION_ERROR")


class InvalidLedgerEntryError(ValidationError):
    """Raised when a ledger entry cannot be accumulated into a balance."""

    def __init__(self, entry_id: str, reason: str):
        self.entry_id = entry_id
        super().__init__(
            f"Invalid ledger entry {entry_id}: {reason}",
            code="INVALID_LEDGER_ENTRY",
        )
