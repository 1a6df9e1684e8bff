"""Exception types for contractskit.

Data problems are never raised: they come back as a ValidationResult.
These exceptions signal usage errors (bad schema, unparseable version,
malformed input records, broken configuration).
"""
from typing import Optional


class ContractsKitError(Exception):
    """Root of all contractskit exceptions."""
    pass


class VersionParseError(ContractsKitError, ValueError):
    """Raised when a string is not MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]."""

    def __init__(self, text: object, reason: str = "expected MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]"):
        self.text = text
        self.reason = reason
        super().__init__(f"Invalid semantic version {text!r}: {reason}")


class SchemaDefinitionError(ContractsKitError, ValueError):
    """Raised when a schema definition itself is malformed."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        if field is not None:
            message = f"{message} (field '{field}')"
        super().__init__(message)


class DocumentFormatError(ContractsKitError, ValueError):
    """Raised when a wire record cannot be turned into a contract document."""
    pass


class ConfigError(ContractsKitError):
    """Raised when config.json cannot be read or parsed."""
    pass
