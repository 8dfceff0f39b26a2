"""Errors raised by the content registry."""

from __future__ import annotations


class RegistryError(Exception):
    """Base class for registry errors."""


class ContentNotFoundError(RegistryError):
    """Raised when no content is stored under an identifier."""

    def __init__(self, content_id: str) -> None:
        """Initialise with the missing content identifier."""
        self.content_id = content_id
        super().__init__(f"Content not found: {content_id}")


class InvalidLanguageError(RegistryError):
    """Raised when a translation targets an undeclared language."""

    def __init__(self, content_id: str, language: str) -> None:
        """Initialise with the content identifier and rejected language."""
        self.content_id = content_id
        self.language = language
        super().__init__(
            f"Language {language!r} is not a target language of content {content_id}"
        )


class DuplicateTranslationError(RegistryError):
    """Raised when a language already has a translation."""

    def __init__(self, content_id: str, language: str) -> None:
        """Initialise with the content identifier and translated language."""
        self.content_id = content_id
        self.language = language
        super().__init__(
            f"Translation for {language!r} already exists on content {content_id}"
        )


class StorageFailureError(RegistryError):
    """Raised when the storage collaborator cannot serve a call.

    The original storage exception, when there is one, is chained as
    ``__cause__``.
    """

    def __init__(self, operation: str, reason: str) -> None:
        """Initialise with the failing operation and a short reason."""
        self.operation = operation
        self.reason = reason
        super().__init__(f"Storage failure during {operation}: {reason}")

    @classmethod
    def missing_singleton(cls, key: str) -> StorageFailureError:
        """Return an error for a singleton absent because instantiation never ran."""
        return cls(f"load {key}", "registry has not been instantiated")


class InvalidPaginationError(ValueError):
    """Raised when a listing limit is outside the unsigned 32-bit range."""

    def __init__(self, name: str, value: int) -> None:
        """Build a consistent error message for the invalid parameter."""
        self.name = name
        self.value = value
        super().__init__(f"{name} must be between 0 and {2**32 - 1}, got {value}")
