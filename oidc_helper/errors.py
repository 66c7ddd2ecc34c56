"""
Custom Exceptions

Defines the exceptions raised by the credential helper and its host adapter.
"""

from typing import Dict, Any, Optional


CREDENTIALS_NOT_FOUND_MESSAGE = "credentials not found in native keychain"
MISSING_SERVER_URL_MESSAGE = "no credentials server URL"
MISSING_USERNAME_MESSAGE = "no credentials username"


class HelperError(Exception):
    """Base exception for credential helper errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self):
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (Context: {context_str})"
        return self.message


class CredentialsNotFound(HelperError):
    """
    Raised when no credentials can be produced for a server.

    Every failure of a credential lookup collapses into this error. The
    message is the fixed literal the host recognizes, so no context is
    attached; the details go to the audit log instead.
    """

    def __init__(self):
        super().__init__(CREDENTIALS_NOT_FOUND_MESSAGE)


class MissingServerURLError(HelperError):
    """Raised when the host sends a request without a server URL."""

    def __init__(self):
        super().__init__(MISSING_SERVER_URL_MESSAGE)


class MissingUsernameError(HelperError):
    """Raised when the host asks to store credentials without a username."""

    def __init__(self):
        super().__init__(MISSING_USERNAME_MESSAGE)


class ConfigurationError(HelperError):
    """Exception raised when the helper cannot be configured."""

    def __init__(self, message: str, setting: Optional[str] = None,
                 value: Optional[Any] = None, **kwargs):
        context = kwargs.copy()
        if setting:
            context['setting'] = setting
        if value is not None:
            context['value'] = value

        super().__init__(message, context)


def is_credentials_not_found(error: Optional[BaseException]) -> bool:
    """Return True if ``error`` is the not-found error kind."""
    return isinstance(error, CredentialsNotFound)


def format_error_context(error: Exception) -> Dict[str, Any]:
    """
    Format error context for logging.

    Args:
        error: Exception instance

    Returns:
        Dictionary with error context information
    """
    if isinstance(error, HelperError):
        return {
            'error_type': error.__class__.__name__,
            'message': error.message,
            'context': error.context
        }
    else:
        return {
            'error_type': error.__class__.__name__,
            'message': str(error),
            'context': {}
        }
