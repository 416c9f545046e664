"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class TadpolesCliError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(TadpolesCliError):
    """Raised for issues related to configuration loading or validation."""


class AuthenticationError(TadpolesCliError):
    """Raised when user login fails due to invalid credentials."""


class AdmissionError(TadpolesCliError):
    """Raised when an authenticated session is refused admission to the app API."""


class ListingError(TadpolesCliError):
    """
    Raised when the account overview or a page of events cannot be retrieved.
    """


class PngFormatError(TadpolesCliError):
    """Raised when a PNG byte stream cannot be split into valid chunks."""
