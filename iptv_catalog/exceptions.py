"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class IptvCatalogError(Exception):
    """Base exception for all application-specific errors."""


class DownloadError(IptvCatalogError):
    """Raised when the playlist cannot be fetched or its body cannot be read."""


class ParseError(IptvCatalogError):
    """Raised when playlist text has no recognizable entry structure at all."""


class AuthError(IptvCatalogError):
    """
    Raised when the account endpoint is unreachable or rejects the credentials.
    """


class PersistError(IptvCatalogError):
    """
    Raised when the replace-all transaction fails. The transaction has already
    been rolled back when this is raised.
    """


class NotFoundError(IptvCatalogError):
    """Raised when a read query targets a category that does not exist."""


class SchemaError(IptvCatalogError):
    """Raised when the catalog database is missing one of its tables."""


class ConfigurationError(IptvCatalogError):
    """Raised for issues related to configuration loading or validation."""
