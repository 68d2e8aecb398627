"""Custom exception types for the organization member activity report."""


class ReportGeneratorError(Exception):
    """Base exception for all recoverable report generator errors."""


class ConfigurationError(ReportGeneratorError):
    """Raised when runtime configuration values are missing or invalid."""


class AuthenticationError(ReportGeneratorError):
    """Raised when GitHub authentication credentials are unavailable or invalid."""


class ApiError(ReportGeneratorError):
    """Raised when a GitHub API request fails or returns an unexpected response."""


class RateLimitError(ApiError):
    """Raised when GitHub keeps rate limiting a request after the allowed retry."""


class DataValidationError(ReportGeneratorError):
    """Raised when API payloads do not contain the fields the report needs."""
