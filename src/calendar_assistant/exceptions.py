"""Custom exceptions for Calendar Assistant."""


class CalendarAssistantError(Exception):
    """Base exception for all Calendar Assistant errors."""


class ConfigurationError(CalendarAssistantError):
    """Exception raised for configuration related errors."""


class ParseError(CalendarAssistantError):
    """Exception raised when generated text cannot be turned into usable data."""


class ValidationError(CalendarAssistantError):
    """Exception raised when an event draft or time range is structurally invalid."""


class GeneratorError(CalendarAssistantError):
    """Exception raised when the text generator fails to produce a response."""


class OllamaConnectionError(GeneratorError):
    """Exception raised for transient Ollama failures (network, timeout, 429, 5xx)."""


class CalendarAPIError(CalendarAssistantError):
    """Exception raised for Google Calendar API related errors."""


class AuthenticationError(CalendarAPIError):
    """Exception raised for authentication or permission failures."""


class NotFoundError(CalendarAPIError):
    """Exception raised when the configured calendar does not exist."""


class RateLimitError(CalendarAPIError):
    """Exception raised when the calendar API rate limit is exceeded."""


class ExpiredConfirmationError(CalendarAssistantError):
    """Exception raised when a decision arrives for a user with no pending draft."""
