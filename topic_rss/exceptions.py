class RSSFetchError(Exception):
    """Raised when the topic feed cannot be fetched or parsed."""


class ParseError(Exception):
    """Raised when a feed entry cannot be parsed into expected fields."""


class GenerationError(Exception):
    """Raised when the text-generation call for one candidate fails."""


class ConfigurationError(Exception):
    """Raised when required credentials or settings are missing."""
