"""
Exceptions raised by pipeline steps. Only runner.main catches them.
"""

from enum import Enum


class BriefingError(Exception):
    """Base class for errors that abort a briefing run."""


class ConfigError(BriefingError):
    pass


class FeedError(BriefingError):
    """A feed could not be fetched or parsed."""

    def __init__(self, label, url, reason):
        super().__init__("{} ({}): {}".format(label, url, reason))
        self.label = label
        self.url = url
        self.reason = reason


class FailureKind(Enum):
    """Why a single categorization attempt failed."""
    AUTH = "auth"            # bad or missing credentials, never retried
    REQUEST = "request"      # HTTP/network error or unexpected payload
    EMPTY = "empty"          # model returned no text
    MALFORMED = "malformed"  # text is not JSON of the expected shape


class LLMError(BriefingError):
    def __init__(self, kind, message):
        super().__init__("[{}] {}".format(kind.value, message))
        self.kind = kind
        self.message = message


class CategorizationFailed(BriefingError):
    """Terminal failure of the categorization step."""

    def __init__(self, kind, attempts, last_error=None):
        super().__init__("categorization failed after {} attempt(s): {}".format(
            attempts, last_error if last_error else kind.value))
        self.kind = kind
        self.attempts = attempts
        self.last_error = last_error


class PublishError(BriefingError):
    pass
