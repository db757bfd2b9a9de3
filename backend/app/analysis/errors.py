"""Analysis error taxonomy.

Each error carries a machine-usable ``code``, the HTTP status the API maps it
to, and a single human-readable message suitable for display as-is.
"""


class AnalysisError(Exception):
    """Base class for analysis failures."""

    code = "analysis_failed"
    status_code = 500
    default_message = "Something went wrong while analyzing your text. Please try again."

    def __init__(self, message: str | None = None) -> None:
        self.user_message = message or self.default_message
        super().__init__(self.user_message)


class EmptyContentError(AnalysisError):
    """Submitted content is empty or whitespace only."""

    code = "empty_content"
    status_code = 400
    default_message = "Please enter some text to analyze."


class ContentTooLongError(AnalysisError):
    """Submitted content exceeds the word limit."""

    code = "content_too_long"
    status_code = 400

    def __init__(self, word_count: int, max_words: int) -> None:
        self.word_count = word_count
        self.max_words = max_words
        super().__init__(
            f"Your text has {word_count:,} words; the limit is {max_words:,}. "
            "Please shorten it and try again."
        )


class InvalidModeError(AnalysisError):
    """Requested analysis mode is not one of the known rubrics."""

    code = "invalid_mode"
    status_code = 400

    def __init__(self, mode: object) -> None:
        self.mode = mode
        super().__init__(
            f"Unknown analysis mode {mode!r}. Choose one of: language, policy, recruitment."
        )


class MalformedResponseError(AnalysisError):
    """Engine returned unparseable or structurally invalid JSON."""

    code = "malformed_response"
    status_code = 500
    default_message = "The analysis service returned an unexpected response. Please try again."


class RateLimitedError(AnalysisError):
    """Engine or local limiter refused the request; the caller may retry later."""

    code = "rate_limited"
    status_code = 429
    default_message = "Too many analysis requests right now. Please wait a moment and try again."

    def __init__(self, message: str | None = None, retry_after: int | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(message)


class EngineAuthError(AnalysisError):
    """Engine rejected our credentials."""

    code = "engine_auth_failed"
    status_code = 500
    default_message = "The analysis service is not configured correctly. Please contact support."


class EngineError(AnalysisError):
    """Any other engine failure; carries the provider's message."""

    code = "engine_error"
    status_code = 500

    def __init__(self, provider_message: str, status: int | None = None) -> None:
        self.provider_message = provider_message
        self.status = status
        super().__init__(f"The analysis service failed: {provider_message}")
