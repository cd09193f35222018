"""Failure types surfaced by the prompt service.

Not-found is deliberately absent: lookups return None and the handler layer
turns that into a "not found" response.
"""


class ConfigurationError(ValueError):
    """Required connector configuration is missing. Fatal at startup."""


class UpstreamFetchError(RuntimeError):
    """The storage connector could not retrieve prompts.

    The message is safe to show to callers; the original exception is kept
    as ``__cause__``.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
