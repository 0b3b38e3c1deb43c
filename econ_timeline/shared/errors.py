"""Error taxonomy for calendar runs.

Three levels of failure:
    - ProviderFailure: one schedule provider failed; the run continues.
    - SeriesFetchFailure: one upstream series could not be fetched; its events
      keep their schedule data and carry no values.
    - FatalRunFailure: the run cannot produce a snapshot (no snapshot to
      refresh, or no destination could be written).
"""


class CalendarError(Exception):
    """Base class for calendar pipeline errors."""


class ProviderFailure(CalendarError):
    """A schedule provider raised while collecting."""

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        self.message = message
        super().__init__(f"Provider '{provider}' failed: {message}")


class SeriesFetchFailure(CalendarError):
    """An upstream series fetch failed after retries."""

    def __init__(self, series_id: str, message: str) -> None:
        self.series_id = series_id
        self.message = message
        super().__init__(f"Series '{series_id}' fetch failed: {message}")


class FatalRunFailure(CalendarError):
    """The run cannot complete; the CLI exits non-zero."""
