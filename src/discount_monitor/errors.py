from __future__ import annotations


class MonitorError(Exception):
    """Base for everything the monitor raises on purpose."""


class ConfigInvalid(MonitorError):
    """
    Startup configuration is unusable (missing / placeholder credentials,
    out-of-range numbers). Fatal: the process exits before the first cycle.
    """
    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems) or "invalid configuration")


class SourceUnavailable(MonitorError):
    """Price API could not be reached or answered with an error."""


class MalformedQuotePayload(SourceUnavailable):
    """Price API answered, but the body has no usable quote data."""


class InvalidInput(MonitorError):
    """Evaluator refused to compute on missing / non-numeric / non-positive inputs."""
