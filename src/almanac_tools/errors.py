"""Exception hierarchy for ephemeris loading and apparent-place calculation."""

from __future__ import annotations


class AlmanacError(Exception):
    """Base exception for almanac-tools errors.

    Parameters:
        message: Error description.
        suggestions: Optional actionable hints shown by the CLI.
    """

    def __init__(self, message: str, suggestions: list[str] | None = None) -> None:
        self.message = message
        self.suggestions = suggestions or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format message with suggestions appended one per line."""
        formatted = self.message
        if self.suggestions:
            formatted += '\n\nSuggestions:'
            for suggestion in self.suggestions:
                formatted += f'\n  - {suggestion}'
        return formatted


class FormatError(AlmanacError):
    """Raised when an ephemeris file header cannot be interpreted."""


class RangeError(AlmanacError, ValueError):
    """Raised for a time outside the loaded span or an absent body component."""


class StateError(AlmanacError, RuntimeError):
    """Raised when a result accessor is used before a successful calculation."""


class ConfigError(AlmanacError):
    """Raised for inconsistent construction arguments (e.g. start after end)."""


class ConvergenceError(AlmanacError):
    """Raised when the light-time iteration does not converge."""

    def __init__(self, iterations: int, last_change: float) -> None:
        self.iterations = iterations
        self.last_change = last_change
        super().__init__(
            f'Light-time iteration did not converge after {iterations} iterations '
            f'(last change {last_change:.3e} days)',
            ['Check that target and observer positions are physically plausible'],
        )


def date_out_of_range(jd: float, earliest: float, latest: float) -> RangeError:
    """Build the RangeError raised for a date outside the loaded span."""
    return RangeError(
        f'Date {jd!r} is out of range [{earliest!r}, {latest!r}]',
        ['Check the date against earliest_date/latest_date before evaluating'],
    )
