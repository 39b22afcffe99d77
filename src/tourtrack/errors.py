# tourtrack/errors

"""
tourtrack.errors

Central exception hierarchy for TourTrack.

Rationale:
  - The track engine raises specific, meaningful errors.
  - Callers can catch TourTrackError (broad) or specific subclasses (narrow).
  - Degenerate numbers (zero elapsed time, zero distance) are NOT errors;
    they are handled by zero-guards in the engine itself.
"""


class TourTrackError(RuntimeError):
    """Base class for all TourTrack runtime errors."""


# ---- Track engine errors -----------------------

class TrackError(TourTrackError):
    """Errors raised while parsing, summarizing or synchronizing a track."""

class ParseError(TrackError):
    """GPX document is malformed, empty, or carries an unreadable track point."""

class EmptyTrackError(TrackError):
    """A playback query was made against a track with zero points."""

class InvalidDurationError(TrackError, ValueError):
    """Video duration is not a positive number of seconds."""


# ---- Selection / CLI errors --------------------

class SelectionError(TourTrackError):
    """Errors in interactive GPX file selection."""

class FzfNotFoundError(SelectionError):
    """fzf is required but not available on PATH."""


# ---- Configuration errors ----------------------

class ConfigError(TourTrackError):
    """Configuration file or override could not be interpreted."""
