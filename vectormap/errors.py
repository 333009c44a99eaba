"""Error taxonomy for the vector map engine.

- ConfigurationError: bad configuration detected before any state exists
  (unregistered map name, malformed map definition).
- InvalidStateError: an operation was invoked outside its valid lifecycle
  state (re-baselining a viewport, using a destroyed map, ...).

Soft-fail conditions (absent keys, unknown focus targets) never raise.
"""


class ConfigurationError(ValueError):
    """Raised when map configuration is invalid or references unknown data."""


class InvalidStateError(RuntimeError):
    """Raised when an operation is not allowed in the current lifecycle state."""
