"""Exception kinds raised by the payout engine.

Every error is a ``ValueError`` so callers that already guard on bad input
with ``except ValueError`` keep working.  A paytable miss is *not* an error;
it simply contributes zero to the payout.
"""


class SlotEngineError(ValueError):
    """Base class for all engine errors."""


class PayoutValidationError(SlotEngineError):
    """The caller passed a malformed grid, bet or line count."""


class PayoutRangeError(PayoutValidationError):
    """A parameter is of the right type but outside its legal domain."""


class ConfigurationError(SlotEngineError):
    """Machine configuration is inconsistent (bitmap size, empty pool, ...)."""
