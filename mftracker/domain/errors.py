"""
Domain Errors
Caller contract violations raised at the boundary (construction, mutation, import).
Degenerate input (empty portfolio, zero capital) is never an error.
"""


class MFTrackerError(Exception):
    """Base class for all domain errors"""


class InvalidHoldingError(MFTrackerError, ValueError):
    """Holding violates a field invariant"""


class DuplicateHoldingIdError(MFTrackerError, ValueError):
    """Two holdings in one snapshot share an id"""


class HoldingNotFoundError(MFTrackerError, KeyError):
    """No holding with the requested id"""


class UnknownRiskProfileError(MFTrackerError, KeyError):
    """Risk profile name outside the enumerated set"""


class PortfolioImportError(MFTrackerError, ValueError):
    """Uploaded CSV/JSON document could not be turned into holdings"""
