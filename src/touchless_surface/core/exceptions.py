"""Exception hierarchy for the Touchless Surface engine."""


class TouchlessError(Exception):
    """Base class for all errors raised by this package."""


class AcquisitionError(TouchlessError):
    """Camera or inference engine could not be opened.

    Raised once at setup; the frame loop never starts after it.
    """


class ConfigError(TouchlessError):
    """An explicitly requested configuration file is missing or invalid."""
