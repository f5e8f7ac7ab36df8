"""Exception types raised by paramesh."""


class InvalidConfigurationError(ValueError):
    """Raised when an evaluator, driver or primitive is configured with
    arguments it cannot work with.

    All such checks happen at construction (or call-setup) time; evaluation
    itself never raises for out-of-range parameters.
    """

    def __init__(self, message, details=None):
        super().__init__(message)
        self.details = details or {}


__all__ = ['InvalidConfigurationError']
