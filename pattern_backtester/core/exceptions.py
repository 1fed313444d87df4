"""
Custom exceptions for the pattern backtester.
"""


class PatternBacktesterError(Exception):
    """Base exception for the pattern backtester"""
    pass


class InvalidInputError(PatternBacktesterError):
    """Raised when input fails validation before any computation runs"""
    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(message)


class InsufficientDataError(PatternBacktesterError):
    """Raised when there is no data (or too little) to compute a result"""
    def __init__(self, message: str, required: int = None, available: int = None):
        self.required = required
        self.available = available
        if required is not None and available is not None:
            message = f"{message}: need {required} bars, have {available}"
        super().__init__(message)


class ConfigurationError(PatternBacktesterError):
    """Raised when a configuration object fails validation"""
    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("Invalid configuration: " + "; ".join(self.errors))
