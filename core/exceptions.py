# core/exceptions.py

class HistFuncError(Exception):
    """Base exception for histfunc errors."""
    pass

class OutOfRangeError(HistFuncError, IndexError):
    """Raised when a bin or axis index lies outside its valid bounds."""
    pass

class BinResolutionError(HistFuncError, IndexError):
    """Raised when observable values do not resolve to any bin."""
    pass

class ParameterError(HistFuncError):
    """Raised when parameter resolution or evaluation fails."""
    pass

class IntegrationError(HistFuncError):
    """Raised when an integral cannot be computed."""
    pass

class ConfigError(HistFuncError):
    """Raised when a model or scan configuration is invalid."""
    pass

class DegenerateBinWarning(UserWarning):
    """Nominal content of a bin does not allow a finite uncertainty seed."""
    pass
