from typing import Optional

class PulseError(Exception):
    """Base exception for all noise pulse errors."""
    pass

class ConfigurationError(PulseError):
    """Raised when configuration is invalid or a required input is missing."""
    pass

class DatasetError(PulseError):
    """Raised when the historical dataset cannot answer a query."""
    pass

class StorageError(PulseError):
    """
    Describes a failed storage write.
    Carried inside a StorageResult; adapters do not raise it.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
