class SimonError(Exception):
    """Base error for Simon Kawaii domain exceptions."""


class StorageError(SimonError):
    """Raised when a record store cannot persist the record."""


class CorruptRecordError(StorageError):
    """Raised when a persisted record cannot be decoded."""


class ConfigError(SimonError):
    """Raised when configuration files cannot be parsed."""
