"""Exceptions raised by storagemeter."""


class StorageMeterError(Exception):
    """Base class for storagemeter errors."""


class ConfigurationError(StorageMeterError):
    """Configuration is unusable (bad limit, undefined category, ...)."""


class MeasurementFailure(StorageMeterError):
    """A path could not be measured."""

    def __init__(self, path: str, cause: str):
        self.path = str(path)
        self.cause = cause
        super().__init__(f"{self.path}: {cause}")
