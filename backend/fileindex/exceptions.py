"""Exception hierarchy for the file index service."""


class FileIndexError(Exception):
    """Base exception for all file index errors."""
    pass


class ScanInProgressError(FileIndexError):
    """Raised when a scan is requested while another one is running."""

    def __init__(self, message: str = "A scan is already in progress"):
        super().__init__(message)


class InvalidScanRootError(FileIndexError):
    """Raised when the scan root is missing or not a directory."""
    pass


class StoreError(FileIndexError):
    """Raised when a record store operation fails."""
    pass


class StoreUnavailableError(StoreError):
    """Raised when the store cannot be reached, even after reconnecting."""
    pass
