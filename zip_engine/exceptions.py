"""Exception hierarchy for fatal puzzle and storage failures."""


class ZipError(Exception):
    """Base exception for the zip engine."""


class GridError(ZipError):
    """Raised when grid data is malformed (non-square, duplicate labels, ...)."""


class PuzzleLoadError(ZipError):
    """Raised when a puzzle set or a single puzzle cannot be loaded."""


class StoreError(ZipError):
    """Base class for account and progress storage failures."""


class UserExistsError(StoreError):
    """Raised when registering a username that is already taken."""


class UserNotFoundError(StoreError):
    """Raised when a username is unknown."""


class AuthenticationError(StoreError):
    """Raised when a password does not match."""
