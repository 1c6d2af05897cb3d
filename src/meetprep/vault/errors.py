"""Exceptions raised by the vault subsystem."""


class VaultError(Exception):
    """Base class for vault errors."""


class VaultValidationError(VaultError):
    """The vault root does not exist or is not a directory."""


class VaultNotConnectedError(VaultError):
    """An operation needs a connected vault and none is connected."""


class PathOutsideVaultError(VaultError):
    """A path resolves to a location outside the vault root."""

    def __init__(self, path: str):
        super().__init__(f"Access denied: {path} is outside the vault directory")
        self.path = path


class VaultFileMissingError(VaultError):
    """A read targeted a file that no longer exists.

    When ``rescanned`` is True this call triggered a full rescan; the caller
    should retry with fresh paths.
    """

    def __init__(self, path: str, rescanned: bool):
        name = path.rsplit("/", 1)[-1]
        if rescanned:
            message = f"File not found: {name}. The vault has been rescanned - please try again."
        else:
            message = f"File not found: {name}. A vault rescan is already in progress."
        super().__init__(message)
        self.path = path
        self.rescanned = rescanned


class VaultParseError(VaultError):
    """A single file could not be parsed into a VaultFile."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Failed to parse {path}: {reason}")
        self.path = path
        self.reason = reason
