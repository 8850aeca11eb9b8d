"""Exceptions raised by remotedit."""


class RemoteEditError(Exception):
    """Base exception for remotedit errors."""


class RemoteConfigError(RemoteEditError):
    """Raised when settings are missing or cannot be read."""


class WorkspaceError(RemoteEditError):
    """Raised when a workspace cannot be opened or a file operation fails."""


class RemoteAPIError(RemoteEditError):
    """Raised when the remote endpoint answers with an HTTP error."""


class RemoteNetworkError(RemoteAPIError):
    """Raised when the remote endpoint cannot be reached."""


class NoResponseError(RemoteNetworkError):
    """Raised when the remote endpoint did not answer at all."""


class RemoteInvalidResponseError(RemoteAPIError):
    """Raised when the remote endpoint answers with something that is not JSON."""
