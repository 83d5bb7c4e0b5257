"""Fatal error types. Recoverable failures are reported as step results."""


class CollectionError(Exception):
    """Base class for errors that abort a collection run."""

    step = "run"


class ConfigError(CollectionError):
    step = "config"


class WorkspaceError(CollectionError):
    step = "workspace"


class CredentialError(CollectionError):
    step = "credentials"


class CredentialNotFoundError(CredentialError):
    pass


class CredentialNotReadableError(CredentialError):
    pass


class InventoryError(CollectionError):
    step = "inventory"


class RemoteError(CollectionError):
    step = "remote"
