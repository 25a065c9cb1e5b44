"""Exception types for the registration store, view and export."""


class RegistryError(Exception):
    """Base class for registry errors."""


class FetchError(RegistryError):
    """The store could not be read (unreachable, broken data)."""


class PermissionDenied(FetchError):
    """The store refused access, most likely an access-rule misconfiguration."""

    def __init__(self, message: str = ""):
        super().__init__(
            message
            or "Permission denied. Check the store's access rules for this collection."
        )


class QueryError(FetchError):
    """The store rejected a query."""


class OrderingUnsupported(QueryError):
    """The store cannot order by the requested field (e.g. missing index)."""


class WriteError(RegistryError):
    """A record could not be written."""


class ExportError(RegistryError):
    """Nothing to export."""


class ValidationError(RegistryError):
    """A single form field failed validation."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message
