class CatalogError(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidRequest(CatalogError):
    """Pagination bounds outside the accepted range."""


class InvalidFilterValue(CatalogError):
    """Filter name or value outside its allowed domain."""

    def __init__(self, message: str, *, filter_name: str | None = None) -> None:
        self.filter_name = filter_name
        super().__init__(message)


class UnsupportedLocale(CatalogError):
    """Locale string is not part of the supported enumeration."""


class StorageUnavailable(CatalogError):
    """The database could not answer (connection, timeout or execution failure)."""
