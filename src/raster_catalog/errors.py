"""Error taxonomy for ingestion and catalog queries."""

from typing import ClassVar


class CatalogError(Exception):
    """Base class for all raster catalog errors."""


class IngestionSkipError(CatalogError):
    """A raster resource could not be read or normalized and is left out of the catalog."""


class ReprojectionError(IngestionSkipError):
    """Coordinate transformation failed for a single record."""


class DuplicateRecordError(IngestionSkipError):
    """A record id is already present in the collection being built."""


class CallerError(CatalogError):
    """A request was rejected because of its parameters.

    :param code: Short error name reported to callers
    """

    code: ClassVar[str] = "BadRequest"


class MalformedFilterError(CallerError):
    """WKT or bbox could not be parsed, or the geometry type is wrong for the filter."""

    code = "MalformedFilter"


class UnsupportedSortError(CallerError):
    """Sort expression names a field that cannot be sorted on."""

    code = "UnsupportedSort"


class ConflictingFiltersError(CallerError):
    """More than one spatial filter was supplied in one request."""

    code = "ConflictingFilters"


class InvalidLimitError(CallerError):
    """Limit is negative or not an integer."""

    code = "InvalidLimit"


class DuplicateCollectionError(CatalogError):
    """A collection id is registered more than once in the registry."""
