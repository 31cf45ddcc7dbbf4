"""Filtering, sorting and limiting of catalog records."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from raster_catalog.config.constants import SORT_FIELD_SPATIAL_RESOLUTION
from raster_catalog.errors import InvalidLimitError, UnsupportedSortError
from raster_catalog.geospatial.filters import SpatialFilter
from raster_catalog.models.models import CatalogRecord

SORT_KEYS: dict[str, Callable[[CatalogRecord], float]] = {
    SORT_FIELD_SPATIAL_RESOLUTION: lambda record: record.resolution.average,
}


@dataclass(frozen=True)
class SortSpec:
    """Single-field sort.

    :param field: Name of the field to sort on
    :param descending: Sort in descending order
    """

    field: str
    descending: bool = False

    def key(self) -> Callable[[CatalogRecord], float]:
        return SORT_KEYS[self.field]


def parse_sort(text: str) -> SortSpec:
    """Parse a ``[+|-]field`` sort expression.

    Surrounding whitespace is ignored, so a ``+`` decoded to a space by a URL
    query parser still sorts ascending.

    :param text: Sort expression
    :returns: SortSpec instance
    :raises UnsupportedSortError: If the field cannot be sorted on
    """
    expression = text.strip()
    descending = False
    if expression.startswith("+"):
        expression = expression[1:]
    elif expression.startswith("-"):
        descending = True
        expression = expression[1:]

    if expression not in SORT_KEYS:
        supported = ", ".join(f"`sortby={name}`" for name in SORT_KEYS)
        raise UnsupportedSortError(f"sortby currently only supports {supported}, got `{text}`")
    return SortSpec(field=expression, descending=descending)


def parse_limit(value: int | str | None) -> int | None:
    """Parse a result limit given as an integer or a numeric string.

    :param value: Limit value
    :returns: Non-negative limit, or None if no limit was supplied
    :raises InvalidLimitError: If the value is negative or not an integer
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidLimitError(f"limit must be a non-negative integer, got {value!r}")
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError as e:
            raise InvalidLimitError(f"limit must be a non-negative integer, got {value!r}") from e
    if not isinstance(value, int) or value < 0:
        raise InvalidLimitError(f"limit must be a non-negative integer, got {value!r}")
    return value


def query(
    records: Iterable[CatalogRecord],
    spatial_filter: SpatialFilter | None = None,
    sort: SortSpec | None = None,
    limit: int | None = None,
) -> list[CatalogRecord]:
    """Filter, sort and limit records.

    Sorting is stable, so records with equal keys keep their relative order.
    The limit is applied last.

    :param records: Records to query
    :param spatial_filter: Optional spatial filter
    :param sort: Optional sort
    :param limit: Optional maximum number of records
    :returns: Matching records
    """
    matched = [record for record in records if spatial_filter is None or spatial_filter.matches(record)]
    if sort is not None:
        matched = sorted(matched, key=sort.key(), reverse=sort.descending)
    if limit is not None:
        matched = matched[:limit]
    return matched
