"""Spatial filters for catalog queries.

Spatial filters are mutually exclusive: a request may supply at most one of
``intersects``, ``contains`` or ``bbox``.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

import shapely
from shapely import wkt
from shapely.errors import ShapelyError
from shapely.geometry import Polygon, box
from shapely.geometry.base import BaseGeometry

from raster_catalog.errors import ConflictingFiltersError, MalformedFilterError
from raster_catalog.models.models import CatalogRecord

WKT_EXAMPLE = "POLYGON ((30 10, 40 40, 20 40, 10 20, 30 10))"


class SpatialPredicate(str, Enum):
    INTERSECTS = "intersects"
    CONTAINS = "contains"


@dataclass(frozen=True)
class SpatialFilter:
    """A spatial predicate against a query geometry in longitude/latitude.

    :param predicate: Predicate to evaluate against each record boundary
    :param geometry: Query geometry
    """

    predicate: SpatialPredicate
    geometry: BaseGeometry

    @classmethod
    def intersects(cls, geometry: BaseGeometry) -> "SpatialFilter":
        return cls(SpatialPredicate.INTERSECTS, geometry)

    @classmethod
    def contains(cls, geometry: BaseGeometry) -> "SpatialFilter":
        """Build a containment filter; only polygons can be contained.

        :param geometry: Query polygon
        :returns: SpatialFilter instance
        :raises MalformedFilterError: If geometry is not a Polygon
        """
        if not isinstance(geometry, Polygon):
            raise MalformedFilterError(
                f"`contains` requires a POLYGON, got {geometry.geom_type.upper()}. "
                f"Example of a valid query: ?contains={WKT_EXAMPLE}"
            )
        return cls(SpatialPredicate.CONTAINS, geometry)

    @classmethod
    def bbox(cls, minx: float, miny: float, maxx: float, maxy: float) -> "SpatialFilter":
        """Build an intersects filter from a bounding box.

        :raises MalformedFilterError: If min values are not below max values
        """
        if minx >= maxx or miny >= maxy:
            raise MalformedFilterError(
                "Invalid bbox. bbox must contain 4 numbers in the following format: bbox=minx,miny,maxx,maxy"
            )
        return cls(SpatialPredicate.INTERSECTS, box(minx, miny, maxx, maxy))

    def matches(self, record: CatalogRecord) -> bool:
        """Evaluate the filter against a record.

        ``contains`` holds when the record boundary (interior and boundary)
        covers the query polygon entirely.

        :param record: Catalog record
        :returns: True if the record passes the filter
        """
        if self.predicate is SpatialPredicate.CONTAINS:
            return bool(record.boundary.covers(self.geometry))
        return bool(record.boundary.intersects(self.geometry))


def parse_wkt(text: str, param: str = "intersects") -> BaseGeometry:
    """Parse WKT supplied in a query parameter.

    :param text: WKT text
    :param param: Name of the parameter, used in the error message
    :returns: Parsed geometry
    :raises MalformedFilterError: If the text is not valid WKT
    """
    try:
        geometry = wkt.loads(text)
    except (ShapelyError, ValueError, TypeError, AttributeError) as e:
        raise MalformedFilterError(
            f"Invalid WKT in `{param}` query param. Example of a valid query: ?{param}={WKT_EXAMPLE}"
        ) from e
    if geometry.is_empty:
        raise MalformedFilterError(f"Empty geometry in `{param}` query param")
    coordinates = shapely.get_coordinates(geometry, include_z=bool(shapely.has_z(geometry)))
    if not all(math.isfinite(v) for v in coordinates.flat):
        raise MalformedFilterError(f"Non-finite coordinates in `{param}` query param")
    return geometry


def parse_bbox(value: str | Sequence[float | str]) -> tuple[float, float, float, float]:
    """Parse a bbox given as ``"minx,miny,maxx,maxy"`` or a sequence of four numbers.

    :param value: Bbox text or sequence
    :returns: Tuple of (minx, miny, maxx, maxy)
    :raises MalformedFilterError: If the value does not hold four numbers
    """
    parts = value.split(",") if isinstance(value, str) else list(value)
    try:
        numbers = [float(v) for v in parts]
    except (TypeError, ValueError) as e:
        raise MalformedFilterError("Invalid bbox format, expected comma-separated floats") from e
    if len(numbers) != 4:
        raise MalformedFilterError("Invalid bbox, expected four values: minx,miny,maxx,maxy")
    if not all(math.isfinite(n) for n in numbers):
        raise MalformedFilterError("Invalid bbox, values must be finite numbers")
    minx, miny, maxx, maxy = numbers
    return minx, miny, maxx, maxy


def build_spatial_filter(
    intersects: str | None = None,
    contains: str | None = None,
    bbox: str | Sequence[float | str] | None = None,
) -> SpatialFilter | None:
    """Build the spatial filter of a request.

    :param intersects: WKT geometry records must intersect
    :param contains: WKT polygon records must contain
    :param bbox: Bounding box records must intersect
    :returns: SpatialFilter, or None if no spatial filter was supplied
    :raises ConflictingFiltersError: If more than one filter is supplied
    :raises MalformedFilterError: If the filter cannot be parsed
    """
    candidates = {"bbox": bbox, "intersects": intersects, "contains": contains}
    supplied = [name for name, value in candidates.items() if value is not None]
    if len(supplied) > 1:
        raise ConflictingFiltersError(f"Use only one of: bbox, intersects or contains (got {', '.join(supplied)})")

    if intersects is not None:
        return SpatialFilter.intersects(parse_wkt(intersects, "intersects"))
    if contains is not None:
        return SpatialFilter.contains(parse_wkt(contains, "contains"))
    if bbox is not None:
        return SpatialFilter.bbox(*parse_bbox(bbox))
    return None
