"""Footprint and ground-resolution normalization for raster headers.

The extent rectangle ignores the geotransform skew terms. This is a known
approximation: rotated rasters get an axis-aligned footprint in source units.
Resolution is reported in meters only when the source CRS looks geographic
(see ``is_geographic``); projected rasters keep their native map units.
"""

import math
from collections.abc import Callable, Sequence
from typing import NamedTuple

import rasterio.warp
from rasterio.crs import CRS
from shapely.geometry import Polygon
from shapely.geometry.polygon import orient

from raster_catalog.config.constants import EARTH_RADIUS_METERS, GEOGRAPHIC_CRS, GEOGRAPHIC_TOLERANCE
from raster_catalog.errors import IngestionSkipError, ReprojectionError
from raster_catalog.models.models import Resolution

CoordinateTransformer = Callable[[str, str, Sequence[float], Sequence[float]], tuple[Sequence[float], Sequence[float]]]


class Geotransform(NamedTuple):
    """Six-coefficient affine mapping from pixel grid to map coordinates, in GDAL order."""

    origin_x: float
    pixel_width: float
    x_skew: float
    origin_y: float
    y_skew: float
    pixel_height: float

    @classmethod
    def from_gdal(cls, coefficients: Sequence[float]) -> "Geotransform":
        """Create Geotransform from a GDAL-ordered sequence.

        :param coefficients: Six coefficients
        :returns: Geotransform instance
        """
        if len(coefficients) != 6:
            raise IngestionSkipError(f"Geotransform needs 6 coefficients, got {len(coefficients)}")
        return cls(*(float(c) for c in coefficients))


def reproject_points(
    src_crs: str, dst_crs: str, xs: Sequence[float], ys: Sequence[float]
) -> tuple[Sequence[float], Sequence[float]]:
    """Reproject points with rasterio/GDAL.

    :param src_crs: Source CRS identifier (EPSG code, PROJ string or WKT)
    :param dst_crs: Destination CRS identifier
    :param xs: X coordinates
    :param ys: Y coordinates
    :returns: Tuple of (xs, ys) in the destination CRS
    :raises ReprojectionError: If the transformation fails
    """
    try:
        out_xs, out_ys = rasterio.warp.transform(
            CRS.from_user_input(src_crs), CRS.from_user_input(dst_crs), list(xs), list(ys)
        )
    except Exception as e:
        raise ReprojectionError(f"Could not transform from {src_crs} to {dst_crs}: {e}") from e
    return out_xs, out_ys


def _transform(
    transformer: CoordinateTransformer, src_crs: str, xs: Sequence[float], ys: Sequence[float]
) -> tuple[list[float], list[float]]:
    try:
        out_xs, out_ys = transformer(src_crs, GEOGRAPHIC_CRS, xs, ys)
    except ReprojectionError:
        raise
    except Exception as e:
        raise ReprojectionError(f"Could not transform from {src_crs} to {GEOGRAPHIC_CRS}: {e}") from e

    out_xs, out_ys = [float(x) for x in out_xs], [float(y) for y in out_ys]
    if len(out_xs) != len(xs) or len(out_ys) != len(ys):
        raise ReprojectionError(f"Transform from {src_crs} returned the wrong number of points")
    if not all(math.isfinite(v) for v in (*out_xs, *out_ys)):
        raise ReprojectionError(f"Transform from {src_crs} returned non-finite coordinates")
    return out_xs, out_ys


def raster_extent(width: int, height: int, geotransform: Geotransform) -> Polygon:
    """Axis-aligned footprint of a raster in source CRS units.

    Skew is ignored: ``xmax = xmin + width * pixel_width`` and
    ``ymax = ymin + height * pixel_height``.

    :param width: Raster width in pixels
    :param height: Raster height in pixels
    :param geotransform: Raster geotransform
    :returns: Counter-clockwise rectangle
    """
    xmin, ymin = geotransform.origin_x, geotransform.origin_y
    xmax = xmin + width * geotransform.pixel_width
    ymax = ymin + height * geotransform.pixel_height

    left, right = min(xmin, xmax), max(xmin, xmax)
    bottom, top = min(ymin, ymax), max(ymin, ymax)
    return Polygon([(left, bottom), (right, bottom), (right, top), (left, top), (left, bottom)])


def resolution_from_geotransform(geotransform: Geotransform) -> Resolution:
    """Pixel size in source CRS units, including skew.

    :param geotransform: Raster geotransform
    :returns: Resolution in source units
    """
    return Resolution(
        x=math.hypot(geotransform.pixel_width, geotransform.x_skew),
        y=math.hypot(geotransform.pixel_height, geotransform.y_skew),
    )


def haversine_distance(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    """Great-circle distance between two longitude/latitude points in meters."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = phi2 - phi1
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(a)))


def is_geographic(geotransform: Geotransform, crs: str, transformer: CoordinateTransformer) -> bool:
    """Guess whether the source CRS is already geographic.

    The origin must lie within longitude/latitude ranges and map onto itself
    when reprojected to EPSG:4326. This is a heuristic and can misjudge
    projected systems whose origin happens to satisfy both checks.

    :param geotransform: Raster geotransform
    :param crs: Source CRS identifier
    :param transformer: Coordinate transform capability
    :returns: True if the source looks geographic
    """
    x, y = geotransform.origin_x, geotransform.origin_y
    if not (-180 <= x <= 180 and -90 <= y <= 90):
        return False
    out_xs, out_ys = _transform(transformer, crs, [x], [y])
    return math.hypot(out_xs[0] - x, out_ys[0] - y) <= GEOGRAPHIC_TOLERANCE


def ground_resolution(geotransform: Geotransform, crs: str, transformer: CoordinateTransformer) -> Resolution:
    """Resolution of one pixel, in meters for geographic sources.

    :param geotransform: Raster geotransform
    :param crs: Source CRS identifier
    :param transformer: Coordinate transform capability
    :returns: Resolution instance
    :raises IngestionSkipError: If the pixel size is zero
    """
    if geotransform.pixel_width == 0 or geotransform.pixel_height == 0:
        raise IngestionSkipError("Geotransform has a zero pixel size")
    native = resolution_from_geotransform(geotransform)
    if not is_geographic(geotransform, crs, transformer):
        return native

    x, y = geotransform.origin_x, geotransform.origin_y
    xs, ys = _transform(
        transformer,
        crs,
        [x, x + geotransform.pixel_width, x],
        [y, y, y + geotransform.pixel_height],
    )
    return Resolution(
        x=haversine_distance(xs[0], ys[0], xs[1], ys[1]),
        y=haversine_distance(xs[0], ys[0], xs[2], ys[2]),
    )


def normalize_footprint(
    width: int,
    height: int,
    geotransform: Geotransform,
    crs: str,
    transformer: CoordinateTransformer = reproject_points,
) -> tuple[Polygon, Resolution]:
    """Compute the geographic boundary and ground resolution of a raster.

    :param width: Raster width in pixels
    :param height: Raster height in pixels
    :param geotransform: Raster geotransform
    :param crs: Source CRS identifier
    :param transformer: Coordinate transform capability
    :returns: Tuple of (boundary in EPSG:4326, resolution)
    :raises IngestionSkipError: If the raster cannot be normalized
    """
    if width <= 0 or height <= 0:
        raise IngestionSkipError(f"Raster has an empty grid ({width}x{height})")

    extent = raster_extent(width, height, geotransform)
    xs, ys = extent.exterior.coords.xy
    out_xs, out_ys = _transform(transformer, crs, list(xs), list(ys))
    boundary = orient(Polygon(list(zip(out_xs, out_ys))), sign=1.0)

    return boundary, ground_resolution(geotransform, crs, transformer)
