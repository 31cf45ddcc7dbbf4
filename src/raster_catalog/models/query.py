"""Request and outcome models of the catalog query surface."""

from pydantic import BaseModel, Field as PydanticField

from raster_catalog.errors import CallerError


class SearchRequest(BaseModel):
    """Search across collections.

    ``limit`` may be given as a number or a numeric string.
    """

    collections: list[str] | None = PydanticField(default=None, description="Collection IDs to search")
    bbox: list[float] | None = PydanticField(default=None, description="minx, miny, maxx, maxy")
    intersects: str | None = PydanticField(default=None, description="WKT geometry records must intersect")
    contains: str | None = PydanticField(default=None, description="WKT polygon records must contain")
    sortby: str | None = PydanticField(default=None, description="Sort expression, e.g. -spatial_resolution")
    limit: int | str | None = PydanticField(default=None, description="Maximum number of items")


class NotFound(BaseModel):
    """A collection or item does not exist.

    :param resource: Kind of resource, "collection" or "item"
    :param id: Requested ID
    """

    resource: str
    id: str

    @property
    def message(self) -> str:
        return f"{self.resource.capitalize()} not found: {self.id}"


class BadRequest(BaseModel):
    """A request was rejected because of its parameters.

    :param error: Error name, e.g. "MalformedFilter"
    :param reason: Human readable explanation
    """

    error: str
    reason: str

    @classmethod
    def from_error(cls, error: CallerError) -> "BadRequest":
        return cls(error=error.code, reason=str(error))
