"""The service registry: root of all catalog queries."""

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from raster_catalog.catalog.collection import Collection
from raster_catalog.errors import DuplicateCollectionError
from raster_catalog.models.models import CatalogRecord


class Registry:
    """Service identity plus its collections.

    One registry is built per process run and passed explicitly to every
    query. It is never mutated while serving; a refresh must build a new
    registry and swap it in.

    :param id: Service ID
    :param title: Service title
    :param description: Service description
    :param base_url: Address the service is advertised at
    :param collections: Collections served by the registry
    """

    def __init__(
        self,
        id: str,
        title: str,
        description: str,
        base_url: str,
        collections: Iterable[Collection] = (),
    ) -> None:
        self.id = id
        self.title = title
        self.description = description
        self.base_url = base_url

        by_id: dict[str, Collection] = {}
        for collection in collections:
            if collection.id in by_id:
                raise DuplicateCollectionError(f"Collection {collection.id} is registered more than once")
            by_id[collection.id] = collection
        self._collections = MappingProxyType(by_id)

    @property
    def collections(self) -> Mapping[str, Collection]:
        return self._collections

    def get_collection(self, collection_id: str) -> Collection | None:
        """Get a collection by ID.

        :param collection_id: Collection ID
        :returns: The collection, or None if it is not registered
        """
        return self._collections.get(collection_id)

    def all_records(self, collection_ids: Iterable[str] | None = None) -> list[CatalogRecord]:
        """Records of every collection, optionally restricted to some collection IDs.

        Unknown collection IDs are ignored.

        :param collection_ids: Optional collection IDs to restrict to
        :returns: Records in collection order
        """
        if collection_ids is None:
            selected = list(self._collections.values())
        else:
            selected = [self._collections[cid] for cid in dict.fromkeys(collection_ids) if cid in self._collections]
        return [record for collection in selected for record in collection.all()]

    def __repr__(self) -> str:
        return f"Registry(id={self.id!r}, collections={list(self._collections)})"
