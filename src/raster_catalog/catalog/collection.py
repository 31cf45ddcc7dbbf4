"""Collections of catalog records."""

from collections.abc import Iterable, Iterator

from raster_catalog.errors import DuplicateRecordError
from raster_catalog.models.models import CatalogRecord


def _owned_by(record: CatalogRecord, collection_id: str) -> CatalogRecord:
    if record.collection_id == collection_id:
        return record
    return record.model_copy(update={"collection_id": collection_id})


class Collection:
    """A named, titled group of records. Read-only once constructed.

    :param id: Collection ID, unique within the registry
    :param title: Collection title
    :param description: Collection description
    :param records: Records owned by the collection
    """

    def __init__(self, id: str, title: str, description: str, records: Iterable[CatalogRecord] = ()) -> None:
        self._id = id
        self._title = title
        self._description = description
        self._records = tuple(_owned_by(record, id) for record in records)
        self._by_id: dict[str, CatalogRecord] = {}
        for record in self._records:
            if record.id in self._by_id:
                raise DuplicateRecordError(f"Record {record.id} appears more than once in collection {id}")
            self._by_id[record.id] = record

    @property
    def id(self) -> str:
        return self._id

    @property
    def title(self) -> str:
        return self._title

    @property
    def description(self) -> str:
        return self._description

    def all(self) -> tuple[CatalogRecord, ...]:
        """Return all records in insertion order."""
        return self._records

    def get_item(self, item_id: str) -> CatalogRecord | None:
        """Get a record by its ID.

        :param item_id: Record ID
        :returns: The record, or None if the collection has no such record
        """
        return self._by_id.get(item_id)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[CatalogRecord]:
        return iter(self._records)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._by_id

    def __repr__(self) -> str:
        return f"Collection(id={self._id!r}, records={len(self._records)})"


class CollectionBuilder:
    """Single writer that appends records during the build phase.

    :param id: Collection ID
    :param title: Collection title
    :param description: Collection description
    """

    def __init__(self, id: str, title: str, description: str) -> None:
        self.id = id
        self.title = title
        self.description = description
        self._records: list[CatalogRecord] = []
        self._ids: set[str] = set()

    def add(self, record: CatalogRecord) -> CatalogRecord:
        """Append a record.

        :param record: Record to append
        :returns: The record as owned by this collection
        :raises DuplicateRecordError: If a record with the same ID was already added
        """
        if record.id in self._ids:
            raise DuplicateRecordError(f"Record {record.id} already exists in collection {self.id}")
        owned = _owned_by(record, self.id)
        self._records.append(owned)
        self._ids.add(record.id)
        return owned

    def build(self) -> Collection:
        """Freeze the appended records into a Collection.

        :returns: Collection instance
        """
        return Collection(self.id, self.title, self.description, self._records)
