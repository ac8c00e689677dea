"""
Collection store with relationship resolution.

A collection is a group of resources, similar to a table; a resource is one
record keyed by a generated primary key. Relationships between collections are
declared in each collection's schema:

- ``has``: one-to-many, the other collection holds the foreign key.
- ``belongsTo``: many-to-one, this collection holds the foreign key.

The foreign key pointing at collection ``X`` is the field ``X + fk_suffix``
(``customers.id`` with the default suffix). The whole store is written to the
backing file after every mutation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional
import copy
import logging
import secrets

from mockapi.core.config import Settings
from mockapi.domain.schema import (
    CollectionSchema,
    InvalidSchemaError,
    RelationKind,
    loose_equals,
)
from mockapi.repositories.json_storage import (
    CorruptDataError,
    JsonStorage,
    PersistenceError,
    read_schema_file,
)

logger = logging.getLogger(__name__)

DEFAULT_FK_SUFFIX = ".id"


class DataStoreError(Exception):
    """Base exception for the collection store."""


class MissingSchemaError(DataStoreError):
    """Raised when there is no persisted store and no schema to seed one."""


@dataclass
class Collection:
    schema: CollectionSchema
    resources: dict[str, dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, name: str, raw: Any) -> "Collection":
        if not isinstance(raw, Mapping):
            raise InvalidSchemaError(f"Collection '{name}' must be an object")
        # a bare schema ({"fields": [...]}) is accepted for initial definitions
        schema_raw = raw["schema"] if "schema" in raw else raw
        resources_raw = raw.get("resources")
        if resources_raw in (None, []):
            resources_raw = {}
        if not isinstance(resources_raw, Mapping):
            raise InvalidSchemaError(f"Resources of '{name}' must be an object keyed by id")
        resources = {}
        for pk, values in resources_raw.items():
            if not isinstance(values, Mapping):
                raise InvalidSchemaError(f"Resource '{pk}' of '{name}' must be an object")
            resources[str(pk)] = dict(values)
        return cls(schema=CollectionSchema.from_dict(name, schema_raw), resources=resources)

    def to_dict(self) -> dict:
        return {"schema": self.schema.to_dict(), "resources": copy.deepcopy(self.resources)}


def _parse_store(raw: Mapping[str, Any]) -> dict[str, Collection]:
    if not isinstance(raw, Mapping):
        raise InvalidSchemaError("Store definition must be an object keyed by collection name")
    return {str(name): Collection.from_dict(str(name), entry) for name, entry in raw.items()}


def _view(pk: str, resource: Mapping[str, Any]) -> dict:
    row = dict(resource)
    row["id"] = pk
    return row


class DataStore:
    """In-memory collections backed by a JSON file."""

    def __init__(
        self,
        storage: JsonStorage,
        schema: Optional[Mapping[str, Any]] = None,
        *,
        fk_suffix: str = DEFAULT_FK_SUFFIX,
        strict_match: bool = False,
    ) -> None:
        self.storage = storage
        self.fk_suffix = fk_suffix
        self.strict_match = strict_match
        self._collections: dict[str, Collection] = {}

        if storage.exists():
            try:
                self._collections = _parse_store(storage.load())
                logger.info("Loaded %d collection(s) from %s", len(self._collections), storage.path)
                return
            except (CorruptDataError, InvalidSchemaError) as exc:
                if not schema:
                    if isinstance(exc, InvalidSchemaError):
                        raise CorruptDataError(f"{storage.path} does not hold a valid store: {exc}") from exc
                    raise
                logger.warning("Data file %s is unusable (%s); reseeding from schema", storage.path, exc)
        elif not schema:
            raise MissingSchemaError(f"No data file at {storage.path} and no schema was supplied")

        self._collections = _parse_store(schema)
        self._write()
        logger.info("Seeded %s with %d collection(s)", storage.path, len(self._collections))

    # -------------------------- collections --------------------------
    def collection_exists(self, name: str) -> bool:
        return name in self._collections

    def collection_names(self) -> list[str]:
        return list(self._collections)

    def get_collection(self, name: str) -> Optional[dict]:
        entry = self._collections.get(name)
        return entry.to_dict() if entry else None

    def get_collection_schema(self, name: str) -> Optional[CollectionSchema]:
        entry = self._collections.get(name)
        return entry.schema if entry else None

    def get_data(self) -> dict:
        return {name: entry.to_dict() for name, entry in self._collections.items()}

    def foreign_key(self, collection_name: str) -> str:
        return f"{collection_name}{self.fk_suffix}"

    # -------------------------- reads --------------------------
    def list_resources(self, name: str, related: Iterable[str] = ()) -> Optional[list[dict]]:
        entry = self._collections.get(name)
        if entry is None:
            return None
        return self._build_views(name, dict(entry.resources), related)

    def get_resource(self, name: str, resource_id: str, related: Iterable[str] = ()) -> Optional[dict]:
        entry = self._collections.get(name)
        if entry is None or resource_id not in entry.resources:
            return None
        views = self._build_views(name, {resource_id: entry.resources[resource_id]}, related)
        return views[0]

    def find_resources(
        self,
        name: str,
        field_name: str,
        value: Any,
        related: Iterable[str] = (),
    ) -> Optional[list[dict]]:
        entry = self._collections.get(name)
        if entry is None:
            return None
        matches = {
            pk: resource
            for pk, resource in entry.resources.items()
            if self._matches(resource.get(field_name), value)
        }
        return self._build_views(name, matches, related)

    def _matches(self, stored: Any, wanted: Any) -> bool:
        if self.strict_match:
            return stored == wanted
        return loose_equals(stored, wanted)

    def _build_views(self, name: str, selected: dict[str, dict], related: Iterable[str]) -> list[dict]:
        rows = {pk: dict(resource) for pk, resource in selected.items()}
        for related_name in related or ():
            self._join(name, related_name, rows)
        return [_view(pk, row) for pk, row in rows.items()]

    def _join(self, local_name: str, related_name: str, rows: dict[str, dict]) -> None:
        """Embed resources of ``related_name`` into ``rows`` (keyed by local pk)."""
        relation = self._collections[local_name].schema.relation_to(related_name)
        other = self._collections.get(related_name)
        if relation is None or other is None or relation.kind is RelationKind.HABTM:
            logger.debug("Ignoring related collection '%s' for '%s'", related_name, local_name)
            return

        # lists are built apart from the rows so stored values are never appended to
        joined: dict[str, list[dict]] = {}
        if relation.kind is RelationKind.HAS:
            fk = self.foreign_key(local_name)
            for rpk, resource in other.resources.items():
                local_pk = resource.get(fk)
                if local_pk is None or str(local_pk) not in rows:
                    continue
                joined.setdefault(str(local_pk), []).append(_view(rpk, resource))
        else:
            fk = self.foreign_key(related_name)
            for pk, row in rows.items():
                rpk = row.get(fk)
                if rpk is None or str(rpk) not in other.resources:
                    continue
                joined.setdefault(pk, []).append(_view(str(rpk), other.resources[str(rpk)]))
        for pk, related_rows in joined.items():
            rows[pk][related_name] = related_rows

    # -------------------------- writes --------------------------
    def save_resource(
        self,
        name: str,
        values: Mapping[str, Any],
        resource_id: Optional[str] = None,
    ) -> Optional[str]:
        """
        Create or overwrite a resource and persist the store.

        Only the collection's declared fields are copied from ``values``;
        fields missing from the input are stored as None. Returns the id, or
        None when the collection is unknown. Raises PersistenceError if the
        write fails, leaving the in-memory store unchanged.
        """
        entry = self._collections.get(name)
        if entry is None:
            return None
        pk = str(resource_id) if resource_id else self._new_id(entry)
        record = {field_name: values.get(field_name) for field_name in entry.schema.fields}
        dropped = sorted(set(values) - set(entry.schema.fields))
        if dropped:
            logger.debug("Dropping undeclared fields %s for '%s'", dropped, name)

        previous = entry.resources.get(pk)
        entry.resources[pk] = record
        try:
            self._write()
        except PersistenceError:
            if previous is None:
                del entry.resources[pk]
            else:
                entry.resources[pk] = previous
            raise
        logger.info("%s resource '%s' in '%s'", "Updated" if previous is not None else "Created", pk, name)
        return pk

    def delete_resource(self, name: str, resource_id: str, cascade: bool = True) -> bool:
        """
        Remove a resource; with ``cascade`` also remove resources of every
        ``has`` collection whose foreign key points at it. Returns False
        without touching the file when the resource does not exist.
        """
        entry = self._collections.get(name)
        if entry is None or resource_id not in entry.resources:
            return False

        snapshot = {name: dict(entry.resources)}
        del entry.resources[resource_id]
        removed = 0
        if cascade:
            fk = self.foreign_key(name)
            for related_name in entry.schema.has:
                other = self._collections.get(related_name)
                if other is None:
                    continue
                doomed = [
                    rpk for rpk, resource in other.resources.items()
                    if resource.get(fk) is not None and str(resource.get(fk)) == resource_id
                ]
                if doomed:
                    snapshot.setdefault(related_name, dict(other.resources))
                for rpk in doomed:
                    del other.resources[rpk]
                removed += len(doomed)

        try:
            self._write()
        except PersistenceError:
            for collection_name, resources in snapshot.items():
                self._collections[collection_name].resources = resources
            raise
        logger.info("Deleted resource '%s' from '%s' (%d related removed)", resource_id, name, removed)
        return True

    def _new_id(self, entry: Collection) -> str:
        while True:
            candidate = secrets.token_hex(8)
            if candidate not in entry.resources:
                return candidate

    def _write(self) -> None:
        self.storage.save(self.get_data())


def open_datastore(settings: Settings) -> DataStore:
    """Build the store described by the current settings."""
    schema = read_schema_file(settings.schema_file) if settings.schema_file else None
    return DataStore(
        JsonStorage(settings.data_file),
        schema,
        fk_suffix=settings.fk_suffix,
        strict_match=settings.strict_match,
    )
