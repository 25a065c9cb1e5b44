"""Document stores holding registration records."""

import copy
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import yaml

from .errors import FetchError, OrderingUnsupported, PermissionDenied, WriteError

logger = logging.getLogger(__name__)

ASC = "asc"
DESC = "desc"


@dataclass(frozen=True)
class OrderBy:
    """Store-side ordering request."""

    field: str
    direction: str = ASC

    def __post_init__(self):
        if self.direction not in (ASC, DESC):
            raise ValueError(f"Invalid order direction: {self.direction!r}")


def _new_id() -> str:
    return uuid.uuid4().hex


def _order_records(records: List[Dict[str, Any]], order_by: OrderBy) -> List[Dict[str, Any]]:
    """Order by a field's stored value; records missing the field go last."""
    present = [r for r in records if r.get(order_by.field) not in (None, "")]
    missing = [r for r in records if r.get(order_by.field) in (None, "")]
    present.sort(key=lambda r: str(r[order_by.field]), reverse=order_by.direction == DESC)
    return present + missing


class RegistrationStore:
    """Interface the view engine reads from and the register form writes to."""

    def fetch_all(
        self, collection: str, order_by: Optional[OrderBy] = None
    ) -> List[Dict[str, Any]]:
        """
        Return every record in the collection, each including its 'id'.

        Raises OrderingUnsupported if order_by cannot be applied,
        PermissionDenied or FetchError if the collection cannot be read.
        """
        raise NotImplementedError

    def insert(self, collection: str, record: Dict[str, Any]) -> str:
        """Store a new record and return its assigned id. Raises WriteError."""
        raise NotImplementedError


class InMemoryStore(RegistrationStore):
    """
    Store kept in a dict of lists.

    orderable limits the fields the store can order by; None allows any field.
    """

    def __init__(
        self,
        collections: Optional[Dict[str, Iterable[Dict[str, Any]]]] = None,
        orderable: Optional[Iterable[str]] = None,
    ):
        self.collections: Dict[str, List[Dict[str, Any]]] = {}
        for name, records in (collections or {}).items():
            self.collections[name] = [self._with_id(r) for r in records]
        self.orderable = set(orderable) if orderable is not None else None

    @staticmethod
    def _with_id(record: Dict[str, Any]) -> Dict[str, Any]:
        record = dict(record)
        if not record.get("id"):
            record["id"] = _new_id()
        return record

    def fetch_all(self, collection, order_by=None):
        records = copy.deepcopy(self.collections.get(collection, []))
        if order_by is None:
            return records
        if self.orderable is not None and order_by.field not in self.orderable:
            raise OrderingUnsupported(f"No index on '{order_by.field}' in {collection}")
        return _order_records(records, order_by)

    def insert(self, collection, record):
        data = {k: v for k, v in record.items() if k != "id"}
        data["id"] = _new_id()
        self.collections.setdefault(collection, []).append(data)
        return data["id"]


class YamlStore(RegistrationStore):
    """
    Store backed by one YAML file per collection in data_dir.

    File layout:

        indexes: [submittedAt]     # optional; fields the store can order by
        records:
          - id: 3f2a...
            ownerName: Asha Rao
            ...

    Without an 'indexes' key every field can be ordered by.
    """

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)

    def collection_path(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.yaml"

    def collections(self) -> List[str]:
        """Names of the collections with a file in data_dir."""
        if not self.data_dir.is_dir():
            return []
        return sorted(p.stem for p in self.data_dir.glob("*.yaml"))

    def read(self, collection: str) -> Dict[str, Any]:
        """Raw mapping stored for a collection; {} if it has no file yet."""
        path = self.collection_path(collection)
        if not path.exists():
            return {}
        try:
            with open(path, "r") as fp:
                data = yaml.load(fp, Loader=yaml.SafeLoader)
        except PermissionError as e:
            raise PermissionDenied(
                f"Permission denied reading {path}. Check file access rules."
            ) from e
        except (OSError, yaml.YAMLError) as e:
            raise FetchError(f"Could not read {path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise FetchError(f"Unexpected content in {path}: expected a mapping")
        return data

    def _records(self, collection: str, data: Dict[str, Any]) -> List[Dict[str, Any]]:
        records = data.get("records")
        if records is None:
            return []
        path = self.collection_path(collection)
        if not isinstance(records, list):
            raise FetchError(f"Unexpected content in {path}: 'records' must be a list")
        for i, record in enumerate(records):
            if not isinstance(record, dict):
                raise FetchError(f"Unexpected content in {path}: record {i} is not a mapping")
        return records

    def fetch_all(self, collection, order_by=None):
        data = self.read(collection)
        records = [dict(r) for r in self._records(collection, data)]
        logger.debug("Read %d records from %s", len(records), self.collection_path(collection))
        if order_by is None:
            return records
        indexes = data.get("indexes")
        if indexes is not None and not isinstance(indexes, list):
            raise FetchError(
                f"Unexpected content in {self.collection_path(collection)}: 'indexes' must be a list"
            )
        if indexes is not None and order_by.field not in indexes:
            raise OrderingUnsupported(f"No index on '{order_by.field}' in {collection}")
        return _order_records(records, order_by)

    def insert(self, collection, record):
        path = self.collection_path(collection)
        try:
            data = self.read(collection)
            data["records"] = self._records(collection, data)
        except FetchError as e:
            raise WriteError(str(e)) from e

        # Build the entry, omitting None values for cleaner YAML
        entry = {"id": _new_id()}
        entry.update({k: v for k, v in record.items() if k != "id" and v is not None})
        data["records"].append(entry)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w") as fp:
                yaml.dump(
                    data,
                    fp,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False,
                    width=120,
                )
        except OSError as e:
            raise WriteError(f"Could not write {path}: {e}") from e

        logger.info("Inserted record %s into %s", entry["id"], collection)
        return entry["id"]
