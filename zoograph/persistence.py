"""
Store interfaces for pluggable facility storage backends.

The facility core never touches files or databases directly. It talks to four
narrow store contracts, one per collection, and tells them about every change
it commits. Persistence is OPTIONAL: the in-memory stores are the default and
need no setup.

Included implementations:
1. InMemory*Store - dict-based, data lost on exit (testing, prototyping)
2. Json*Store - one pretty-printed JSON document per collection (small sites)

Failure contract:
- A backend that cannot complete a call raises ``StoreError``
- Services catch it and report a failed Outcome; the in-memory change they
  already made stays in place (best effort, no rollback)

Usage pattern:
    stores = json_stores("zoo_data")        # or in_memory_stores()
    facility = FacilityGraph.open(stores)
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from .enclosure import Enclosure
from .environment import EnclosureState, PathState
from .schemas import Caretaker, LinkAction, Occupant


class StoreError(Exception):
    """Raised when a store backend cannot complete a read or write."""


PathRecord = Tuple[str, str, float]


# ============================================================================
# Contracts
# ============================================================================


class EnclosureStore(ABC):
    """Stores enclosure records (the vertices of the facility graph)."""

    @abstractmethod
    def load_all(self) -> Dict[str, Enclosure]:
        """
        Load every stored enclosure.

        Returns:
            Map of enclosure ID to a freshly built, empty Enclosure. Occupant
            membership is restored from the occupant records.

        Raises:
            StoreError: If the backend cannot be read
        """

    @abstractmethod
    def save(self, enclosure: Enclosure) -> None:
        """
        Insert or replace an enclosure record.

        Args:
            enclosure: Enclosure to record (fields and caretaker back-reference)

        Raises:
            StoreError: If the write fails
        """

    @abstractmethod
    def delete(self, enclosure_id: str) -> None:
        """Remove an enclosure record. Unknown IDs are ignored."""


class PathStore(ABC):
    """Stores undirected paths (the edges of the facility graph)."""

    @abstractmethod
    def load_all(self) -> List[PathRecord]:
        """
        Load every stored path.

        Returns:
            One ``(from_id, to_id, length)`` tuple per undirected path
        """

    @abstractmethod
    def save(self, from_id: str, to_id: str, length: float) -> None:
        """Insert or replace the path between two enclosures."""

    @abstractmethod
    def delete(self, from_id: str, to_id: str) -> None:
        """Remove the path between two enclosures, in either orientation."""


class OccupantStore(ABC):
    """Stores occupant records and their enclosure link."""

    @abstractmethod
    def load_all(self) -> Dict[str, Occupant]:
        """Load every stored occupant, keyed by ID."""

    @abstractmethod
    def save(self, occupant: Occupant) -> None:
        """Insert or replace an occupant record."""

    @abstractmethod
    def delete(self, occupant_id: str) -> None:
        """Remove an occupant record. Unknown IDs are ignored."""

    @abstractmethod
    def update_enclosure_link(self, occupant_id: str, enclosure_id: Optional[str]) -> None:
        """
        Record which enclosure an occupant lives in.

        Args:
            occupant_id: Occupant to update
            enclosure_id: New enclosure, or None when the occupant is unplaced

        Raises:
            StoreError: If the occupant is not stored or the write fails
        """


class CaretakerStore(ABC):
    """Stores caretaker records and their enclosure assignments."""

    @abstractmethod
    def load_all(self) -> Dict[str, Caretaker]:
        """Load every stored caretaker, keyed by ID."""

    @abstractmethod
    def save(self, caretaker: Caretaker) -> None:
        """Insert or replace a caretaker record."""

    @abstractmethod
    def delete(self, caretaker_id: str) -> None:
        """Remove a caretaker record. Unknown IDs are ignored."""

    @abstractmethod
    def update_assignment_link(
        self, caretaker_id: str, enclosure_id: str, action: LinkAction
    ) -> None:
        """
        Add or remove one enclosure from a caretaker's stored assignments.

        Raises:
            StoreError: If the caretaker is not stored or the write fails
        """


# ============================================================================
# In-memory backend
# ============================================================================


class InMemoryEnclosureStore(EnclosureStore):
    """Enclosure records kept as ``EnclosureState`` snapshots in a dict."""

    def __init__(self):
        self.records: Dict[str, EnclosureState] = {}

    def load_all(self) -> Dict[str, Enclosure]:
        return {eid: Enclosure.from_state(state) for eid, state in self.records.items()}

    def save(self, enclosure: Enclosure) -> None:
        self.records[enclosure.id] = enclosure.to_state()

    def delete(self, enclosure_id: str) -> None:
        self.records.pop(enclosure_id, None)


class InMemoryPathStore(PathStore):
    """Paths keyed by their orientation-free endpoint pair."""

    def __init__(self):
        self.records: Dict[Tuple[str, str], PathState] = {}

    def load_all(self) -> List[PathRecord]:
        return [(p.from_id, p.to_id, p.length) for p in self.records.values()]

    def save(self, from_id: str, to_id: str, length: float) -> None:
        path = PathState(from_id=from_id, to_id=to_id, length=length)
        self.records[path.key()] = path

    def delete(self, from_id: str, to_id: str) -> None:
        self.records.pop(PathState(from_id=from_id, to_id=to_id, length=0).key(), None)


class InMemoryOccupantStore(OccupantStore):
    """Occupant records stored as deep copies so live objects are never aliased."""

    def __init__(self):
        self.records: Dict[str, Occupant] = {}

    def load_all(self) -> Dict[str, Occupant]:
        return {oid: occ.model_copy(deep=True) for oid, occ in self.records.items()}

    def save(self, occupant: Occupant) -> None:
        self.records[occupant.id] = occupant.model_copy(deep=True)

    def delete(self, occupant_id: str) -> None:
        self.records.pop(occupant_id, None)

    def update_enclosure_link(self, occupant_id: str, enclosure_id: Optional[str]) -> None:
        record = self.records.get(occupant_id)
        if record is None:
            raise StoreError(f"Occupant {occupant_id} is not stored")
        record.enclosure_id = enclosure_id


class InMemoryCaretakerStore(CaretakerStore):
    """Caretaker records stored as deep copies."""

    def __init__(self):
        self.records: Dict[str, Caretaker] = {}

    def load_all(self) -> Dict[str, Caretaker]:
        return {cid: ct.model_copy(deep=True) for cid, ct in self.records.items()}

    def save(self, caretaker: Caretaker) -> None:
        self.records[caretaker.id] = caretaker.model_copy(deep=True)

    def delete(self, caretaker_id: str) -> None:
        self.records.pop(caretaker_id, None)

    def update_assignment_link(
        self, caretaker_id: str, enclosure_id: str, action: LinkAction
    ) -> None:
        record = self.records.get(caretaker_id)
        if record is None:
            raise StoreError(f"Caretaker {caretaker_id} is not stored")
        _apply_link(record, enclosure_id, action)


# ============================================================================
# JSON backend
# ============================================================================


class JsonDocument:
    """One JSON file holding a whole collection.

    Reads return ``default`` when the file does not exist yet. Any I/O or
    decoding problem surfaces as ``StoreError``.
    """

    def __init__(self, path: Path):
        self.path = path

    def read(self, default: Any) -> Any:
        if not self.path.exists():
            return default
        try:
            return json.loads(self.path.read_text("utf-8"))
        except (OSError, ValueError) as exc:
            raise StoreError(f"Cannot read {self.path}: {exc}") from exc

    def write(self, payload: Any) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, indent=2), "utf-8")
        except OSError as exc:
            raise StoreError(f"Cannot write {self.path}: {exc}") from exc


class _JsonRecords:
    """Shared read-modify-write helpers for ID-keyed JSON collections."""

    def __init__(self, base_path: Path | str, filename: str):
        self.document = JsonDocument(Path(base_path) / filename)

    def _read(self) -> Dict[str, Any]:
        return self.document.read({})

    def _put(self, record_id: str, payload: Dict[str, Any]) -> None:
        records = self._read()
        records[record_id] = payload
        self.document.write(records)

    def _drop(self, record_id: str) -> None:
        records = self._read()
        if records.pop(record_id, None) is not None:
            self.document.write(records)


class JsonEnclosureStore(_JsonRecords, EnclosureStore):
    """Enclosures in ``{base_path}/enclosures.json``."""

    def __init__(self, base_path: Path | str = "zoo_data"):
        super().__init__(base_path, "enclosures.json")

    def load_all(self) -> Dict[str, Enclosure]:
        try:
            states = [EnclosureState.model_validate(item) for item in self._read().values()]
        except ValidationError as exc:
            raise StoreError(f"Malformed enclosure record: {exc}") from exc
        return {state.id: Enclosure.from_state(state) for state in states}

    def save(self, enclosure: Enclosure) -> None:
        self._put(enclosure.id, enclosure.to_state().model_dump(mode="json"))

    def delete(self, enclosure_id: str) -> None:
        self._drop(enclosure_id)


class JsonPathStore(PathStore):
    """Paths in ``{base_path}/paths.json`` as a list of records."""

    def __init__(self, base_path: Path | str = "zoo_data"):
        self.document = JsonDocument(Path(base_path) / "paths.json")

    def _read(self) -> List[PathState]:
        try:
            return [PathState.model_validate(item) for item in self.document.read([])]
        except ValidationError as exc:
            raise StoreError(f"Malformed path record: {exc}") from exc

    def _write(self, paths: List[PathState]) -> None:
        self.document.write([path.model_dump(mode="json") for path in paths])

    def load_all(self) -> List[PathRecord]:
        return [(p.from_id, p.to_id, p.length) for p in self._read()]

    def save(self, from_id: str, to_id: str, length: float) -> None:
        new_path = PathState(from_id=from_id, to_id=to_id, length=length)
        paths = [p for p in self._read() if p.key() != new_path.key()]
        paths.append(new_path)
        self._write(paths)

    def delete(self, from_id: str, to_id: str) -> None:
        key = PathState(from_id=from_id, to_id=to_id, length=0).key()
        paths = self._read()
        remaining = [p for p in paths if p.key() != key]
        if len(remaining) != len(paths):
            self._write(remaining)


class JsonOccupantStore(_JsonRecords, OccupantStore):
    """Occupants in ``{base_path}/occupants.json``."""

    def __init__(self, base_path: Path | str = "zoo_data"):
        super().__init__(base_path, "occupants.json")

    def load_all(self) -> Dict[str, Occupant]:
        try:
            occupants = [Occupant.model_validate(item) for item in self._read().values()]
        except ValidationError as exc:
            raise StoreError(f"Malformed occupant record: {exc}") from exc
        return {occupant.id: occupant for occupant in occupants}

    def save(self, occupant: Occupant) -> None:
        self._put(occupant.id, occupant.model_dump(mode="json"))

    def delete(self, occupant_id: str) -> None:
        self._drop(occupant_id)

    def update_enclosure_link(self, occupant_id: str, enclosure_id: Optional[str]) -> None:
        records = self._read()
        if occupant_id not in records:
            raise StoreError(f"Occupant {occupant_id} is not stored")
        records[occupant_id]["enclosure_id"] = enclosure_id
        self.document.write(records)


class JsonCaretakerStore(_JsonRecords, CaretakerStore):
    """Caretakers in ``{base_path}/caretakers.json``."""

    def __init__(self, base_path: Path | str = "zoo_data"):
        super().__init__(base_path, "caretakers.json")

    def load_all(self) -> Dict[str, Caretaker]:
        try:
            caretakers = [Caretaker.model_validate(item) for item in self._read().values()]
        except ValidationError as exc:
            raise StoreError(f"Malformed caretaker record: {exc}") from exc
        return {caretaker.id: caretaker for caretaker in caretakers}

    def save(self, caretaker: Caretaker) -> None:
        self._put(caretaker.id, caretaker.model_dump(mode="json"))

    def delete(self, caretaker_id: str) -> None:
        self._drop(caretaker_id)

    def update_assignment_link(
        self, caretaker_id: str, enclosure_id: str, action: LinkAction
    ) -> None:
        records = self._read()
        if caretaker_id not in records:
            raise StoreError(f"Caretaker {caretaker_id} is not stored")
        caretaker = Caretaker.model_validate(records[caretaker_id])
        _apply_link(caretaker, enclosure_id, action)
        records[caretaker_id] = caretaker.model_dump(mode="json")
        self.document.write(records)


def _apply_link(caretaker: Caretaker, enclosure_id: str, action: LinkAction) -> None:
    if action is LinkAction.ADD:
        if not caretaker.is_assigned_to(enclosure_id):
            caretaker.assign_enclosure(enclosure_id)
    else:
        caretaker.remove_enclosure(enclosure_id)


# ============================================================================
# Bundles
# ============================================================================


@dataclass
class FacilityStores:
    """The four stores a facility needs, passed around as one value."""

    enclosures: EnclosureStore
    paths: PathStore
    occupants: OccupantStore
    caretakers: CaretakerStore


def in_memory_stores() -> FacilityStores:
    return FacilityStores(
        enclosures=InMemoryEnclosureStore(),
        paths=InMemoryPathStore(),
        occupants=InMemoryOccupantStore(),
        caretakers=InMemoryCaretakerStore(),
    )


def json_stores(base_path: Path | str = "zoo_data") -> FacilityStores:
    return FacilityStores(
        enclosures=JsonEnclosureStore(base_path),
        paths=JsonPathStore(base_path),
        occupants=JsonOccupantStore(base_path),
        caretakers=JsonCaretakerStore(base_path),
    )
