"""Caretaker lifecycle and enclosure assignments.

StaffingService owns the caretaker index. Each enclosure has at most one
caretaker (``Enclosure.caretaker_id``); each caretaker keeps the list of
enclosures it serves. The service updates both sides together and reports
every change to the caretaker store and, for the enclosure side, to the
enclosure store.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import ValidationError

from .environment import Graph
from .logging_utils import EventLog
from .persistence import (
    CaretakerStore,
    EnclosureStore,
    InMemoryCaretakerStore,
    InMemoryEnclosureStore,
)
from .schemas import Caretaker, FailureReason, LinkAction, Outcome
from .service import GraphService, validation_message


class StaffingService(GraphService):
    """Hires, assigns, reassigns and removes caretakers."""

    def __init__(
        self,
        graph: Graph,
        store: Optional[CaretakerStore] = None,
        enclosure_store: Optional[EnclosureStore] = None,
        log: Optional[EventLog] = None,
    ):
        super().__init__(graph, log)
        self.store = store or InMemoryCaretakerStore()
        self.enclosure_store = enclosure_store or InMemoryEnclosureStore()
        self._caretakers: Dict[str, Caretaker] = {}

    @property
    def caretakers(self) -> Dict[str, Caretaker]:
        return dict(self._caretakers)

    def get(self, caretaker_id: str) -> Optional[Caretaker]:
        return self._caretakers.get(caretaker_id)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create(self, name: str, age: int, salary: int, experience: int) -> Outcome:
        try:
            caretaker = Caretaker(name=name, age=age, salary=salary, experience=experience)
        except ValidationError as exc:
            return self._refuse(
                FailureReason.INVALID_VALUE,
                f"Caretaker {name} not created: {validation_message(exc)}",
            )
        return self.add(caretaker)

    def add(self, caretaker: Caretaker) -> Outcome:
        if caretaker.id in self._caretakers:
            return self._refuse(
                FailureReason.ALREADY_PRESENT,
                f"Caretaker with ID {caretaker.id} already exists",
                subject_id=caretaker.id,
            )
        self._caretakers[caretaker.id] = caretaker
        return self._commit(
            Outcome.success(
                f"Added caretaker {caretaker.name} (ID: {caretaker.id})",
                subject_id=caretaker.id,
            ),
            lambda: self.store.save(caretaker),
        )

    def load(self, caretakers: Dict[str, Caretaker]) -> int:
        """Index stored caretakers and drop references that no longer resolve.

        Enclosures naming an unknown caretaker lose that back-reference, and
        caretakers lose enclosure IDs that are not in the graph. Returns the
        number of references dropped.
        """
        self._caretakers.update(caretakers)
        dropped = 0
        for enclosure in self.enclosures():
            if enclosure.caretaker_id and enclosure.caretaker_id not in self._caretakers:
                self.log.warn(
                    f"Enclosure {enclosure.name} names unknown caretaker {enclosure.caretaker_id}; cleared"
                )
                enclosure.clear_caretaker()
                dropped += 1
        for caretaker in caretakers.values():
            for enclosure_id in list(caretaker.enclosure_ids):
                if self.enclosure(enclosure_id) is None:
                    self.log.warn(f"Caretaker {caretaker.name} lists missing enclosure {enclosure_id}; dropped")
                    caretaker.remove_enclosure(enclosure_id)
                    dropped += 1
        self.log.info(f"Loaded {len(caretakers)} caretakers ({dropped} stale references dropped)")
        return dropped

    def remove(self, caretaker_id: str) -> Outcome:
        """Delete a caretaker and clear every enclosure it was serving."""
        caretaker = self._caretakers.get(caretaker_id)
        if caretaker is None:
            return self._refuse(FailureReason.NOT_FOUND, f"No caretaker with ID {caretaker_id} found")

        writes = []
        for enclosure in self.enclosures():
            if enclosure.caretaker_id == caretaker_id:
                enclosure.clear_caretaker()
                self.log.info(f"Caretaker {caretaker.name} was removed from enclosure {enclosure.name}")
                writes.append(lambda e=enclosure: self.enclosure_store.save(e))
        caretaker.enclosure_ids = []
        del self._caretakers[caretaker_id]
        writes.append(lambda: self.store.delete(caretaker_id))
        return self._commit(
            Outcome.success(f"Caretaker {caretaker.name} removed from the system", subject_id=caretaker_id),
            *writes,
        )

    # ------------------------------------------------------------------
    # Assignments
    # ------------------------------------------------------------------

    def assign(self, caretaker_id: str, enclosure_id: str) -> Outcome:
        caretaker = self._caretakers.get(caretaker_id)
        if caretaker is None:
            return self._refuse(FailureReason.NOT_FOUND, f"Cannot assign: caretaker {caretaker_id} not found")
        enclosure = self.enclosure(enclosure_id)
        if enclosure is None:
            return self._refuse(
                FailureReason.NOT_FOUND,
                f"Cannot assign caretaker {caretaker_id}: enclosure {enclosure_id} not found",
            )

        if enclosure.caretaker_id == caretaker_id:
            return self._refuse(
                FailureReason.ALREADY_PRESENT,
                f"{caretaker.name} already looks after {enclosure.name}",
                subject_id=caretaker_id,
            )
        if enclosure.caretaker_id is not None:
            return self._refuse(
                FailureReason.DUPLICATE_ASSIGNMENT,
                f"{enclosure.name} already has caretaker {enclosure.caretaker_id}",
                subject_id=caretaker_id,
            )

        enclosure.set_caretaker(caretaker_id)
        if not caretaker.is_assigned_to(enclosure_id):
            caretaker.assign_enclosure(enclosure_id)
        return self._commit(
            Outcome.success(
                f"Caretaker {caretaker.name} (ID: {caretaker_id}) assigned to enclosure "
                f"{enclosure.name} (ID: {enclosure_id})",
                subject_id=caretaker_id,
            ),
            lambda: self.store.update_assignment_link(caretaker_id, enclosure_id, LinkAction.ADD),
            lambda: self.enclosure_store.save(enclosure),
        )

    def reassign(self, caretaker_id: str, from_id: str, to_id: str) -> Outcome:
        """Move a caretaker's assignment from one enclosure to another.

        The caretaker must currently be recorded against ``from_id``; the
        entry is replaced in place so assignment order is preserved.
        """
        source = self.enclosure(from_id)
        target = self.enclosure(to_id)
        if source is None or target is None:
            return self._refuse(
                FailureReason.NOT_FOUND,
                f"Failed to reassign: enclosure {from_id if source is None else to_id} not found",
            )
        caretaker = self._caretakers.get(caretaker_id)
        if caretaker is None:
            return self._refuse(FailureReason.NOT_FOUND, f"Failed to reassign: caretaker {caretaker_id} not found")

        if not caretaker.is_assigned_to(from_id):
            return self._refuse(
                FailureReason.NOT_FOUND,
                f"{caretaker.name} is not assigned to {source.name}; nothing to reassign",
                subject_id=caretaker_id,
            )
        if caretaker.is_assigned_to(to_id):
            return self._refuse(
                FailureReason.ALREADY_PRESENT,
                f"{caretaker.name} already looks after {target.name}",
                subject_id=caretaker_id,
            )
        if target.caretaker_id not in (None, caretaker_id):
            return self._refuse(
                FailureReason.DUPLICATE_ASSIGNMENT,
                f"{target.name} already has caretaker {target.caretaker_id}",
                subject_id=caretaker_id,
            )

        if source.caretaker_id == caretaker_id:
            source.clear_caretaker()
        target.set_caretaker(caretaker_id)
        caretaker.replace_enclosure(from_id, to_id)
        return self._commit(
            Outcome.success(
                f"Caretaker {caretaker.name} reassigned from {source.name} to {target.name}",
                subject_id=caretaker_id,
            ),
            lambda: self.store.save(caretaker),
            lambda: self.enclosure_store.save(source),
            lambda: self.enclosure_store.save(target),
        )

    def unassign_from(self, caretaker_id: str, enclosure_id: str) -> Outcome:
        enclosure = self.enclosure(enclosure_id)
        if enclosure is None:
            return self._refuse(FailureReason.NOT_FOUND, f"Enclosure {enclosure_id} not found")
        caretaker = self._caretakers.get(caretaker_id)
        if caretaker is None:
            return self._refuse(FailureReason.NOT_FOUND, f"Caretaker {caretaker_id} not found")

        if enclosure.caretaker_id is None:
            return self._refuse(
                FailureReason.NOT_FOUND,
                f"No caretaker currently assigned to {enclosure.name}",
                subject_id=caretaker_id,
            )
        if enclosure.caretaker_id != caretaker_id:
            return self._refuse(
                FailureReason.NOT_FOUND,
                f"Caretaker {caretaker_id} is not assigned to {enclosure.name}",
                subject_id=caretaker_id,
            )

        enclosure.clear_caretaker()
        caretaker.remove_enclosure(enclosure_id)
        return self._commit(
            Outcome.success(f"{caretaker.name} unassigned from {enclosure.name}", subject_id=caretaker_id),
            lambda: self.store.update_assignment_link(caretaker_id, enclosure_id, LinkAction.REMOVE),
            lambda: self.enclosure_store.save(enclosure),
        )

    def release_enclosure(self, enclosure_id: str) -> Optional[Outcome]:
        """Detach the caretaker of an enclosure that is about to disappear.

        Returns the unassignment Outcome, or None when nobody was assigned.
        """
        enclosure = self.enclosure(enclosure_id)
        if enclosure is None or enclosure.caretaker_id is None:
            return None
        return self.unassign_from(enclosure.caretaker_id, enclosure_id)

    def unassigned(self) -> List[Caretaker]:
        result = [c for c in self._caretakers.values() if not c.is_assigned()]
        self.log.debug(f"Found {len(result)} unassigned caretakers")
        return result
