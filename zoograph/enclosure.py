"""Enclosures: capacity- and compatibility-constrained graph vertices."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .compatibility import check_compatibility
from .environment import EnclosureState, Vertex
from .schemas import FailureReason, Occupant


@dataclass(eq=False, kw_only=True)
class Enclosure(Vertex):
    """A physical enclosure holding up to ``capacity`` compatible occupants.

    The occupant list is only changed through ``admit`` and ``evict`` so the
    capacity and compatibility invariants hold after every call. The
    caretaker is referenced by ID; keeping the caretaker's own list in step
    is the staffing service's job.
    """

    name: str
    capacity: int
    category: str = ""
    area: float = 0.0
    caretaker_id: Optional[str] = None
    _occupants: List[Occupant] = field(default_factory=list, init=False, repr=False)

    @property
    def occupants(self) -> Tuple[Occupant, ...]:
        return tuple(self._occupants)

    @property
    def is_full(self) -> bool:
        return len(self._occupants) >= self.capacity

    def occupant_ids(self) -> List[str]:
        return [occupant.id for occupant in self._occupants]

    def has_occupant(self, occupant_id: str) -> bool:
        return any(occupant.id == occupant_id for occupant in self._occupants)

    def get_occupant(self, occupant_id: str) -> Optional[Occupant]:
        for occupant in self._occupants:
            if occupant.id == occupant_id:
                return occupant
        return None

    # ------------------------------------------------------------------
    # Admission
    # ------------------------------------------------------------------

    def admission_failure(
        self, occupant: Optional[Occupant]
    ) -> Optional[Tuple[FailureReason, str]]:
        """Explain why ``occupant`` cannot be admitted, or None if it can."""
        if occupant is None:
            return FailureReason.NOT_FOUND, "no occupant given"
        if self.has_occupant(occupant.id):
            return FailureReason.ALREADY_PRESENT, f"{occupant.name} is already in {self.name}"
        if self.is_full:
            return (
                FailureReason.CAPACITY_EXCEEDED,
                f"{self.name} is full ({len(self._occupants)}/{self.capacity})",
            )
        for existing in self._occupants:
            rule = check_compatibility(existing, occupant)
            if rule is not None:
                return (
                    FailureReason.INCOMPATIBLE_PAIR,
                    f"{occupant.name} ({occupant.species}) cannot share with "
                    f"{existing.name} ({existing.species}): {rule.description}",
                )
        return None

    def can_admit(self, occupant: Optional[Occupant]) -> bool:
        return self.admission_failure(occupant) is None

    def admit(self, occupant: Optional[Occupant]) -> bool:
        """Append ``occupant`` if admissible. No mutation on refusal."""
        if not self.can_admit(occupant):
            return False
        self._occupants.append(occupant)
        return True

    def evict(self, occupant_id: str) -> bool:
        """Remove the first occupant with ``occupant_id``."""
        for index, occupant in enumerate(self._occupants):
            if occupant.id == occupant_id:
                del self._occupants[index]
                return True
        return False

    # ------------------------------------------------------------------
    # Caretaker back-reference
    # ------------------------------------------------------------------

    def set_caretaker(self, caretaker_id: str) -> None:
        self.caretaker_id = caretaker_id

    def clear_caretaker(self) -> None:
        self.caretaker_id = None

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def to_state(self) -> EnclosureState:
        return EnclosureState(
            id=self.id,
            name=self.name,
            category=self.category,
            area=self.area,
            capacity=self.capacity,
            caretaker_id=self.caretaker_id,
            occupant_ids=self.occupant_ids(),
        )

    @classmethod
    def from_state(cls, state: EnclosureState) -> "Enclosure":
        """Rebuild an empty enclosure; occupants are re-linked by the placement service."""
        return cls(
            id=state.id,
            name=state.name,
            category=state.category,
            area=state.area,
            capacity=state.capacity,
            caretaker_id=state.caretaker_id,
        )

    def summary(self) -> str:
        caretaker = self.caretaker_id or "none"
        return (
            f"Enclosure [{self.id}] Name: {self.name}, Type: {self.category or '-'}, "
            f"Capacity: {len(self._occupants)}/{self.capacity}, Area: {self.area:g} m^2, "
            f"Caretaker: {caretaker}"
        )
