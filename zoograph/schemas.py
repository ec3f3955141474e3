"""
Pydantic schemas for the zoograph facility model.

Occupants and caretakers are plain records referenced by ID from enclosures;
behaviour that varies by biological category comes from a capability table
rather than subclasses.

Design Philosophy:
- One ``Occupant`` model for all seven categories, tagged by ``Category``
- Cross references (occupant -> enclosure, caretaker -> enclosures) are IDs
- Service calls report results through ``Outcome`` instead of raising
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from .environment import new_id


# ============================================================================
# Occupant Categories
# ============================================================================


class Category(str, Enum):
    """The closed set of biological categories an occupant can belong to."""

    MAMMAL = "Mammal"
    BIRD = "Bird"
    REPTILE = "Reptile"
    FISH = "Fish"
    AMPHIBIAN = "Amphibian"
    INSECT = "Insect"
    ARACHNID = "Arachnid"

    @classmethod
    def parse(cls, value: "str | Category") -> Optional["Category"]:
        """Case-insensitive lookup by value or member name; None if unknown."""
        if isinstance(value, Category):
            return value
        key = str(value).strip().casefold()
        for member in cls:
            if key in (member.value.casefold(), member.name.casefold()):
                return member
        return None


@dataclass(frozen=True)
class CategoryTraits:
    """Per-category behaviour: what the occupant sounds like and how it moves."""

    sound: str
    movement: str


CATEGORY_TRAITS: Dict[Category, CategoryTraits] = {
    Category.MAMMAL: CategoryTraits(sound="says: Rrrr!", movement="moves across the territory"),
    Category.BIRD: CategoryTraits(sound="says: Tweet!", movement="flies around the enclosure"),
    Category.REPTILE: CategoryTraits(sound="hisses: Ssssss!", movement="moves across the territory"),
    Category.FISH: CategoryTraits(sound="makes bubbling sounds", movement="swims in the water"),
    Category.AMPHIBIAN: CategoryTraits(sound="croaks", movement="hops around"),
    Category.INSECT: CategoryTraits(sound="buzzes", movement="crawls or flies"),
    Category.ARACHNID: CategoryTraits(sound="is silent", movement="crawls slowly"),
}


# ============================================================================
# Occupants and Caretakers
# ============================================================================


class Occupant(BaseModel):
    """An animal that can be placed into an enclosure.

    ``enclosure_id`` mirrors the enclosure's membership list; the placement
    service keeps the two in step. ``fed`` is a simple daily flag.
    """

    id: str = Field(default_factory=new_id)
    name: str
    species: str
    age: int = Field(0, ge=0)
    weight: float = Field(0.0, ge=0, description="Body weight in kg")
    category: Category
    enclosure_id: Optional[str] = None
    fed: bool = False

    @field_validator("category", mode="before")
    @classmethod
    def _parse_category(cls, value):
        parsed = Category.parse(value)
        if parsed is None:
            raise ValueError(f"Unknown category: {value!r}")
        return parsed

    @property
    def traits(self) -> CategoryTraits:
        return CATEGORY_TRAITS[self.category]

    @property
    def is_placed(self) -> bool:
        return self.enclosure_id is not None

    def feed(self) -> bool:
        """Mark as fed. Returns False if the occupant had already eaten."""
        if self.fed:
            return False
        self.fed = True
        return True

    def make_sound(self) -> str:
        return f"{self.name} ({self.species}) {self.traits.sound}"

    def move(self) -> str:
        return f"{self.name} {self.traits.movement}"

    def summary(self) -> str:
        location = self.enclosure_id or "not placed"
        return (
            f"[{self.id}] {self.name} ({self.species}, {self.category.value}) "
            f"age {self.age}, {self.weight:g} kg, fed: {'yes' if self.fed else 'no'}, "
            f"enclosure: {location}"
        )


class Caretaker(BaseModel):
    """A member of staff looking after zero or more enclosures."""

    id: str = Field(default_factory=new_id)
    name: str
    age: int = Field(0, ge=0)
    salary: int = Field(0, ge=0)
    experience: int = Field(0, ge=0, description="Years of experience")
    enclosure_ids: List[str] = Field(
        default_factory=list,
        description="Assigned enclosures in assignment order",
    )

    def is_assigned(self) -> bool:
        return bool(self.enclosure_ids)

    def is_assigned_to(self, enclosure_id: str) -> bool:
        return enclosure_id in self.enclosure_ids

    def assign_enclosure(self, enclosure_id: str) -> None:
        self.enclosure_ids.append(enclosure_id)

    def remove_enclosure(self, enclosure_id: str) -> None:
        self.enclosure_ids = [eid for eid in self.enclosure_ids if eid != enclosure_id]

    def replace_enclosure(self, from_id: str, to_id: str) -> bool:
        """Swap the first occurrence of ``from_id`` for ``to_id``.

        Returns False, leaving the list untouched, if ``from_id`` is absent.
        """
        try:
            index = self.enclosure_ids.index(from_id)
        except ValueError:
            return False
        self.enclosure_ids[index] = to_id
        return True

    def summary(self) -> str:
        enclosures = ", ".join(self.enclosure_ids) if self.enclosure_ids else "No enclosures assigned."
        return (
            f"Caretaker[{self.id}] | Name: {self.name} | Age: {self.age} | "
            f"Salary: {self.salary} | Experience: {self.experience} | Enclosures: {enclosures}"
        )


# ============================================================================
# Operation Results
# ============================================================================


class FailureReason(str, Enum):
    """Why a facility operation was refused."""

    NOT_FOUND = "not_found"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    INCOMPATIBLE_PAIR = "incompatible_pair"
    INVALID_CATEGORY = "invalid_category"
    INVALID_VALUE = "invalid_value"
    DUPLICATE_ASSIGNMENT = "duplicate_assignment"
    ALREADY_PRESENT = "already_present"
    STORE_FAILURE = "store_failure"


class Outcome(BaseModel):
    """Result of a service operation. Truthy iff the operation succeeded.

    A ``STORE_FAILURE`` outcome means the in-memory change was applied but
    the store did not record it.
    """

    ok: bool
    reason: Optional[FailureReason] = None
    message: str = ""
    subject_id: Optional[str] = Field(None, description="ID created or acted upon")
    detail: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(
        cls,
        message: str = "",
        *,
        subject_id: Optional[str] = None,
        detail: Optional[str] = None,
    ) -> "Outcome":
        return cls(ok=True, message=message, subject_id=subject_id, detail=detail)

    @classmethod
    def failure(
        cls,
        reason: FailureReason,
        message: str,
        *,
        subject_id: Optional[str] = None,
    ) -> "Outcome":
        return cls(ok=False, reason=reason, message=message, subject_id=subject_id)


class LinkAction(str, Enum):
    """Direction of a caretaker/enclosure link update sent to a store."""

    ADD = "add"
    REMOVE = "remove"
