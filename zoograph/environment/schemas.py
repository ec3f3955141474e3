"""Pydantic snapshots of the facility graph.

These models mirror the dataclasses in ``graph.py`` and ``enclosure.py`` but
keep stored records and facility snapshots serializable. Membership and
assignment are recorded by ID only.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class EnclosureState(BaseModel):
    """Stored form of an enclosure (one graph vertex)."""

    id: str
    name: str
    category: str = Field("", description="Free-form classification, display only")
    area: float = Field(0.0, ge=0, description="Floor area in m^2")
    capacity: int = Field(..., ge=0, description="Maximum number of occupants")
    caretaker_id: Optional[str] = Field(None, description="Assigned caretaker, if any")
    occupant_ids: List[str] = Field(
        default_factory=list,
        description="Occupants in arrival order",
    )


class PathState(BaseModel):
    """One undirected walkway between two enclosures."""

    from_id: str
    to_id: str
    length: float = Field(..., description="Walking distance in metres")

    def key(self) -> tuple[str, str]:
        """Orientation-free identity of the path."""
        return (self.from_id, self.to_id) if self.from_id <= self.to_id else (self.to_id, self.from_id)


class FacilityGraphState(BaseModel):
    """Whole-facility snapshot: every enclosure plus every undirected path."""

    enclosures: List[EnclosureState] = Field(default_factory=list)
    paths: List[PathState] = Field(default_factory=list)
    connected: bool = True
