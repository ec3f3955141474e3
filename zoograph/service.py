"""Shared plumbing for services that report Outcomes and write to a store."""

from __future__ import annotations

from typing import Callable, List, Optional

from pydantic import ValidationError

from .enclosure import Enclosure
from .environment import Graph
from .logging_utils import EventLog
from .persistence import StoreError
from .schemas import FailureReason, Outcome


class GraphService:
    """Base for services that mutate enclosures reachable through a graph."""

    def __init__(self, graph: Graph, log: Optional[EventLog] = None):
        self.graph = graph
        self.log = log or EventLog.from_config()

    def enclosure(self, enclosure_id: str) -> Optional[Enclosure]:
        vertex = self.graph.get_vertex(enclosure_id)
        return vertex if isinstance(vertex, Enclosure) else None

    def enclosures(self) -> List[Enclosure]:
        return [v for v in self.graph.vertices.values() if isinstance(v, Enclosure)]

    def _refuse(
        self, reason: FailureReason, message: str, *, subject_id: Optional[str] = None
    ) -> Outcome:
        self.log.warn(message)
        return Outcome.failure(reason, message, subject_id=subject_id)

    def _commit(self, outcome: Outcome, *writes: Callable[[], None]) -> Outcome:
        """Run the store writes for an already-applied change.

        The first write that raises ``StoreError`` turns the outcome into a
        ``STORE_FAILURE``; the in-memory change is kept.
        """
        try:
            for write in writes:
                write()
        except StoreError as exc:
            self.log.error(f"{outcome.message}, but the store rejected it: {exc}")
            return Outcome.failure(
                FailureReason.STORE_FAILURE,
                f"{outcome.message} (not stored: {exc})",
                subject_id=outcome.subject_id,
            )
        self.log.info(outcome.message)
        return outcome


def validation_message(exc: ValidationError) -> str:
    """First pydantic error as ``field: message``."""
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"]) or "value"
    return f"{field}: {error['msg']}"
