"""
zoograph - zoo facility graph with enclosure placement and staffing.

Enclosures are vertices of a weighted undirected graph joined by walkways.
Animals are placed under capacity and compatibility rules; caretakers are
assigned at most one per enclosure.

No file I/O required. Stores and the event log are injected.
"""

__version__ = "0.1.0"

# Composition root
from .facility import FacilityGraph

# Services
from .placement import PlacementService
from .staffing import StaffingService

# Graph layer
from .environment import (
    NO_PATH,
    Edge,
    FacilityGraphState,
    Graph,
    EnclosureState,
    PathState,
    Vertex,
)
from .enclosure import Enclosure

# Core schemas
from .schemas import (
    CATEGORY_TRAITS,
    Caretaker,
    Category,
    FailureReason,
    LinkAction,
    Occupant,
    Outcome,
)
from .compatibility import COMPATIBILITY_RULES, are_compatible, check_compatibility

# Storage
from .persistence import (
    CaretakerStore,
    EnclosureStore,
    FacilityStores,
    OccupantStore,
    PathStore,
    StoreError,
    in_memory_stores,
    json_stores,
)

# Ambient
from .config import Config
from .logging_utils import EventLog, Level

# Layout loader helpers
from .scenario import LayoutLoader, LayoutReport, load_layout

__all__ = [
    "FacilityGraph",
    "PlacementService",
    "StaffingService",
    "NO_PATH",
    "Edge",
    "FacilityGraphState",
    "Graph",
    "EnclosureState",
    "PathState",
    "Vertex",
    "Enclosure",
    "CATEGORY_TRAITS",
    "Caretaker",
    "Category",
    "FailureReason",
    "LinkAction",
    "Occupant",
    "Outcome",
    "COMPATIBILITY_RULES",
    "are_compatible",
    "check_compatibility",
    "CaretakerStore",
    "EnclosureStore",
    "FacilityStores",
    "OccupantStore",
    "PathStore",
    "StoreError",
    "in_memory_stores",
    "json_stores",
    "Config",
    "EventLog",
    "Level",
    "LayoutLoader",
    "LayoutReport",
    "load_layout",
]
