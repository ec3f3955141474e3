"""Tests for StaffingService assignments."""

from zoograph.enclosure import Enclosure
from zoograph.environment import Graph
from zoograph.logging_utils import EventLog
from zoograph.persistence import InMemoryCaretakerStore, InMemoryEnclosureStore
from zoograph.schemas import Caretaker, FailureReason
from zoograph.staffing import StaffingService


def make_service(count: int = 2):
    graph = Graph()
    enclosure_store = InMemoryEnclosureStore()
    for index in range(count):
        enclosure = Enclosure(id=f"E{index + 1}", name=f"Pen {index + 1}", capacity=4)
        graph.add_vertex(enclosure)
        enclosure_store.save(enclosure)
    store = InMemoryCaretakerStore()
    service = StaffingService(graph, store, enclosure_store, EventLog.silent())
    return service, store, enclosure_store


def hire(service: StaffingService, name: str = "Anna") -> str:
    outcome = service.create(name, 30, 2500, 5)
    assert outcome
    return outcome.subject_id


def test_create_and_add():
    service, store, _ = make_service()
    emp = hire(service)

    assert service.get(emp).name == "Anna"
    assert emp in store.records
    assert service.add(service.get(emp)).reason is FailureReason.ALREADY_PRESENT

    outside = Caretaker(name="Ben", age=40, salary=3000, experience=12)
    assert service.add(outside)
    assert set(service.caretakers) == {emp, outside.id}


def test_create_rejects_negative_numbers():
    service, store, _ = make_service()

    assert service.create("Anna", -1, 2500, 5).reason is FailureReason.INVALID_VALUE
    assert service.create("Ben", 40, -100, 12).reason is FailureReason.INVALID_VALUE
    assert service.create("Cleo", 25, 2000, -3).reason is FailureReason.INVALID_VALUE
    assert service.caretakers == {}
    assert store.records == {}


def test_assign_sets_both_sides():
    service, store, enclosure_store = make_service()
    emp = hire(service)

    assert service.assign(emp, "E1")
    assert service.enclosure("E1").caretaker_id == emp
    assert service.get(emp).enclosure_ids == ["E1"]
    assert store.records[emp].enclosure_ids == ["E1"]
    assert enclosure_store.records["E1"].caretaker_id == emp


def test_assign_refusals():
    service, _, _ = make_service()
    anna = hire(service, "Anna")
    ben = hire(service, "Ben")
    service.assign(anna, "E1")

    assert service.assign(anna, "E1").reason is FailureReason.ALREADY_PRESENT
    assert service.get(anna).enclosure_ids == ["E1"]
    assert service.assign(ben, "E1").reason is FailureReason.DUPLICATE_ASSIGNMENT
    assert service.enclosure("E1").caretaker_id == anna
    assert service.assign("ghost", "E1").reason is FailureReason.NOT_FOUND
    assert service.assign(anna, "E9").reason is FailureReason.NOT_FOUND


def test_reassign_moves_assignment():
    service, store, enclosure_store = make_service()
    emp = hire(service)
    service.assign(emp, "E1")

    assert service.reassign(emp, "E1", "E2")
    assert service.enclosure("E1").caretaker_id is None
    assert service.enclosure("E2").caretaker_id == emp
    assert service.get(emp).enclosure_ids == ["E2"]
    assert store.records[emp].enclosure_ids == ["E2"]
    assert enclosure_store.records["E1"].caretaker_id is None
    assert enclosure_store.records["E2"].caretaker_id == emp


def test_reassign_keeps_position_in_list():
    service, _, _ = make_service(3)
    emp = hire(service)
    service.assign(emp, "E1")
    service.assign(emp, "E2")

    service.reassign(emp, "E1", "E3")
    assert service.get(emp).enclosure_ids == ["E3", "E2"]


def test_reassign_from_unassigned_enclosure_changes_nothing():
    service, _, _ = make_service(3)
    emp = hire(service)
    service.assign(emp, "E1")

    outcome = service.reassign(emp, "E2", "E3")
    assert outcome.reason is FailureReason.NOT_FOUND
    assert service.get(emp).enclosure_ids == ["E1"]
    assert service.enclosure("E3").caretaker_id is None


def test_reassign_into_staffed_enclosure_is_refused():
    service, _, _ = make_service()
    anna = hire(service, "Anna")
    ben = hire(service, "Ben")
    service.assign(anna, "E1")
    service.assign(ben, "E2")

    outcome = service.reassign(anna, "E1", "E2")
    assert outcome.reason is FailureReason.DUPLICATE_ASSIGNMENT
    assert service.enclosure("E1").caretaker_id == anna
    assert service.enclosure("E2").caretaker_id == ben


def test_unassign_requires_current_caretaker():
    service, store, _ = make_service()
    anna = hire(service, "Anna")
    ben = hire(service, "Ben")
    service.assign(anna, "E1")

    assert service.unassign_from(ben, "E1").reason is FailureReason.NOT_FOUND
    assert service.unassign_from(anna, "E2").reason is FailureReason.NOT_FOUND
    assert service.unassign_from(anna, "E1")
    assert service.enclosure("E1").caretaker_id is None
    assert store.records[anna].enclosure_ids == []


def test_unassigned_lists_idle_staff():
    service, _, _ = make_service()
    anna = hire(service, "Anna")
    ben = hire(service, "Ben")
    service.assign(anna, "E1")

    assert [c.id for c in service.unassigned()] == [ben]


def test_remove_clears_enclosure_back_references():
    service, store, enclosure_store = make_service()
    emp = hire(service)
    service.assign(emp, "E1")
    service.assign(emp, "E2")

    assert service.remove(emp)
    assert service.get(emp) is None
    assert emp not in store.records
    for enclosure_id in ("E1", "E2"):
        assert service.enclosure(enclosure_id).caretaker_id is None
        assert enclosure_store.records[enclosure_id].caretaker_id is None
    assert service.remove(emp).reason is FailureReason.NOT_FOUND


def test_load_drops_stale_references():
    service, _, _ = make_service()
    service.enclosure("E2").set_caretaker("long-gone")
    kept = Caretaker(id="c1", name="Anna", enclosure_ids=["E1", "E404"])
    service.enclosure("E1").set_caretaker("c1")

    assert service.load({"c1": kept}) == 2
    assert service.enclosure("E2").caretaker_id is None
    assert service.enclosure("E1").caretaker_id == "c1"
    assert service.get("c1").enclosure_ids == ["E1"]
