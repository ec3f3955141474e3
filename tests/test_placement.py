"""Tests for PlacementService: creating, admitting, moving and removing occupants."""

from zoograph.enclosure import Enclosure
from zoograph.environment import Graph
from zoograph.logging_utils import EventLog
from zoograph.persistence import InMemoryOccupantStore
from zoograph.placement import PlacementService
from zoograph.schemas import FailureReason


def make_service(*capacities: int):
    graph = Graph()
    enclosures = []
    for index, capacity in enumerate(capacities):
        enclosure = Enclosure(id=f"E{index + 1}", name=f"Pen {index + 1}", capacity=capacity)
        graph.add_vertex(enclosure)
        enclosures.append(enclosure)
    store = InMemoryOccupantStore()
    return PlacementService(graph, store, EventLog.silent()), store, enclosures


def create(service: PlacementService, name: str, species: str, category: str) -> str:
    outcome = service.create(name, species, 3, 10.0, category)
    assert outcome
    return outcome.subject_id


def test_create_indexes_and_stores():
    service, store, _ = make_service()
    occupant_id = create(service, "Leo", "Lion", "mammal")

    occupant = service.get(occupant_id)
    assert occupant.category.value == "Mammal"
    assert occupant.enclosure_id is None
    assert occupant_id in store.records


def test_create_rejects_unknown_category():
    service, store, _ = make_service()
    outcome = service.create("Nessie", "Plesiosaur", 100, 2000, "Dinosaur")

    assert not outcome
    assert outcome.reason is FailureReason.INVALID_CATEGORY
    assert service.occupants == {}
    assert store.records == {}


def test_create_rejects_negative_age_and_weight():
    service, store, _ = make_service()

    young = service.create("Leo", "Lion", -1, 10.0, "Mammal")
    light = service.create("Kiwi", "Parrot", 2, -0.5, "Bird")

    assert young.reason is FailureReason.INVALID_VALUE
    assert "age" in young.message
    assert light.reason is FailureReason.INVALID_VALUE
    assert "weight" in light.message
    assert service.occupants == {}
    assert store.records == {}


def test_never_admitted_occupant_is_unplaced():
    service, _, _ = make_service(5)
    stray = create(service, "Stray", "Cat", "Mammal")

    assert [o.id for o in service.unplaced()] == [stray]
    assert service.all_placed() is False


def test_admit_links_both_sides():
    service, store, (pen,) = make_service(2)
    leo = create(service, "Leo", "Lion", "Mammal")

    outcome = service.admit_to("E1", leo)
    assert outcome
    assert pen.has_occupant(leo)
    assert service.get(leo).enclosure_id == "E1"
    assert store.records[leo].enclosure_id == "E1"
    assert service.unplaced() == []
    assert service.all_placed() is True


def test_admit_reports_refusal_reason():
    service, _, (pen,) = make_service(1)
    leo = create(service, "Leo", "Lion", "Mammal")
    tigra = create(service, "Tigra", "Tiger", "Mammal")
    service.admit_to("E1", leo)

    outcome = service.admit_to("E1", tigra)
    assert outcome.reason is FailureReason.CAPACITY_EXCEEDED
    assert len(pen.occupants) == 1
    assert service.get(tigra).enclosure_id is None

    pen.capacity = 5
    assert service.admit_to("E1", tigra).reason is FailureReason.INCOMPATIBLE_PAIR
    assert service.admit_to("E1", leo).reason is FailureReason.ALREADY_PRESENT
    assert service.admit_to("nowhere", leo).reason is FailureReason.NOT_FOUND
    assert service.admit_to("E1", "ghost").reason is FailureReason.NOT_FOUND


def test_admit_refuses_occupant_living_elsewhere():
    service, _, (first, second) = make_service(3, 3)
    goat = create(service, "Billy", "Goat", "Mammal")
    service.admit_to("E1", goat)

    outcome = service.admit_to("E2", goat)
    assert outcome.reason is FailureReason.ALREADY_PRESENT
    assert first.has_occupant(goat)
    assert not second.has_occupant(goat)


def test_evict_clears_link():
    service, store, (pen,) = make_service(2)
    goat = create(service, "Billy", "Goat", "Mammal")
    service.admit_to("E1", goat)

    assert service.evict_from("E1", goat)
    assert not pen.has_occupant(goat)
    assert service.get(goat).enclosure_id is None
    assert store.records[goat].enclosure_id is None
    assert service.evict_from("E1", goat).reason is FailureReason.NOT_FOUND
    assert service.evict_from("nowhere", goat).reason is FailureReason.NOT_FOUND


def test_relocate_moves_occupant():
    service, store, (source, target) = make_service(2, 2)
    goat = create(service, "Billy", "Goat", "Mammal")
    service.admit_to("E1", goat)

    assert service.relocate("E1", "E2", goat)
    assert not source.has_occupant(goat)
    assert target.has_occupant(goat)
    assert service.get(goat).enclosure_id == "E2"
    assert store.records[goat].enclosure_id == "E2"


def test_relocate_leaves_occupant_when_destination_refuses():
    service, _, (source, target) = make_service(2, 2)
    leo = create(service, "Leo", "Lion", "Mammal")
    tigra = create(service, "Tigra", "Tiger", "Mammal")
    service.admit_to("E1", leo)
    service.admit_to("E2", tigra)

    outcome = service.relocate("E1", "E2", leo)
    assert outcome.reason is FailureReason.INCOMPATIBLE_PAIR
    assert source.has_occupant(leo)
    assert not target.has_occupant(leo)
    assert service.get(leo).enclosure_id == "E1"


def test_relocate_requires_presence_in_source():
    service, _, _ = make_service(2, 2)
    goat = create(service, "Billy", "Goat", "Mammal")

    assert service.relocate("E1", "E2", goat).reason is FailureReason.NOT_FOUND
    assert service.relocate("E1", "E9", goat).reason is FailureReason.NOT_FOUND


def test_remove_evicts_and_deletes():
    service, store, (pen,) = make_service(2)
    goat = create(service, "Billy", "Goat", "Mammal")
    service.admit_to("E1", goat)

    assert service.remove(goat)
    assert service.get(goat) is None
    assert not pen.has_occupant(goat)
    assert goat not in store.records
    assert service.holder_of(goat) is None
    assert goat not in [o.id for o in service.unplaced()]
    assert service.remove(goat).reason is FailureReason.NOT_FOUND


def test_feed_is_idempotent():
    service, store, _ = make_service()
    goat = create(service, "Billy", "Goat", "Mammal")

    first = service.feed(goat)
    second = service.feed(goat)
    assert first and first.detail == "fed"
    assert second and second.detail == "already fed"
    assert store.records[goat].fed is True
    assert service.feed("ghost").reason is FailureReason.NOT_FOUND


def test_sound_and_movement_come_from_category():
    service, _, _ = make_service()
    fish = create(service, "Nemo", "Clownfish", "Fish")

    assert "bubbling" in service.describe_sound(fish)
    assert "swims" in service.describe_movement(fish)
    assert service.describe_sound("ghost") is None


def test_release_enclosure_unplaces_everyone():
    service, store, (pen,) = make_service(3)
    ids = [create(service, f"G{i}", "Goat", "Mammal") for i in range(2)]
    for occupant_id in ids:
        service.admit_to("E1", occupant_id)

    released = service.release_enclosure("E1")

    assert all(released)
    assert [outcome.subject_id for outcome in released] == ids
    assert pen.occupants == ()
    assert {o.id for o in service.unplaced()} == set(ids)
    assert all(store.records[i].enclosure_id is None for i in ids)


def test_load_relinks_and_detaches_bad_links():
    service, store, _ = make_service(1)
    first = create(service, "A", "Goat", "Mammal")
    second = create(service, "B", "Goat", "Mammal")
    lost = create(service, "C", "Goat", "Mammal")
    store.update_enclosure_link(first, "E1")
    store.update_enclosure_link(second, "E1")  # over capacity on reload
    store.update_enclosure_link(lost, "E404")

    fresh, _, (fresh_pen,) = make_service(1)
    fresh.store = store
    detached = fresh.load(store.load_all())

    assert fresh_pen.occupant_ids() == [first]
    assert set(detached) == {second, lost}
    assert store.records[lost].enclosure_id is None
    assert fresh.get(second).enclosure_id is None
