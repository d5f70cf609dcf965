import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from bus_tracker.schemas import (
    UserCreate, StudentCreate, AbsenceCreate,
    BusCreate, BusRoundCreate, RoundStudentCreate, LocationCreate,
    NotificationCreate
)
from bus_tracker.storage import IntegrityViolation, MemStorage

from .conftest import make_database_storage


def add_user(storage, username="parent1", role="parent"):
    return storage.create_user(UserCreate(
        username=username, password="hash", email=f"{username}@example.com",
        full_name=username.title(), role=role,
    ))


def add_student(storage, student_id="ST-1", parent_id=None):
    return storage.create_student(StudentCreate(
        student_id=student_id, first_name="Ana", last_name="Lee", grade="3", parent_id=parent_id,
    ))


def add_bus(storage, bus_number="B-1", driver_id=None):
    return storage.create_bus(BusCreate(
        bus_number=bus_number, license_number="LIC-1", capacity=40, driver_id=driver_id,
    ))


def add_round(storage, name="Morning Route A", bus_id=None, status="pending"):
    return storage.create_bus_round(BusRoundCreate(
        name=name, type="morning", start_time="07:00", end_time="08:00", bus_id=bus_id, status=status,
    ))


def test_create_then_get_returns_same_record(storage):
    created = add_user(storage)

    assert created.id is not None
    assert created.created_at is not None
    assert storage.get_user(created.id) == created
    assert storage.get_user_by_username("parent1") == created


def test_missing_ids_return_none(storage):
    assert storage.get_user(999) is None
    assert storage.get_student(999) is None
    assert storage.get_bus(999) is None
    assert storage.get_bus_round(999) is None
    assert storage.get_user_by_username("nobody") is None
    assert storage.get_latest_bus_location(999) is None


def test_update_changes_only_given_fields(storage):
    student = add_student(storage)

    updated = storage.update_student(student.id, {"grade": "4"})

    assert updated.grade == "4"
    assert updated.first_name == student.first_name
    assert updated.created_at == student.created_at
    assert storage.get_student(student.id) == updated


def test_update_ignores_identity_and_creation_time(storage):
    bus = add_bus(storage)

    updated = storage.update_bus(bus.id, {"id": 500, "created_at": None, "capacity": 20})

    assert updated.id == bus.id
    assert updated.created_at == bus.created_at
    assert updated.capacity == 20


def test_update_missing_id_returns_none(storage):
    assert storage.update_bus(999, {"capacity": 10}) is None
    assert storage.update_user(999, {"email": "x@example.com"}) is None


def test_delete_is_idempotent(storage):
    bus = add_bus(storage)

    storage.delete_bus(bus.id)
    storage.delete_bus(bus.id)

    assert storage.get_bus(bus.id) is None
    assert storage.get_buses() == []


def test_lists_are_ordered_by_id_and_filtered(storage):
    parent = add_user(storage, "parent1", "parent")
    add_user(storage, "driver1", "driver")
    add_user(storage, "parent2", "parent")

    assert [u.username for u in storage.get_users()] == ["parent1", "driver1", "parent2"]
    assert [u.username for u in storage.get_users("parent")] == ["parent1", "parent2"]
    assert storage.get_users("admin") == []

    add_student(storage, "ST-1", parent.id)
    add_student(storage, "ST-2")
    assert [s.student_id for s in storage.get_students(parent.id)] == ["ST-1"]

    add_round(storage, "A")
    add_round(storage, "B", status="in_progress")
    assert [r.name for r in storage.get_bus_rounds("in_progress")] == ["B"]


def test_duplicate_unique_fields_are_rejected(storage):
    add_user(storage, "parent1")
    add_student(storage, "ST-1")
    add_bus(storage, "B-1")

    with pytest.raises(IntegrityViolation):
        add_user(storage, "parent1")
    with pytest.raises(IntegrityViolation):
        add_student(storage, "ST-1")
    with pytest.raises(IntegrityViolation):
        add_bus(storage, "B-1")


def test_update_into_duplicate_is_rejected(storage):
    add_bus(storage, "B-1")
    other = add_bus(storage, "B-2")

    with pytest.raises(IntegrityViolation):
        storage.update_bus(other.id, {"bus_number": "B-1"})
    assert storage.get_bus(other.id).bus_number == "B-2"


def test_unknown_reference_is_rejected(storage):
    with pytest.raises(IntegrityViolation) as excinfo:
        add_student(storage, parent_id=999)
    assert str(excinfo.value) == "Student conflicts with existing data"

    with pytest.raises(IntegrityViolation):
        storage.record_location(LocationCreate(bus_id=999, latitude="1", longitude="2"))


def test_deleting_user_clears_references(storage):
    parent = add_user(storage, "parent1", "parent")
    driver = add_user(storage, "driver1", "driver")
    student = add_student(storage, parent_id=parent.id)
    bus = add_bus(storage, driver_id=driver.id)
    log = storage.log_activity("CREATE_BUS", {"bus_id": bus.id}, driver.id)

    storage.delete_user(parent.id)
    storage.delete_user(driver.id)

    assert storage.get_student(student.id).parent_id is None
    assert storage.get_bus(bus.id).driver_id is None
    assert storage.get_activity_logs()[0].id == log.id
    assert storage.get_activity_logs()[0].user_id is None


def test_deleting_student_removes_assignments_and_absences(storage):
    student = add_student(storage)
    bus_round = add_round(storage)
    storage.assign_student_to_round(RoundStudentCreate(round_id=bus_round.id, student_id=student.id, order=1))
    storage.record_absence(AbsenceCreate(student_id=student.id, date="2024-09-02"))
    notification = storage.create_notification(NotificationCreate(
        type="absent", message="Ana is absent", student_id=student.id,
    ))

    storage.delete_student(student.id)

    assert storage.get_round_students(bus_round.id) == []
    assert storage.get_absences() == []
    assert storage.get_notifications()[0].id == notification.id
    assert storage.get_notifications()[0].student_id is None


def test_deleting_bus_drops_locations_and_unassigns_rounds(storage):
    bus = add_bus(storage)
    bus_round = add_round(storage, bus_id=bus.id)
    storage.record_location(LocationCreate(bus_id=bus.id, latitude="37.7", longitude="-122.4"))

    storage.delete_bus(bus.id)

    assert storage.get_bus_locations(bus.id) == []
    assert storage.get_latest_bus_location(bus.id) is None
    assert storage.get_bus_round(bus_round.id).bus_id is None


def test_deleting_round_removes_its_assignments(storage):
    student = add_student(storage)
    bus_round = add_round(storage)
    storage.assign_student_to_round(RoundStudentCreate(round_id=bus_round.id, student_id=student.id, order=1))

    storage.delete_bus_round(bus_round.id)

    assert storage.get_round_students(bus_round.id) == []
    assert storage.get_student(student.id) is not None


def test_remove_student_from_round_removes_one_assignment(storage):
    student = add_student(storage)
    bus_round = add_round(storage)
    for order in (1, 2):
        storage.assign_student_to_round(RoundStudentCreate(round_id=bus_round.id, student_id=student.id, order=order))

    storage.remove_student_from_round(bus_round.id, student.id)

    assert [rs.order for rs in storage.get_round_students(bus_round.id)] == [2]
    storage.remove_student_from_round(bus_round.id, 999)
    assert len(storage.get_round_students(bus_round.id)) == 1


def test_location_history_is_newest_first(storage):
    bus = add_bus(storage)
    for i in range(3):
        storage.record_location(LocationCreate(bus_id=bus.id, latitude=f"37.{i}", longitude="-122.4"))

    history = storage.get_bus_locations(bus.id)

    assert [loc.latitude for loc in history] == ["37.2", "37.1", "37.0"]
    assert storage.get_latest_bus_location(bus.id) == history[0]
    assert len(storage.get_bus_locations(bus.id, limit=2)) == 2


def test_location_accepts_numeric_coordinates(storage):
    bus = add_bus(storage)

    location = storage.record_location(LocationCreate(bus_id=bus.id, latitude=37.7749, longitude=-122.4194))

    assert location.latitude == "37.7749"
    assert location.longitude == "-122.4194"


def test_notifications_are_newest_first_and_filter_by_recipient(storage):
    parent = add_user(storage)
    first = storage.create_notification(NotificationCreate(type="general", message="one"))
    second = storage.create_notification(NotificationCreate(type="delay", message="two", recipient_id=parent.id))

    assert [n.id for n in storage.get_notifications()] == [second.id, first.id]
    assert [n.id for n in storage.get_notifications(parent.id)] == [second.id]


def test_absences_filter_by_student_and_date(storage):
    ana = add_student(storage, "ST-1")
    ben = add_student(storage, "ST-2")
    storage.record_absence(AbsenceCreate(student_id=ana.id, date="2024-09-02", reason="sick"))
    storage.record_absence(AbsenceCreate(student_id=ana.id, date="2024-09-03"))
    storage.record_absence(AbsenceCreate(student_id=ben.id, date="2024-09-02"))

    assert len(storage.get_absences()) == 3
    assert len(storage.get_absences(student_id=ana.id)) == 2
    assert len(storage.get_absences(date="2024-09-02")) == 2
    only = storage.get_absences(student_id=ana.id, date="2024-09-02")
    assert [a.reason for a in only] == ["sick"]


def test_activity_logs_are_newest_first(storage):
    storage.log_activity("CREATE_BUS", {"bus_id": 1})
    storage.log_activity("DELETE_BUS", {"bus_id": 1})

    logs = storage.get_activity_logs()

    assert [log.action for log in logs] == ["DELETE_BUS", "CREATE_BUS"]
    assert logs[0].details == {"bus_id": 1}
    assert logs[0].user_id is None


def test_dashboard_stats_count_current_data(storage):
    add_user(storage, "parent1", "parent")
    add_user(storage, "parent2", "parent")
    add_user(storage, "driver1", "driver")
    add_student(storage)
    add_bus(storage)
    add_round(storage, "A", status="in_progress")
    add_round(storage, "B")
    for i in range(7):
        storage.create_notification(NotificationCreate(type="general", message=f"n{i}"))

    stats = storage.get_dashboard_stats(recent=5)

    assert stats.total_parents == 2
    assert stats.total_drivers == 1
    assert stats.total_students == 1
    assert stats.total_buses == 1
    assert stats.active_rounds == 1
    assert [n.message for n in stats.recent_notifications] == ["n6", "n5", "n4", "n3", "n2"]


def test_returned_records_are_copies(storage):
    bus = add_bus(storage)
    bus.capacity = 1

    assert storage.get_bus(bus.id).capacity == 40


def _exercise(storage):
    parent = add_user(storage, "parent1", "parent")
    driver = add_user(storage, "driver1", "driver")
    student = add_student(storage, parent_id=parent.id)
    bus = add_bus(storage, driver_id=driver.id)
    bus_round = add_round(storage, bus_id=bus.id)
    storage.assign_student_to_round(RoundStudentCreate(round_id=bus_round.id, student_id=student.id, order=1))
    storage.update_bus_round(bus_round.id, {"status": "in_progress"})
    storage.record_absence(AbsenceCreate(student_id=student.id, date="2024-09-02", reported_by=parent.id))
    storage.record_location(LocationCreate(bus_id=bus.id, latitude="48.85", longitude="2.35"))
    storage.record_location(LocationCreate(bus_id=bus.id, latitude="48.86", longitude="2.36"))
    storage.create_notification(NotificationCreate(
        type="delay", message="Running late", round_id=bus_round.id, bus_id=bus.id, sender_id=driver.id,
    ))
    storage.create_notification(NotificationCreate(
        type="absent", message="Ana is home sick", student_id=student.id,
        sender_id=parent.id, recipient_id=driver.id,
    ))
    storage.log_activity("START_BUS_ROUND", {"round_id": bus_round.id}, driver.id)
    storage.log_activity("CREATE_STUDENT", {"student_id": student.id}, parent.id)
    try:
        add_bus(storage, "B-1")
    except IntegrityViolation:
        pass
    storage.delete_user(driver.id)
    return {
        "users": storage.get_users(),
        "students": storage.get_students(),
        "buses": storage.get_buses(),
        "rounds": storage.get_bus_rounds(),
        "assignments": storage.get_round_students(bus_round.id),
        "absences": storage.get_absences(),
        "locations": storage.get_bus_locations(bus.id),
        "latest_location": storage.get_latest_bus_location(bus.id),
        "notifications": storage.get_notifications(),
        "activity": storage.get_activity_logs(),
        "dashboard": storage.get_dashboard_stats(),
    }


def _strip_times(value):
    if isinstance(value, dict):
        return {k: _strip_times(v) for k, v in value.items() if k not in ("created_at", "timestamp")}
    if isinstance(value, list):
        return [_strip_times(v) for v in value]
    if hasattr(value, "model_dump"):
        return _strip_times(value.model_dump())
    return value


def test_backends_observe_the_same_results():
    db_storage, engine = make_database_storage()
    try:
        assert _strip_times(_exercise(MemStorage())) == _strip_times(_exercise(db_storage))
    finally:
        engine.dispose()


def test_memory_reads_survive_concurrent_writes():
    storage = MemStorage()
    done = threading.Event()
    errors = []

    def write():
        try:
            for n in range(300):
                add_student(storage, student_id=f"ST-{n}")
        finally:
            done.set()

    def read():
        try:
            while not done.is_set():
                storage.get_students()
                storage.get_dashboard_stats()
        except Exception as e:
            errors.append(e)

    readers = [threading.Thread(target=read) for _ in range(4)]
    for reader in readers:
        reader.start()
    write()
    for reader in readers:
        reader.join()

    assert errors == []
    assert len(storage.get_students()) == 300


def test_memory_unique_check_holds_across_threads():
    storage = MemStorage()

    def attempt(_):
        try:
            return add_user(storage, "same-name", "parent")
        except IntegrityViolation:
            return None

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(attempt, range(32)))

    assert sum(1 for r in results if r is not None) == 1
    assert len(storage.get_users()) == 1
