import pytest
from pydantic import ValidationError

from bus_tracker.schemas import validate_insertable, format_errors, BusCreate, UserResponse


def test_valid_payload_is_normalized():
    bus = validate_insertable("bus", {"bus_number": "B-1", "license_number": "L-1", "capacity": "40"})

    assert isinstance(bus, BusCreate)
    assert bus.capacity == 40
    assert bus.driver_id is None


def test_defaults_are_filled_in():
    bus_round = validate_insertable("bus_round", {
        "name": "Morning Route A", "type": "morning", "start_time": "07:00", "end_time": "08:00",
    })
    user = validate_insertable("user", {
        "username": "admin2", "password": "secret", "email": "a@example.com", "full_name": "Admin Two",
    })

    assert bus_round.status == "pending"
    assert user.role == "admin"


def test_every_offending_field_is_reported():
    with pytest.raises(ValidationError) as excinfo:
        validate_insertable("bus", {"bus_number": "B-1", "capacity": 0})

    errors = format_errors(excinfo.value.errors())
    assert {e["field"] for e in errors} == {"license_number", "capacity"}
    assert all(e["message"] and e["type"] for e in errors)


@pytest.mark.parametrize("entity,payload,field", [
    ("user", {"username": "x", "password": "p", "email": "e", "full_name": "n", "role": "janitor"}, "role"),
    ("bus_round", {"name": "R", "type": "evening", "start_time": "1", "end_time": "2"}, "type"),
    ("notification", {"type": "shout", "message": "hi"}, "type"),
    ("round_student", {"round_id": 1, "student_id": "abc", "order": 1}, "student_id"),
])
def test_enumerations_and_types_are_enforced(entity, payload, field):
    with pytest.raises(ValidationError) as excinfo:
        validate_insertable(entity, payload)
    assert field in [e["field"] for e in format_errors(excinfo.value.errors())]


def test_unknown_entity_raises_key_error():
    with pytest.raises(KeyError):
        validate_insertable("spaceship", {})


def test_nested_locations_are_joined_with_dots():
    errors = format_errors([{"loc": ("body", "capacity"), "msg": "bad", "type": "int_parsing"}])
    assert errors == [{"field": "body.capacity", "message": "bad", "type": "int_parsing"}]


def test_user_response_has_no_password():
    assert "password" not in UserResponse.model_fields
