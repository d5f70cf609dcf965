"""
Validation entry points shared by the HTTP layer and any other caller.

Both functions are pure: they never touch storage or global state.
"""
from typing import Any, Dict, List, Mapping, Type

from pydantic import BaseModel

from .user import UserCreate
from .student import StudentCreate, AbsenceCreate
from .bus import BusCreate, BusRoundCreate, RoundStudentCreate, LocationCreate
from .activity import NotificationCreate, ActivityLogCreate

INSERTABLE: Dict[str, Type[BaseModel]] = {
    "user": UserCreate,
    "student": StudentCreate,
    "bus": BusCreate,
    "bus_round": BusRoundCreate,
    "round_student": RoundStudentCreate,
    "location": LocationCreate,
    "notification": NotificationCreate,
    "absence": AbsenceCreate,
    "activity_log": ActivityLogCreate,
}


def validate_insertable(entity: str, payload: Mapping[str, Any]) -> BaseModel:
    """Validate `payload` against the insertable shape of `entity`.

    Returns the normalized model or raises `pydantic.ValidationError`
    listing every offending field. Unknown entity names raise KeyError.
    """
    return INSERTABLE[entity].model_validate(payload)


def format_errors(errors) -> List[Dict[str, Any]]:
    """Flatten pydantic/FastAPI error dicts into {field, message, type} items."""
    items = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        items.append({
            "field": ".".join(loc),
            "message": error.get("msg", ""),
            "type": error.get("type", ""),
        })
    return items
