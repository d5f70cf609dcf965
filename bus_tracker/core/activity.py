"""
Audit trail helpers.

Routes schedule `record_activity` as a background task once the primary
operation has succeeded, so the audit write happens after the response is
built and its failure never fails the request.
"""
from typing import Any, Dict, Optional

from ..storage import Storage
from .logger import get_logger

logger = get_logger(__name__)

CREATE_USER = "CREATE_USER"
UPDATE_USER = "UPDATE_USER"
DELETE_USER = "DELETE_USER"
CREATE_STUDENT = "CREATE_STUDENT"
UPDATE_STUDENT = "UPDATE_STUDENT"
DELETE_STUDENT = "DELETE_STUDENT"
CREATE_BUS = "CREATE_BUS"
UPDATE_BUS = "UPDATE_BUS"
DELETE_BUS = "DELETE_BUS"
CREATE_BUS_ROUND = "CREATE_BUS_ROUND"
UPDATE_BUS_ROUND = "UPDATE_BUS_ROUND"
DELETE_BUS_ROUND = "DELETE_BUS_ROUND"
START_BUS_ROUND = "START_BUS_ROUND"
STOP_BUS_ROUND = "STOP_BUS_ROUND"
ASSIGN_STUDENT_TO_ROUND = "ASSIGN_STUDENT_TO_ROUND"
REMOVE_STUDENT_FROM_ROUND = "REMOVE_STUDENT_FROM_ROUND"
SEND_NOTIFICATION = "SEND_NOTIFICATION"
RECORD_ABSENCE = "RECORD_ABSENCE"


def record_activity(storage: Storage, action: str, details: Dict[str, Any],
                    user_id: Optional[int] = None) -> None:
    try:
        storage.log_activity(action, details, user_id)
    except Exception:
        logger.exception(f"Failed to record activity {action} {details}")
