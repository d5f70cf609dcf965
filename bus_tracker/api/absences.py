from fastapi import APIRouter, BackgroundTasks, Depends, status
from typing import List, Optional
from ..schemas import User, Absence, AbsenceCreate
from ..storage import Storage, get_storage
from ..core import activity
from ..core.activity import record_activity
from ..core.permissions import get_current_user

router = APIRouter(prefix="/api", tags=["absences"])


@router.get("/absences", response_model=List[Absence])
def get_absences(
    student_id: Optional[int] = None,
    date: Optional[str] = None,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    """Absences, filtered by student and/or date"""
    return storage.get_absences(student_id, date)


@router.post("/absences", response_model=Absence, status_code=status.HTTP_201_CREATED)
def record_absence(
    absence: AbsenceCreate,
    background_tasks: BackgroundTasks,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    if absence.reported_by is None:
        absence = absence.model_copy(update={"reported_by": current_user.id})

    db_absence = storage.record_absence(absence)
    background_tasks.add_task(
        record_activity, storage, activity.RECORD_ABSENCE,
        {"absence_id": db_absence.id, "student_id": db_absence.student_id}, current_user.id
    )
    return db_absence
