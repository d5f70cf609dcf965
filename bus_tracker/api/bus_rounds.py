from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Response, status
from typing import List, Optional
from ..schemas import (
    User, BusRound, BusRoundCreate,
    RoundStudent, RoundStudentAssign, RoundStudentCreate,
    NotificationCreate
)
from ..schemas.bus import RoundStatus
from ..config import Settings
from ..storage import Storage, get_storage
from ..core import activity, rounds
from ..core.activity import record_activity
from ..core.permissions import get_current_user, get_settings
from ..core.logger import get_logger

router = APIRouter(prefix="/api", tags=["bus-rounds"])
logger = get_logger(__name__)


@router.get("/bus-rounds", response_model=List[BusRound])
def get_bus_rounds(
    round_status: Optional[RoundStatus] = Query(None, alias="status"),
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    """Get all bus rounds, optionally filtered by status"""
    return storage.get_bus_rounds(round_status)


@router.get("/bus-rounds/{round_id}", response_model=BusRound)
def get_bus_round(
    round_id: int,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    bus_round = storage.get_bus_round(round_id)
    if not bus_round:
        raise HTTPException(status_code=404, detail="Bus round not found")
    return bus_round


@router.post("/bus-rounds", response_model=BusRound, status_code=status.HTTP_201_CREATED)
def create_bus_round(
    bus_round: BusRoundCreate,
    background_tasks: BackgroundTasks,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    db_round = storage.create_bus_round(bus_round)
    background_tasks.add_task(
        record_activity, storage, activity.CREATE_BUS_ROUND, {"round_id": db_round.id}, current_user.id
    )
    return db_round


@router.put("/bus-rounds/{round_id}", response_model=BusRound)
def update_bus_round(
    round_id: int,
    bus_round: BusRoundCreate,
    background_tasks: BackgroundTasks,
    storage: Storage = Depends(get_storage),
    app_settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user)
):
    """Update a round; in strict mode its status only moves through start/stop"""
    fields = bus_round.model_dump(exclude_unset=True)
    if app_settings.strict_round_transitions and "status" in fields:
        current = storage.get_bus_round(round_id)
        if not current:
            raise HTTPException(status_code=404, detail="Bus round not found")
        if fields["status"] != current.status:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Round status changes from {current.status} only through start or stop"
            )

    db_round = storage.update_bus_round(round_id, fields)
    if not db_round:
        raise HTTPException(status_code=404, detail="Bus round not found")

    background_tasks.add_task(
        record_activity, storage, activity.UPDATE_BUS_ROUND, {"round_id": round_id}, current_user.id
    )
    return db_round


@router.delete("/bus-rounds/{round_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_bus_round(
    round_id: int,
    background_tasks: BackgroundTasks,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    """Delete a round together with its student assignments"""
    if not storage.get_bus_round(round_id):
        raise HTTPException(status_code=404, detail="Bus round not found")

    storage.delete_bus_round(round_id)

    background_tasks.add_task(
        record_activity, storage, activity.DELETE_BUS_ROUND, {"round_id": round_id}, current_user.id
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _apply_transition(
    transition: str,
    round_id: int,
    app_settings: Settings,
    background_tasks: BackgroundTasks,
    storage: Storage,
    current_user: User
) -> BusRound:
    bus_round = storage.get_bus_round(round_id)
    if not bus_round:
        raise HTTPException(status_code=404, detail="Bus round not found")

    strict = app_settings.strict_round_transitions
    try:
        new_status = rounds.next_status(transition, bus_round.status, strict=strict)
    except rounds.IllegalTransition as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    updated = storage.update_bus_round(round_id, {"status": new_status})
    if not updated:
        raise HTTPException(status_code=404, detail="Bus round not found")

    kind, message = rounds.notification_for(transition, updated.name)
    storage.create_notification(NotificationCreate(
        type=kind,
        message=message,
        round_id=round_id,
        bus_id=updated.bus_id,
        sender_id=current_user.id,
    ))
    logger.info(f"Round {round_id} {bus_round.status} -> {new_status} by {current_user.username}")

    action = activity.START_BUS_ROUND if transition == "start" else activity.STOP_BUS_ROUND
    background_tasks.add_task(record_activity, storage, action, {"round_id": round_id}, current_user.id)
    return updated


@router.post("/bus-rounds/{round_id}/start", response_model=BusRound)
def start_bus_round(
    round_id: int,
    background_tasks: BackgroundTasks,
    storage: Storage = Depends(get_storage),
    app_settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user)
):
    """Mark a round in progress and notify that it has started"""
    return _apply_transition("start", round_id, app_settings, background_tasks, storage, current_user)


@router.post("/bus-rounds/{round_id}/stop", response_model=BusRound)
def stop_bus_round(
    round_id: int,
    background_tasks: BackgroundTasks,
    storage: Storage = Depends(get_storage),
    app_settings: Settings = Depends(get_settings),
    current_user: User = Depends(get_current_user)
):
    """Mark a round completed and notify that it has finished"""
    return _apply_transition("stop", round_id, app_settings, background_tasks, storage, current_user)


# Students on a round
@router.get("/bus-rounds/{round_id}/students", response_model=List[RoundStudent])
def get_round_students(
    round_id: int,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    if not storage.get_bus_round(round_id):
        raise HTTPException(status_code=404, detail="Bus round not found")
    return storage.get_round_students(round_id)


@router.post("/bus-rounds/{round_id}/students", response_model=RoundStudent,
             status_code=status.HTTP_201_CREATED)
def assign_student_to_round(
    round_id: int,
    assignment: RoundStudentAssign,
    background_tasks: BackgroundTasks,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    """Add a student to a round at the given pickup order"""
    if not storage.get_bus_round(round_id):
        raise HTTPException(status_code=404, detail="Bus round not found")
    if not storage.get_student(assignment.student_id):
        raise HTTPException(status_code=404, detail="Student not found")
    if any(rs.student_id == assignment.student_id for rs in storage.get_round_students(round_id)):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT,
                            detail="Student is already assigned to this round")

    db_assignment = storage.assign_student_to_round(
        RoundStudentCreate(round_id=round_id, **assignment.model_dump())
    )
    background_tasks.add_task(
        record_activity, storage, activity.ASSIGN_STUDENT_TO_ROUND,
        {"round_id": round_id, "student_id": assignment.student_id}, current_user.id
    )
    return db_assignment


@router.delete("/bus-rounds/{round_id}/students/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_student_from_round(
    round_id: int,
    student_id: int,
    background_tasks: BackgroundTasks,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    if not any(rs.student_id == student_id for rs in storage.get_round_students(round_id)):
        raise HTTPException(status_code=404, detail="Student is not assigned to this round")

    storage.remove_student_from_round(round_id, student_id)

    background_tasks.add_task(
        record_activity, storage, activity.REMOVE_STUDENT_FROM_ROUND,
        {"round_id": round_id, "student_id": student_id}, current_user.id
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
