from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response, status
from typing import List
from ..schemas import User, Bus, BusCreate
from ..storage import Storage, get_storage
from ..core import activity
from ..core.activity import record_activity
from ..core.permissions import get_current_user

router = APIRouter(prefix="/api", tags=["buses"])


@router.get("/buses", response_model=List[Bus])
def get_buses(
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    """Get all buses"""
    return storage.get_buses()


@router.get("/buses/{bus_id}", response_model=Bus)
def get_bus(
    bus_id: int,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    bus = storage.get_bus(bus_id)
    if not bus:
        raise HTTPException(status_code=404, detail="Bus not found")
    return bus


@router.post("/buses", response_model=Bus, status_code=status.HTTP_201_CREATED)
def create_bus(
    bus: BusCreate,
    background_tasks: BackgroundTasks,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    """Register a bus, optionally with its driver"""
    db_bus = storage.create_bus(bus)
    background_tasks.add_task(
        record_activity, storage, activity.CREATE_BUS, {"bus_id": db_bus.id}, current_user.id
    )
    return db_bus


@router.put("/buses/{bus_id}", response_model=Bus)
def update_bus(
    bus_id: int,
    bus: BusCreate,
    background_tasks: BackgroundTasks,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    db_bus = storage.update_bus(bus_id, bus.model_dump(exclude_unset=True))
    if not db_bus:
        raise HTTPException(status_code=404, detail="Bus not found")

    background_tasks.add_task(
        record_activity, storage, activity.UPDATE_BUS, {"bus_id": bus_id}, current_user.id
    )
    return db_bus


@router.delete("/buses/{bus_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_bus(
    bus_id: int,
    background_tasks: BackgroundTasks,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    """Delete a bus; its location history goes with it, its rounds are unassigned"""
    if not storage.get_bus(bus_id):
        raise HTTPException(status_code=404, detail="Bus not found")

    storage.delete_bus(bus_id)

    background_tasks.add_task(
        record_activity, storage, activity.DELETE_BUS, {"bus_id": bus_id}, current_user.id
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
