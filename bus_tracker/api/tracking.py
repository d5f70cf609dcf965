import random
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from typing import List
from ..schemas import User, Location, LocationCreate
from ..storage import Storage, get_storage
from ..core.permissions import get_current_user, require_role

router = APIRouter(prefix="/api", tags=["tracking"])


@router.post("/locations", response_model=Location, status_code=status.HTTP_201_CREATED)
def record_location(
    location: LocationCreate,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_role("driver"))
):
    """Record a GPS fix reported from a bus"""
    return storage.record_location(location)


@router.get("/buses/{bus_id}/locations", response_model=Location)
def get_latest_bus_location(
    bus_id: int,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    """Most recent known position of a bus"""
    location = storage.get_latest_bus_location(bus_id)
    if not location:
        raise HTTPException(status_code=404, detail="No location data found for bus")
    return location


@router.get("/buses/{bus_id}/locations/history", response_model=List[Location])
def get_bus_location_history(
    bus_id: int,
    limit: int = Query(50, ge=1, le=500),
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    return storage.get_bus_locations(bus_id, limit=limit)


@router.post("/buses/{bus_id}/locations/simulate", response_model=Location,
             status_code=status.HTTP_201_CREATED)
def simulate_bus_location(
    bus_id: int,
    request: Request,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_role("driver"))
):
    """Record a random position near the map centre, for demos without a GPS feed"""
    if not storage.get_bus(bus_id):
        raise HTTPException(status_code=404, detail="Bus not found")

    settings = request.app.state.settings
    jitter = settings.tracking_jitter
    latitude = settings.tracking_center_latitude + random.uniform(-jitter, jitter)
    longitude = settings.tracking_center_longitude + random.uniform(-jitter, jitter)

    return storage.record_location(LocationCreate(
        bus_id=bus_id,
        latitude=f"{latitude:.6f}",
        longitude=f"{longitude:.6f}",
    ))
