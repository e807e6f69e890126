"""
Scan history and community routes
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..schemas import DeleteResponse, ScanHistoryItem
from ..exceptions import DeviceNotFoundError, InvalidParameterError, ScanNotFoundError
from ..services.devices import find_device
from ..services.scans import delete_device_scan, list_community_scans, list_device_scans, to_history_items
from ..logger import logger

router = APIRouter(prefix="/api/scans", tags=["Scans"])

DEFAULT_COMMUNITY_LIMIT = 20
MAX_COMMUNITY_LIMIT = 100

def community_limit(raw: Optional[str]) -> int:
    """Missing, zero, negative or non-numeric limits fall back to the default; large ones are clamped."""
    try:
        value = int(raw) if raw is not None else 0
    except ValueError:
        value = 0
    if value <= 0:
        return DEFAULT_COMMUNITY_LIMIT
    return min(value, MAX_COMMUNITY_LIMIT)

@router.get("/history", response_model=List[ScanHistoryItem])
async def get_scan_history(
    device_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """Get a device's scans, newest first"""
    if not device_id:
        raise InvalidParameterError("Device ID is required")

    device = await find_device(db, device_id)
    if not device:
        raise DeviceNotFoundError(device_id)

    scans = await list_device_scans(db, device.id)
    history = to_history_items(scans)
    logger.info("Scan history fetched", extra={"device_id": device_id, "count": len(history)})
    return history

@router.get("/community", response_model=List[ScanHistoryItem])
async def get_community_scans(
    limit: Optional[str] = Query(None),
    age: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """Get recent scans from every device, optionally near the viewer's age"""
    scans = await list_community_scans(db, limit=community_limit(limit), viewer_age=age)
    return to_history_items(scans)

@router.delete("/{scan_id}", response_model=DeleteResponse)
async def delete_scan(
    scan_id: str,
    device_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """Delete one of the device's scans along with its learning data"""
    if not device_id:
        raise InvalidParameterError("Device ID is required")

    device = await find_device(db, device_id)
    if not device:
        raise DeviceNotFoundError(device_id)

    deleted = await delete_device_scan(db, scan_id, device.id)
    if not deleted:
        raise ScanNotFoundError(scan_id)

    return DeleteResponse(success=True, message="Scan deleted successfully")
