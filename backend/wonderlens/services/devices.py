from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import upsert_insert
from ..logger import logger
from ..models import Device
from ..schemas import DeviceInfo


async def find_device(db: AsyncSession, device_unique_id: str) -> Optional[Device]:
    result = await db.execute(select(Device).where(Device.device_unique_id == device_unique_id))
    return result.scalar_one_or_none()


async def resolve_device(db: AsyncSession, device_info: DeviceInfo, user_id: Optional[str] = None) -> Optional[Device]:
    """
    Return the device row for the client's deviceId, creating it on first sight.

    Creation is INSERT ... ON CONFLICT DO NOTHING on the unique id, so two first
    scans racing from the same device end up sharing one row. Existing rows are
    never modified.
    """
    if not device_info.deviceId:
        return None

    stmt = (
        upsert_insert(db, Device)
        .values(
            device_unique_id=device_info.deviceId,
            device_info=device_info.model_dump(exclude_none=True),
            device_type=device_info.deviceType,
            os_version=device_info.osVersion,
            app_version=device_info.appVersion,
            user_id=user_id,
        )
        .on_conflict_do_nothing(index_elements=["device_unique_id"])
    )
    result = await db.execute(stmt)
    await db.commit()
    if result.rowcount:
        logger.info("Created device", extra={"device_unique_id": device_info.deviceId})

    return await find_device(db, device_info.deviceId)
