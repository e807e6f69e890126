from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import delete, desc, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..logger import logger
from ..models import LLMResponse, Scan
from ..storage import get_public_url
from .age_bands import community_age_window


async def create_scan(
    db: AsyncSession,
    *,
    device_id: Optional[str],
    user_id: Optional[str],
    image_url: str,
    child_age: Optional[int],
    child_country: Optional[str],
    image_size_kb: int,
) -> Scan:
    scan = Scan(
        device_id=device_id,
        user_id=user_id,
        image_url=image_url,
        child_age=child_age,
        child_country=child_country,
        image_size_kb=image_size_kb,
    )
    db.add(scan)
    await db.commit()
    await db.refresh(scan)
    logger.info("Scan created", extra={"scan_id": scan.id, "device_id": device_id})
    return scan


async def save_llm_response(db: AsyncSession, scan_id: str, response_json: Dict[str, Any]) -> LLMResponse:
    row = LLMResponse(scan_id=scan_id, response_json=response_json)
    db.add(row)
    await db.commit()
    await db.refresh(row)
    return row


def _epoch_ms(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def to_history_items(scans: Sequence[Scan]) -> List[Dict[str, Any]]:
    """
    Flatten scans into {id, image_url, timestamp, learningData}.

    Only the first (oldest) response of each scan counts; scans without a parsed
    response are dropped.
    """
    items = []
    for scan in scans:
        response = scan.openai_responses[0] if scan.openai_responses else None
        if response is None or not response.response_json:
            continue
        items.append({
            "id": scan.id,
            "image_url": get_public_url(scan.image_url),
            "timestamp": _epoch_ms(scan.created_at),
            "learningData": response.response_json,
        })
    return items


async def list_device_scans(db: AsyncSession, device_id: str) -> List[Scan]:
    result = await db.execute(
        select(Scan)
        .where(Scan.device_id == device_id)
        .options(selectinload(Scan.openai_responses))
        .order_by(desc(Scan.created_at), desc(Scan.id))
    )
    return list(result.scalars().all())


async def list_community_scans(db: AsyncSession, limit: int, viewer_age: Optional[int] = None) -> List[Scan]:
    """Most recent scans across all devices that have a stored response."""
    has_response = select(LLMResponse.id).where(LLMResponse.scan_id == Scan.id).exists()
    query = select(Scan).where(has_response)
    if viewer_age is not None:
        low, high = community_age_window(viewer_age)
        query = query.where(Scan.child_age >= low, Scan.child_age <= high)

    query = (
        query.options(selectinload(Scan.openai_responses))
        .order_by(desc(Scan.created_at), desc(Scan.id))
        .limit(limit)
    )

    result = await db.execute(query)
    return list(result.scalars().all())


async def delete_device_scan(db: AsyncSession, scan_id: str, device_id: str) -> bool:
    """
    Delete a scan owned by the device, responses first.

    Returns False when no scan with that id belongs to the device.
    """
    result = await db.execute(select(Scan).where(Scan.id == scan_id, Scan.device_id == device_id))
    scan = result.scalar_one_or_none()
    if scan is None:
        return False

    await db.execute(delete(LLMResponse).where(LLMResponse.scan_id == scan_id))
    await db.execute(delete(Scan).where(Scan.id == scan_id))
    await db.commit()
    logger.info("Scan deleted", extra={"scan_id": scan_id, "device_id": device_id})
    return True
