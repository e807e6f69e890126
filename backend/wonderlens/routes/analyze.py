"""
Image analysis route - scan an object and get learning lenses
"""
import traceback
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..schemas import AnalyzeImageRequest
from ..exceptions import DataStoreError, LLMServiceError, MissingImageError
from ..inference import vision
from ..inference.json_guard import parse_model_json_or_error
from ..services.devices import resolve_device
from ..services.scans import create_scan, save_llm_response
from .. import storage
from ..logger import logger

router = APIRouter(prefix="/api", tags=["Analyze"])

@router.post("/analyze-image")
async def analyze_image(
    payload: AnalyzeImageRequest,
    db: AsyncSession = Depends(get_db)
) -> Dict[str, Any]:
    """
    Upload the scan, record it, and return the model's lenses for the pictured object.

    Steps run in order and are not rolled back: once the image is stored and the
    scan row exists they stay, even if the model call fails afterwards.
    """
    if not payload.image:
        logger.warning("Analyze request without image")
        raise MissingImageError()

    image_size_kb = round(len(payload.image) / 1024)
    logger.info(
        "Analyze request received",
        extra={
            "image_size_kb": image_size_kb,
            "child_age": payload.child_age,
            "child_country": payload.child_country,
            "has_device_info": payload.device_info is not None,
        }
    )

    image_url = storage.upload_scan_image(payload.image, payload.user_id)

    device = None
    if payload.device_info is not None:
        try:
            device = await resolve_device(db, payload.device_info, payload.user_id)
        except Exception as e:
            await db.rollback()
            logger.error(
                f"Device lookup failed, continuing without device: {e}",
                extra={"traceback": traceback.format_exc()}
            )

    try:
        scan = await create_scan(
            db,
            device_id=device.id if device else None,
            user_id=payload.user_id,
            image_url=image_url,
            child_age=payload.child_age,
            child_country=payload.child_country,
            image_size_kb=image_size_kb,
        )
    except Exception as e:
        await db.rollback()
        logger.error(f"Failed to create scan: {e}", extra={"image_url": image_url})
        raise DataStoreError("Failed to create scan", details=str(e))

    scan_id = scan.id

    try:
        text = await vision.analyze_image(payload.image, payload.child_age, payload.child_country)
    except Exception as e:
        logger.error(
            f"Vision model call failed for scan {scan_id}: {e}",
            extra={"scan_id": scan_id, "traceback": traceback.format_exc()}
        )
        raise LLMServiceError(details=str(e))

    logger.debug("Raw model response", extra={"scan_id": scan_id, "raw_response": text})
    data = parse_model_json_or_error(text)
    logger.info(
        "Model response parsed",
        extra={"scan_id": scan_id, "content_kind": vision.classify_content(data)}
    )

    try:
        await save_llm_response(db, scan_id, data)
    except Exception as e:
        await db.rollback()
        logger.error(f"Failed to store model response for scan {scan_id}: {e}", extra={"scan_id": scan_id})

    return data
