import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..config import settings
from ..schemas import LearningContent, UnrecognizedContent
from . import llm
from .prompts import CORE_IDENTITY, LENS_COUNT, LENS_NAMES, build_lens_prompt

logger = logging.getLogger(__name__)

def as_data_url(image: str) -> str:
    if image.startswith("data:"):
        return image
    return f"data:image/jpeg;base64,{image}"

async def analyze_image(image: str, child_age: Optional[int], child_country: Optional[str]) -> str:
    """Ask the vision model for lenses about the pictured object; returns raw model text."""
    prompt = build_lens_prompt(child_age, child_country)
    logger.debug("WonderLens prompt built", extra={"prompt": prompt})

    messages = [
        {"role": "system", "content": prompt},
        {"role": "user", "content": [{"type": "image_url", "image_url": {"url": as_data_url(image)}}]},
    ]
    logger.info(
        "Sending image to vision model",
        extra={"model": settings.VISION_MODEL, "image_size_kb": round(len(image) / 1024)},
    )
    return await llm.chat_completion_text(
        messages,
        model=settings.VISION_MODEL,
        max_tokens=settings.VISION_MAX_TOKENS,
        temperature=settings.VISION_TEMPERATURE,
        top_p=settings.VISION_TOP_P,
    )

def classify_content(data: Dict[str, Any]) -> str:
    """
    Label a parsed model result as "lenses", "unrecognized", "error" or "nonconforming".

    Purely observational; callers return the payload unchanged whatever the label.
    """
    if "error" in data and "object" not in data:
        return "error"
    try:
        UnrecognizedContent.model_validate(data)
        return "unrecognized"
    except ValidationError:
        pass
    try:
        content = LearningContent.model_validate(data)
    except ValidationError:
        return "nonconforming"

    names = [lens.name for lens in content.lenses]
    if len(names) != LENS_COUNT:
        logger.warning("Model returned unexpected lens count", extra={"lens_count": len(names)})
    if CORE_IDENTITY not in names:
        logger.warning("Model omitted mandatory lens", extra={"lenses": names})
    unknown = [n for n in names if n not in LENS_NAMES]
    if unknown:
        logger.warning("Model returned lenses outside the menu", extra={"unknown_lenses": unknown})
    return "lenses"
