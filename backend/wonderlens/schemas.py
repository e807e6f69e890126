"""
Pydantic schemas for request/response validation
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any, Literal

# ===== Common Schemas =====

class HealthResponse(BaseModel):
    status: str

class DeleteResponse(BaseModel):
    success: bool
    message: str

# ===== Analysis Schemas =====

class DeviceInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    deviceId: Optional[str] = None
    deviceType: Optional[str] = None
    osVersion: Optional[str] = None
    appVersion: Optional[str] = None

class AnalyzeImageRequest(BaseModel):
    image: Optional[str] = None
    child_age: Optional[int] = None
    child_country: Optional[str] = None
    device_info: Optional[DeviceInfo] = None
    user_id: Optional[str] = None

class Lens(BaseModel):
    name: str
    text: str

class LearningContent(BaseModel):
    object: str
    lenses: List[Lens] = Field(min_length=1)

class UnrecognizedContent(BaseModel):
    object: Literal["unrecognized"]
    message: str

# ===== Scan Schemas =====

class ScanHistoryItem(BaseModel):
    id: str
    image_url: Optional[str] = None
    timestamp: int
    learningData: Dict[str, Any]
