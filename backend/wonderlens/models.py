import uuid
from datetime import datetime
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy import Column, String, Integer, Date, DateTime, ForeignKey, JSON, UniqueConstraint

Base = declarative_base()

def _uuid() -> str:
    return str(uuid.uuid4())

class Device(Base):
    __tablename__ = "devices"
    id = Column(String, primary_key=True, default=_uuid)
    # client-generated deviceId, lifted out of device_info so creation can upsert on it
    device_unique_id = Column(String, nullable=False, unique=True, index=True)
    device_info = Column(JSON, nullable=False)
    device_type = Column(String, nullable=True)
    os_version = Column(String, nullable=True)
    app_version = Column(String, nullable=True)
    user_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    scans = relationship("Scan", back_populates="device")

class Scan(Base):
    __tablename__ = "scans"
    id = Column(String, primary_key=True, default=_uuid)
    device_id = Column(String, ForeignKey("devices.id"), nullable=True, index=True)
    user_id = Column(String, nullable=True)
    image_url = Column(String, nullable=False)
    child_age = Column(Integer, nullable=True)
    child_country = Column(String, nullable=True)
    image_size_kb = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    device = relationship("Device", back_populates="scans")
    openai_responses = relationship(
        "LLMResponse",
        back_populates="scan",
        order_by="LLMResponse.created_at",
    )

class LLMResponse(Base):
    __tablename__ = "openai_responses"
    id = Column(String, primary_key=True, default=_uuid)
    scan_id = Column(String, ForeignKey("scans.id"), nullable=False, index=True)
    response_json = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    scan = relationship("Scan", back_populates="openai_responses")

class DailyKidNews(Base):
    __tablename__ = "daily_kidnews"
    __table_args__ = (UniqueConstraint("date", "country", "age_band", name="uq_daily_kidnews_key"),)
    id = Column(String, primary_key=True, default=_uuid)
    date = Column(Date, nullable=False, index=True)
    country = Column(String, nullable=False)
    age_band = Column(String, nullable=False)
    json_blob = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

class QuizContent(Base):
    __tablename__ = "quiz_content"
    __table_args__ = (UniqueConstraint("category", "age_band", name="uq_quiz_content_key"),)
    id = Column(String, primary_key=True, default=_uuid)
    category = Column(String, nullable=False)
    age_band = Column(String, nullable=False)
    json_blob = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
