"""SQLAlchemy ORM models for persisted SCORM packages, SCOs and tracking.

Separate from the Pydantic models in scorm.py, which describe parsed
packages in memory. This layer manages persistence concerns only.
"""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column, declarative_base
from sqlalchemy import (
    String, DateTime, JSON, Text, Float, Integer, ForeignKey, UniqueConstraint
)

Base = declarative_base()


class ScormPackageRecord(Base):
    __tablename__ = "scorm_packages"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    course_id: Mapped[str] = mapped_column(String(64), index=True)
    title: Mapped[str] = mapped_column(String(200))
    version: Mapped[str] = mapped_column(String(8))
    manifest_data: Mapped[dict] = mapped_column(JSON, nullable=False)
    package_url: Mapped[str] = mapped_column(String(500))
    organization_identifier: Mapped[str] = mapped_column(String(200))
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "courseId": self.course_id,
            "title": self.title,
            "version": self.version,
            "packageUrl": self.package_url,
            "organizationIdentifier": self.organization_identifier,
            "createdAt": self.created_at.isoformat(),
        }


class ScormScoRecord(Base):
    """One launchable SCO of a stored package."""

    __tablename__ = "scorm_scos"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    package_id: Mapped[int] = mapped_column(
        ForeignKey("scorm_packages.id", ondelete="CASCADE"), index=True
    )
    identifier: Mapped[str] = mapped_column(String(200))
    title: Mapped[str] = mapped_column(String(200))
    launch_url: Mapped[str] = mapped_column(String(500))
    entry_point: Mapped[str] = mapped_column(String(500))
    json_data: Mapped[dict] = mapped_column(JSON, nullable=False)
    order_index: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "packageId": self.package_id,
            "identifier": self.identifier,
            "title": self.title,
            "launchUrl": self.launch_url,
            "entryPoint": self.entry_point,
            "metadata": self.json_data,
            "orderIndex": self.order_index,
        }


class ScormTrackingRecord(Base):
    """Latest runtime state of one learner on one SCO."""

    __tablename__ = "scorm_tracking"
    __table_args__ = (
        UniqueConstraint("user_id", "sco_id", name="uq_scorm_tracking_user_sco"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    sco_id: Mapped[int] = mapped_column(
        ForeignKey("scorm_scos.id", ondelete="CASCADE"), index=True
    )
    cmi_data: Mapped[dict] = mapped_column(JSON, nullable=False)
    completion_status: Mapped[Optional[str]] = mapped_column(
        String(32), nullable=True
    )
    success_status: Mapped[Optional[str]] = mapped_column(
        String(32), nullable=True
    )
    score_scaled: Mapped[Optional[str]] = mapped_column(
        String(32), nullable=True
    )
    score_raw: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    score_min: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    score_max: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    session_time: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    total_time: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    suspend_data: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "scoId": self.sco_id,
            "cmiData": self.cmi_data,
            "completionStatus": self.completion_status,
            "successStatus": self.success_status,
            "scoreScaled": self.score_scaled,
            "scoreRaw": self.score_raw,
            "scoreMin": self.score_min,
            "scoreMax": self.score_max,
            "sessionTime": self.session_time,
            "totalTime": self.total_time,
            "location": self.location,
            "suspendData": self.suspend_data,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }
