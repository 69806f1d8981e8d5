"""Repository layer for SCORM package, SCO and tracking persistence.

Routers stay thin and never touch the SQLAlchemy session directly. The
core parsing services know nothing about this module.
"""
from __future__ import annotations
from typing import Iterable, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from scorm_ingest.models.persisted_scorm import (
    ScormPackageRecord,
    ScormScoRecord,
    ScormTrackingRecord,
)
from scorm_ingest.models.scorm import Sco, TrackingFields


class PackageNotFoundError(Exception):
    """Raised when a SCORM package record could not be located."""


class ScoNotFoundError(Exception):
    """Raised when a SCO record could not be located."""


_TRACKING_COLUMNS = {
    "completionStatus": "completion_status",
    "successStatus": "success_status",
    "scoreScaled": "score_scaled",
    "scoreRaw": "score_raw",
    "scoreMin": "score_min",
    "scoreMax": "score_max",
    "sessionTime": "session_time",
    "totalTime": "total_time",
    "location": "location",
    "suspendData": "suspend_data",
}


class ScormPackageRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    # CREATE -----------------------------------------------------------------
    async def create(
        self,
        course_id: str,
        title: str,
        version: str,
        manifest_data: dict,
        package_url: str,
        organization_identifier: str,
        scos: Iterable[Sco],
    ) -> tuple[ScormPackageRecord, list[ScormScoRecord]]:
        """Store a package and its SCOs in one transaction."""
        package = ScormPackageRecord(
            course_id=course_id,
            title=title,
            version=version,
            manifest_data=manifest_data,
            package_url=package_url,
            organization_identifier=organization_identifier,
        )
        self.session.add(package)
        await self.session.flush()

        sco_records = [
            ScormScoRecord(
                package_id=package.id,
                identifier=sco.identifier,
                title=sco.title,
                launch_url=sco.launchUrl,
                entry_point=sco.entryPoint,
                json_data=sco.metadata,
                order_index=sco.orderIndex,
            )
            for sco in scos
        ]
        self.session.add_all(sco_records)
        await self.session.commit()
        await self.session.refresh(package)
        for record in sco_records:
            await self.session.refresh(record)
        return package, sco_records

    # READ -------------------------------------------------------------------
    async def get(self, pk: int) -> ScormPackageRecord:
        result = await self.session.execute(
            select(ScormPackageRecord).where(ScormPackageRecord.id == pk)
        )
        record = result.scalar_one_or_none()
        if not record:
            raise PackageNotFoundError
        return record

    async def list_by_course(self, course_id: str) -> Sequence[ScormPackageRecord]:
        result = await self.session.execute(
            select(ScormPackageRecord)
            .where(ScormPackageRecord.course_id == course_id)
            .order_by(ScormPackageRecord.created_at)
        )
        return result.scalars().all()

    async def list_scos(self, package_id: int) -> Sequence[ScormScoRecord]:
        result = await self.session.execute(
            select(ScormScoRecord)
            .where(ScormScoRecord.package_id == package_id)
            .order_by(ScormScoRecord.order_index)
        )
        return result.scalars().all()

    async def get_sco(self, pk: int) -> ScormScoRecord:
        result = await self.session.execute(
            select(ScormScoRecord).where(ScormScoRecord.id == pk)
        )
        record = result.scalar_one_or_none()
        if not record:
            raise ScoNotFoundError
        return record


class ScormTrackingRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: str, sco_id: int) -> Optional[ScormTrackingRecord]:
        result = await self.session.execute(
            select(ScormTrackingRecord).where(
                ScormTrackingRecord.user_id == user_id,
                ScormTrackingRecord.sco_id == sco_id,
            )
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        user_id: str,
        sco_id: int,
        cmi_data: dict,
        fields: Optional[TrackingFields] = None,
    ) -> ScormTrackingRecord:
        record = ScormTrackingRecord(user_id=user_id, sco_id=sco_id, cmi_data=cmi_data)
        if fields is not None:
            self._apply(record, fields)
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)
        return record

    async def update(
        self,
        record: ScormTrackingRecord,
        cmi_data: dict,
        fields: TrackingFields,
    ) -> ScormTrackingRecord:
        """Replace the stored snapshot; runtimes resend the full state."""
        record.cmi_data = cmi_data
        self._apply(record, fields)
        await self.session.commit()
        await self.session.refresh(record)
        return record

    async def get_or_create(
        self,
        user_id: str,
        sco_id: int,
        cmi_data: dict,
        fields: Optional[TrackingFields] = None,
    ) -> tuple[ScormTrackingRecord, bool]:
        """Return ``(record, created)``, seeding a new row with ``cmi_data``."""
        record = await self.get(user_id, sco_id)
        if record is not None:
            return record, False
        try:
            return await self.create(user_id, sco_id, cmi_data, fields), True
        except IntegrityError:
            # another request created the row first
            await self.session.rollback()
            record = await self.get(user_id, sco_id)
            if record is None:
                raise
            return record, False

    async def save(
        self,
        user_id: str,
        sco_id: int,
        cmi_data: dict,
        fields: TrackingFields,
    ) -> ScormTrackingRecord:
        """Create or replace the learner's row for a SCO."""
        record, created = await self.get_or_create(user_id, sco_id, cmi_data, fields)
        if created:
            return record
        return await self.update(record, cmi_data, fields)

    async def list_by_user(
        self, user_id: str, course_id: Optional[str] = None
    ) -> Sequence[ScormTrackingRecord]:
        stmt = select(ScormTrackingRecord).where(
            ScormTrackingRecord.user_id == user_id
        )
        if course_id is not None:
            stmt = (
                stmt.join(ScormScoRecord, ScormScoRecord.id == ScormTrackingRecord.sco_id)
                .join(ScormPackageRecord, ScormPackageRecord.id == ScormScoRecord.package_id)
                .where(ScormPackageRecord.course_id == course_id)
            )
        result = await self.session.execute(stmt.order_by(ScormTrackingRecord.id))
        return result.scalars().all()

    @staticmethod
    def _apply(record: ScormTrackingRecord, fields: TrackingFields) -> None:
        for name, column in _TRACKING_COLUMNS.items():
            setattr(record, column, getattr(fields, name))
