"""
SCORM Router

Upload, validation, launch and runtime-tracking endpoints for SCORM 1.2 /
2004 packages. Parsing and CMI translation are delegated to the services
package; this module only deals with HTTP, files and persistence.

Package parsing failures (bad ZIP, missing or malformed manifest) are
``ScormPackageError`` subclasses and are turned into 400 responses by the
application-level exception handler.
"""

import logging
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

import aiofiles
from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    Header,
    HTTPException,
    Query,
    UploadFile,
    status,
)
from sqlalchemy.ext.asyncio import AsyncSession

from scorm_ingest.db.config import get_session
from scorm_ingest.models.scorm import TrackingUpdateRequest
from scorm_ingest.repositories.scorm_repo import (
    PackageNotFoundError,
    ScoNotFoundError,
    ScormPackageRepository,
    ScormTrackingRepository,
)
from scorm_ingest.services.cmi import build_tracking_fields, parse_cmi
from scorm_ingest.services.manifest_validator import validate_manifest
from scorm_ingest.services.package import convert_to_course_modules, parse_package

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scorm", tags=["SCORM"])

# Configuration constants
PACKAGE_DIR = Path(os.getenv("PACKAGE_DIR", "packages"))
MAX_PACKAGE_SIZE = int(os.getenv("MAX_PACKAGE_SIZE", 100 * 1024 * 1024))  # 100MB

ZIP_MIME_TYPES = {"application/zip", "application/x-zip-compressed"}
COURSE_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{1,64}$")

# Helpers ------------------------------------------------------------------


async def _get_package_repo(
    session: AsyncSession = Depends(get_session),
) -> ScormPackageRepository:
    return ScormPackageRepository(session)


async def _get_tracking_repo(
    session: AsyncSession = Depends(get_session),
) -> ScormTrackingRepository:
    return ScormTrackingRepository(session)


async def get_current_user_id(
    x_user_id: Optional[str] = Header(None),
) -> str:
    """Learner identity forwarded by the authenticating gateway."""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-Id header is required",
        )
    return x_user_id


async def _read_package(upload: UploadFile) -> bytes:
    """Read an uploaded package, enforcing type and size limits."""
    filename = upload.filename or ""
    if (
        upload.content_type not in ZIP_MIME_TYPES
        and not filename.lower().endswith(".zip")
    ):
        raise HTTPException(status_code=400, detail="Only ZIP files are allowed")

    data = await upload.read()
    if not data:
        raise HTTPException(status_code=400, detail="No file uploaded")
    if len(data) > MAX_PACKAGE_SIZE:
        raise HTTPException(
            status_code=400,
            detail=(
                f"Package size ({len(data)} bytes) exceeds maximum "
                f"allowed size ({MAX_PACKAGE_SIZE} bytes)"
            ),
        )
    return data


async def _store_package(course_id: str, data: bytes) -> str:
    """Write the archive under PACKAGE_DIR and return its public URL."""
    name = f"{int(datetime.utcnow().timestamp() * 1000)}.zip"
    course_dir = PACKAGE_DIR / course_id
    course_dir.mkdir(parents=True, exist_ok=True)
    async with aiofiles.open(course_dir / name, "wb") as f:
        await f.write(data)
    return f"/scorm/packages/{course_id}/{name}"

# Routes -------------------------------------------------------------------


@router.post(
    "/import",
    status_code=status.HTTP_201_CREATED,
    summary="Import SCORM Package",
)
async def import_package(
    package: UploadFile = File(...),
    courseId: str = Form(...),
    createModules: Optional[str] = Form(None),
    user_id: str = Depends(get_current_user_id),
    repo: ScormPackageRepository = Depends(_get_package_repo),
):
    """
    Upload, parse and store a SCORM package for a course

    1. Checks the upload is a ZIP within the size limit
    2. Parses imsmanifest.xml and extracts the launchable SCOs
    3. Rejects packages whose manifest has validation errors
    4. Stores the archive and persists package + SCO records
    """
    if not COURSE_ID_PATTERN.match(courseId):
        raise HTTPException(status_code=400, detail="Invalid courseId")

    data = await _read_package(package)
    scorm_package = parse_package(data)

    validation = validate_manifest(scorm_package.manifest)
    if not validation.valid:
        logger.info(
            "Rejected SCORM package for course %s: %s",
            courseId, validation.errors,
        )
        raise HTTPException(
            status_code=400,
            detail={
                "message": "Invalid SCORM package",
                "errors": validation.errors,
                "warnings": validation.warnings,
            },
        )

    package_url = await _store_package(courseId, data)
    record, sco_records = await repo.create(
        course_id=courseId,
        title=scorm_package.manifest.title or "Imported SCORM Package",
        version=scorm_package.version,
        manifest_data=scorm_package.manifest.model_dump(mode="json", by_alias=True),
        package_url=package_url,
        organization_identifier=scorm_package.organizationIdentifier,
        scos=scorm_package.scos,
    )
    logger.info(
        "User %s imported SCORM package %s into course %s (%d SCOs)",
        user_id, record.id, courseId, len(sco_records),
    )

    response = {
        "success": True,
        "packageId": record.id,
        "courseId": courseId,
        "version": scorm_package.version,
        "scos": [
            {
                "id": s.id,
                "identifier": s.identifier,
                "title": s.title,
                "launchUrl": s.launch_url,
            }
            for s in sco_records
        ],
        "warnings": validation.warnings,
    }
    if (createModules or "").lower() == "true":
        response["modules"] = convert_to_course_modules(scorm_package.scos, courseId)
    return response


@router.post("/validate", summary="Validate SCORM Package")
async def validate_package(package: UploadFile = File(...)):
    """
    Validate a SCORM package without importing it

    Returns the validation result together with a short package summary.
    """
    data = await _read_package(package)
    scorm_package = parse_package(data)
    validation = validate_manifest(scorm_package.manifest)

    body = validation.model_dump(mode="json", by_alias=True)
    body["package"] = {
        "version": scorm_package.version,
        "title": scorm_package.manifest.title,
        "scosCount": len(scorm_package.scos),
        "organizationIdentifier": scorm_package.organizationIdentifier,
    }
    return body


@router.get("/packages/{package_id}/preview", summary="Preview Stored Package")
async def preview_package(
    package_id: int, repo: ScormPackageRepository = Depends(_get_package_repo)
):
    try:
        record = await repo.get(package_id)
    except PackageNotFoundError:
        raise HTTPException(status_code=404, detail="SCORM package not found")
    scos = await repo.list_scos(record.id)

    return {
        **record.to_dict(),
        "scos": [
            {
                "id": s.id,
                "identifier": s.identifier,
                "title": s.title,
                "launchUrl": s.launch_url,
                "orderIndex": s.order_index,
            }
            for s in scos
        ],
    }


@router.get("/courses/{course_id}/packages", summary="List Course Packages")
async def list_course_packages(
    course_id: str, repo: ScormPackageRepository = Depends(_get_package_repo)
):
    packages = await repo.list_by_course(course_id)
    return [
        {
            "id": p.id,
            "title": p.title,
            "version": p.version,
            "createdAt": p.created_at.isoformat(),
        }
        for p in packages
    ]


@router.get("/content/{sco_id}/launch", summary="Launch SCO")
async def launch_sco(
    sco_id: int,
    user_id: str = Depends(get_current_user_id),
    repo: ScormPackageRepository = Depends(_get_package_repo),
    tracking_repo: ScormTrackingRepository = Depends(_get_tracking_repo),
):
    """Return launch information, creating the learner's tracking row on first launch."""
    try:
        sco = await repo.get_sco(sco_id)
    except ScoNotFoundError:
        raise HTTPException(status_code=404, detail="SCO not found")
    # read before the tracking write, which may roll the session back
    launch = {
        "scoId": sco.id,
        "launchUrl": sco.launch_url,
        "entryPoint": sco.entry_point,
    }

    initial = parse_cmi({
        "student_id": user_id,
        "entry": "ab-initio",
        "lesson_status": "not attempted",
    })
    tracking, _ = await tracking_repo.get_or_create(
        user_id=user_id,
        sco_id=launch["scoId"],
        cmi_data=initial.model_dump(exclude_none=True),
        fields=build_tracking_fields(initial),
    )
    return {**launch, "trackingId": tracking.id}


@router.post("/tracking/{sco_id}", summary="Update SCO Tracking")
async def update_tracking(
    sco_id: int,
    payload: TrackingUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    repo: ScormPackageRepository = Depends(_get_package_repo),
    tracking_repo: ScormTrackingRepository = Depends(_get_tracking_repo),
):
    """
    Store the runtime state reported by a SCO

    The raw ``cmiData`` is translated into the canonical record; the derived
    completion/success status, score and times replace the stored values.
    """
    if payload.cmiData is None:
        raise HTTPException(status_code=400, detail="cmiData is required")

    try:
        sco = await repo.get_sco(sco_id)
    except ScoNotFoundError:
        raise HTTPException(status_code=404, detail="SCO not found")

    cmi = parse_cmi(payload.cmiData)
    fields = build_tracking_fields(cmi)
    tracking = await tracking_repo.save(
        user_id, sco.id, cmi.model_dump(exclude_none=True), fields
    )

    return {
        "success": True,
        "tracking": {
            "id": tracking.id,
            "completionStatus": tracking.completion_status,
            "successStatus": tracking.success_status,
            "scoreScaled": tracking.score_scaled,
            "scoreRaw": tracking.score_raw,
            "sessionTime": tracking.session_time,
            "totalTime": tracking.total_time,
        },
    }


@router.get("/tracking/{requested_user_id}", summary="Get Learner Tracking")
async def get_tracking(
    requested_user_id: str,
    courseId: Optional[str] = Query(None),
    user_id: str = Depends(get_current_user_id),
    tracking_repo: ScormTrackingRepository = Depends(_get_tracking_repo),
):
    if requested_user_id != user_id:
        raise HTTPException(status_code=403, detail="Access denied")
    records = await tracking_repo.list_by_user(requested_user_id, courseId)
    return [r.to_dict() for r in records]


@router.get("/export/{course_id}", summary="Export Course as SCORM Package")
async def export_course(course_id: str):
    """Packaging a course back into SCORM is not supported yet."""
    raise HTTPException(
        status_code=status.HTTP_501_NOT_IMPLEMENTED,
        detail="SCORM export not yet implemented",
    )
