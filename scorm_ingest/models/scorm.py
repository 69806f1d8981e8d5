"""
Pydantic Models for SCORM Packages and Runtime Tracking

These models describe the in-memory shape of a parsed imsmanifest.xml, the
launchable SCOs extracted from it, and the CMI runtime data reported by
content during a learning session. Persistence lives separately in
persisted_scorm.py.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SCORMVersion = Literal["1.2", "2004"]

DEFAULT_TITLE = "Untitled Course"


class ResourceFile(BaseModel):
    """File entry listed under a manifest resource"""
    href: str = Field(default="", description="Path of the file inside the archive")


class Resource(BaseModel):
    """Manifest Resource Model"""
    identifier: str = Field(default="", description="Resource identifier")
    type: str = Field(default="webcontent", description="Resource type tag")
    href: Optional[str] = Field(None, description="Primary launch file")
    files: List[ResourceFile] = Field(default_factory=list, description="Files of the resource")


class Item(BaseModel):
    """Organization item; recursive, a leaf references a resource"""
    identifier: str = Field(default="", description="Item identifier")
    identifierref: Optional[str] = Field(None, description="Identifier of the referenced resource")
    title: str = Field(default=DEFAULT_TITLE, description="Item title")
    items: Optional[List["Item"]] = Field(None, description="Child items, None for a leaf")
    parameters: Optional[str] = Field(None, description="Launch parameters")


class Organization(BaseModel):
    """Manifest Organization Model"""
    identifier: str = Field(default="", description="Organization identifier")
    title: str = Field(default=DEFAULT_TITLE, description="Organization title")
    items: List[Item] = Field(default_factory=list, description="Root items of the tree")


class Metadata(BaseModel):
    """Manifest metadata; unknown keys are kept as-is"""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    schema_: Optional[str] = Field(None, alias="schema", description="Schema name")
    schemaversion: Optional[str] = Field(None, description="Schema version")
    title: Optional[Any] = None
    description: Optional[Any] = None
    keywords: Optional[Any] = None
    general: Optional[Any] = None
    technical: Optional[Any] = None
    educational: Optional[Any] = None
    rights: Optional[Any] = None


class Manifest(BaseModel):
    """Parsed imsmanifest.xml"""
    identifier: str = Field(default="", description="Manifest identifier")
    version: Optional[str] = Field(None, description="Manifest version attribute")
    title: str = Field(default=DEFAULT_TITLE, description="Course title")
    organizations: List[Organization] = Field(default_factory=list)
    resources: List[Resource] = Field(default_factory=list)
    metadata: Optional[Metadata] = None


class Sco(BaseModel):
    """Shareable Content Object: one launchable unit of a package"""
    identifier: str = Field(..., description="Identifier of the originating item")
    title: str = Field(..., description="Item title")
    launchUrl: str = Field(..., description="Launch file path inside the archive")
    entryPoint: str = Field(..., description="Entry point, same as launchUrl")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Resource type and item parameters")
    orderIndex: int = Field(..., ge=0, description="Position in the flattened item tree")


class ScormPackage(BaseModel):
    """Result of parsing a SCORM ZIP package"""
    version: SCORMVersion
    manifest: Manifest
    scos: List[Sco] = Field(default_factory=list)
    organizationIdentifier: str = Field(default="default")


class ValidationResult(BaseModel):
    """Structural validation outcome; errors are fatal, warnings advisory"""
    valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    manifest: Optional[Manifest] = None


# CMI runtime data model -----------------------------------------------------


class CMIScore(BaseModel):
    raw: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
    scaled: Optional[float] = None


class CMITime(BaseModel):
    session_time: Optional[str] = Field(None, description="HH:MM:SS.SS")
    total_time: Optional[str] = None


class CMIData(BaseModel):
    """Canonical CMI record.

    Every field is optional; a field absent from the tracking payload stays
    ``None`` and is dropped by ``model_dump(exclude_none=True)``. Status
    fields are free strings since runtimes do not agree on the vocabulary.
    """
    student_id: Optional[str] = None
    student_name: Optional[str] = None
    lesson_location: Optional[str] = None
    lesson_status: Optional[str] = None
    entry: Optional[str] = None
    exit: Optional[str] = None
    suspend_data: Optional[str] = None
    launch_data: Optional[str] = None
    comments: Optional[str] = None
    comments_from_lms: Optional[str] = None
    score: Optional[CMIScore] = None
    time: Optional[CMITime] = None
    interactions: Optional[List[Any]] = None
    objectives: Optional[List[Any]] = None

    # SCORM 2004
    completion_status: Optional[str] = None
    success_status: Optional[str] = None


class TrackingFields(BaseModel):
    """Tracking columns derived from a CMI record"""
    completionStatus: Optional[str] = None
    successStatus: Optional[str] = None
    scoreScaled: Optional[str] = None
    scoreRaw: Optional[float] = None
    scoreMin: Optional[float] = None
    scoreMax: Optional[float] = None
    sessionTime: Optional[int] = None
    totalTime: Optional[int] = None
    location: Optional[str] = None
    suspendData: Optional[str] = None


# API Request/Response Models


class TrackingUpdateRequest(BaseModel):
    """Tracking POST body; cmiData is deliberately untyped"""
    cmiData: Optional[Any] = Field(None, description="Raw CMI payload from the runtime")


class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Current environment")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Check timestamp")
    uptime: Optional[float] = Field(None, description="Uptime in seconds")
