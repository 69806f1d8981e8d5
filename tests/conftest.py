"""
Pytest configuration and fixtures for backend testing
"""

import io
import os
import zipfile
from typing import Callable, Dict, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
)
from sqlalchemy.pool import NullPool

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["AUTO_MIGRATE"] = "false"

from scorm_ingest.main import app
from scorm_ingest.db.config import get_session
from scorm_ingest.models.persisted_scorm import Base as PersistedBase
from scorm_ingest.routers import scorm as scorm_router


MINIMAL_MANIFEST = """<?xml version="1.0" encoding="UTF-8"?>
<manifest identifier="com.example.minimal" version="1.0"
          xmlns="http://www.imsproject.org/xsd/imscp_rootv1p1p2"
          xmlns:adlcp="http://www.adlnet.org/xsd/adlcp_rootv1p2">
  <metadata>
    <schema>ADL SCORM</schema>
    <schemaversion>1.2</schemaversion>
  </metadata>
  <organizations default="ORG-1">
    <organization identifier="ORG-1">
      <title>Minimal Course</title>
      <item identifier="ITEM-1" identifierref="RES-1">
        <title>Lesson One</title>
      </item>
    </organization>
  </organizations>
  <resources>
    <resource identifier="RES-1" type="webcontent" adlcp:scormtype="sco" href="index.html">
      <file href="index.html"/>
    </resource>
  </resources>
</manifest>
"""

NESTED_MANIFEST_2004 = """<?xml version="1.0" encoding="UTF-8"?>
<manifest identifier="com.example.nested" version="1.3"
          xmlns="http://www.imsglobal.org/xsd/imscp_v1p1"
          xmlns:adlcp="http://www.adlnet.org/xsd/adlcp_v1p3">
  <metadata>
    <schema>ADL SCORM</schema>
    <schemaversion>2004 4th Edition</schemaversion>
  </metadata>
  <organizations default="ORG-A">
    <organization identifier="ORG-A">
      <title>Nested Course</title>
      <item identifier="MODULE-1">
        <title>Module 1</title>
        <item identifier="SCO-A" identifierref="RES-A" parameters="?page=1">
          <title>Part A</title>
        </item>
        <item identifier="SCO-B" identifierref="RES-MISSING">
          <title>Part B</title>
        </item>
      </item>
      <item identifier="SCO-C" identifierref="RES-C">
        <title>Part C</title>
      </item>
    </organization>
  </organizations>
  <resources>
    <resource identifier="RES-A" type="webcontent" adlcp:scormType="sco" href="a/index.html">
      <file href="a/index.html"/>
      <file href="a/app.js"/>
    </resource>
    <resource identifier="RES-C" type="webcontent" adlcp:scormType="sco">
      <file href="c/start.html"/>
    </resource>
  </resources>
</manifest>
"""

NO_ORGANIZATION_MANIFEST = """<?xml version="1.0" encoding="UTF-8"?>
<manifest identifier="com.example.empty">
  <organizations/>
  <resources/>
</manifest>
"""


def build_zip(files: Dict[str, str]) -> bytes:
    """Build an in-memory ZIP archive from a path -> text mapping"""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def make_package() -> Callable[..., bytes]:
    """Factory building a SCORM ZIP with a manifest and launch files"""
    def _make(
        manifest: Optional[str] = MINIMAL_MANIFEST,
        files: Optional[Dict[str, str]] = None,
    ) -> bytes:
        entries = dict(files or {"index.html": "<html><body>Lesson</body></html>"})
        if manifest is not None:
            entries["imsmanifest.xml"] = manifest
        return build_zip(entries)

    return _make


@pytest.fixture
def minimal_package(make_package) -> bytes:
    return make_package()


@pytest.fixture
def nested_package(make_package) -> bytes:
    return make_package(
        NESTED_MANIFEST_2004,
        files={
            "a/index.html": "<html>A</html>",
            "a/app.js": "// app",
            "c/start.html": "<html>C</html>",
        },
    )


@pytest.fixture(scope="session")
def test_client():
    """Create a test client for FastAPI application"""
    with TestClient(app) as client:
        yield client


@pytest.fixture
async def db_app(tmp_path, monkeypatch):
    """App wired to a throw-away SQLite database and package directory"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test_scorm.db'}",
        future=True,
        poolclass=NullPool,
    )
    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    # Create schema
    async with engine.begin() as conn:
        await conn.run_sync(PersistedBase.metadata.create_all)

    # Dependency override
    async def override_session():
        async with async_session() as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    monkeypatch.setattr(scorm_router, "PACKAGE_DIR", tmp_path / "packages")

    yield app

    # Teardown
    app.dependency_overrides.clear()
    await engine.dispose()


def pytest_collection_modifyitems(config, items):
    """Add markers to tests based on their location"""
    for item in items:
        if "api" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
