"""Test fixtures and configuration."""
import os

os.environ.setdefault("OTEL_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

from typing import Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi import APIRouter, FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from routeguard.api.deps import CurrentScope  # noqa: E402
from routeguard.api.integration import build_route_registry, route_kind  # noqa: E402
from routeguard.config import Settings, get_settings  # noqa: E402
from routeguard.core.auth import create_session_token  # noqa: E402
from routeguard.core.registry import RouteKind, RouteRegistry  # noqa: E402
from routeguard.database import Base, get_db  # noqa: E402
from routeguard.main import create_app  # noqa: E402
from routeguard.models import User  # noqa: E402


def build_resource_router() -> APIRouter:
    """Router with a small project and task API as a host application would mount it."""
    router = APIRouter()

    @router.put("/projects")
    @route_kind(RouteKind.CREATE)
    def create_project(scope: CurrentScope):
        return {"action": "create"}

    @router.get("/projects")
    @route_kind(RouteKind.READ_ALL)
    def list_projects(scope: CurrentScope):
        return {"action": "read_all"}

    @router.get("/projects/{project}")
    @route_kind(RouteKind.READ_ONE)
    def get_project(project: int, scope: CurrentScope):
        return {"action": "read_one"}

    @router.post("/projects/{project}")
    @route_kind(RouteKind.UPDATE)
    def update_project(project: int, scope: CurrentScope):
        return {"action": "update"}

    @router.delete("/projects/{project}")
    @route_kind(RouteKind.DELETE)
    def delete_project(project: int, scope: CurrentScope):
        return {"action": "delete"}

    @router.get("/projects/{project}/background")
    def get_project_background(project: int, scope: CurrentScope):
        return {"action": "background"}

    @router.put("/projects/{project}/tasks")
    @route_kind(RouteKind.CREATE)
    def create_task(project: int, scope: CurrentScope):
        return {"action": "create"}

    @router.get("/projects/{project}/tasks")
    @route_kind(RouteKind.READ_ALL)
    def list_project_tasks(project: int, scope: CurrentScope):
        return {"action": "read_all"}

    @router.get("/tasks/all")
    @route_kind(RouteKind.READ_ALL)
    def list_all_tasks(scope: CurrentScope):
        return {"action": "read_all"}

    @router.post("/tasks/bulk")
    @route_kind(RouteKind.UPDATE)
    def bulk_update_tasks(scope: CurrentScope):
        return {"action": "bulk"}

    @router.get("/tasks/{task}")
    @route_kind(RouteKind.READ_ONE)
    def get_task(task: int, scope: CurrentScope):
        return {"action": "read_one"}

    @router.post("/tasks/{task}")
    @route_kind(RouteKind.UPDATE)
    def update_task(task: int, scope: CurrentScope):
        return {"action": "update"}

    @router.delete("/tasks/{task}")
    @route_kind(RouteKind.DELETE)
    def delete_task(task: int, scope: CurrentScope):
        return {"action": "delete"}

    @router.put("/tasks/{task}/attachments")
    @route_kind(RouteKind.UPLOAD_ATTACHMENT)
    def upload_attachment(task: int, scope: CurrentScope):
        return {"action": "create"}

    @router.get("/tasks/{task}/attachments/{attachment}")
    @route_kind(RouteKind.GET_ATTACHMENT)
    def get_attachment(task: int, attachment: int, scope: CurrentScope):
        return {"action": "read_one"}

    @router.get("/notifications")
    def list_notifications(scope: CurrentScope):
        return {"action": "notifications"}

    @router.get("/user")
    def get_user(scope: CurrentScope):
        return {"action": "user"}

    @router.get("/info")
    def get_info():
        return {"action": "info"}

    return router


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Get test settings."""
    return Settings(
        database_url="sqlite:///:memory:",
        environment="test",
        otel_enabled=False,
    )


@pytest.fixture
def app(test_settings) -> FastAPI:
    """Application with the resource router mounted."""
    return create_app(test_settings, routers=[build_resource_router()])


@pytest.fixture
def route_registry(app, test_settings) -> RouteRegistry:
    """Registry built from the test application's routes."""
    return build_route_registry(app, test_settings)


@pytest.fixture(scope="function")
def db_engine(test_settings):
    """Create a test database engine."""
    engine = create_engine(
        test_settings.database_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=db_engine
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(app, db_session, test_settings) -> Generator[TestClient, None, None]:
    """Create a test client."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    def override_get_settings():
        return test_settings

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = override_get_settings

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def test_user(db_session: Session) -> User:
    """Create a user."""
    user = User(username="testuser")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def session_client(client: TestClient, db_session: Session, test_user: User) -> TestClient:
    """Client authenticated with a user session."""
    token = create_session_token(db_session, test_user)
    client.headers["Authorization"] = f"Bearer {token}"
    return client
