"""Shared test infrastructure for the Ops Platform test suite.

Provides:
- db_session: SQLite in-memory session with all tables created
- make_workspace / make_user / make_booking_type / make_window / make_integration:
  row factories
- ready_workspace: an active workspace with a mock email channel, a 30 minute
  "Haircut" type and a Monday 09:00-10:00 window
- recording_notifier: stand-in for the delivery capability that records calls
- client / auth_headers: FastAPI TestClient wired to the same database
"""

import os

# Must be set before ops_platform.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ops_platform.database import Base, get_db
import ops_platform.models  # noqa: F401

from ops_platform.models import (
    AvailabilityWindow,
    BookingType,
    Integration,
    IntegrationType,
    UserRole,
    Workspace,
    WorkspaceStatus,
    WorkspaceUser,
)
from ops_platform.services.notifications import DeliveryResult
from ops_platform.utils.security import create_access_token, get_password_hash

# 2030-01-07 is a Monday (day_of_week 1)
MONDAY = date(2030, 1, 7)


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def engine():
    """One in-memory database per test, shared by every session on it."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.rollback()
    session.close()


# ---------------------------------------------------------------------------
# Row factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_workspace(db_session):
    def _factory(
        name: str = "Downtown Studio",
        timezone: str = "UTC",
        status: WorkspaceStatus = WorkspaceStatus.DRAFT,
        email_connected: bool = False,
        sms_connected: bool = False,
    ) -> Workspace:
        workspace = Workspace(
            name=name,
            timezone=timezone,
            status=status,
            email_connected=email_connected,
            sms_connected=sms_connected,
        )
        db_session.add(workspace)
        db_session.commit()
        db_session.refresh(workspace)
        return workspace

    return _factory


@pytest.fixture
def make_user(db_session):
    def _factory(
        workspace: Workspace,
        email: str = "owner@example.com",
        role: UserRole = UserRole.OWNER,
        password: str = "secret123",
    ) -> WorkspaceUser:
        user = WorkspaceUser(
            workspace_id=workspace.id,
            email=email,
            hashed_password=get_password_hash(password),
            full_name=email.split("@")[0].title(),
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _factory


@pytest.fixture
def make_booking_type(db_session):
    def _factory(workspace: Workspace, name: str = "Haircut", duration_minutes: int = 30) -> BookingType:
        booking_type = BookingType(workspace_id=workspace.id, name=name, duration_minutes=duration_minutes)
        db_session.add(booking_type)
        db_session.commit()
        db_session.refresh(booking_type)
        return booking_type

    return _factory


@pytest.fixture
def make_window(db_session):
    def _factory(
        workspace: Workspace,
        day_of_week: int,
        start_time: str,
        end_time: str,
        booking_type: BookingType = None,
    ) -> AvailabilityWindow:
        window = AvailabilityWindow(
            workspace_id=workspace.id,
            booking_type_id=booking_type.id if booking_type else None,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
        )
        db_session.add(window)
        db_session.commit()
        db_session.refresh(window)
        return window

    return _factory


@pytest.fixture
def make_integration(db_session):
    def _factory(
        workspace: Workspace,
        channel: IntegrationType = IntegrationType.EMAIL,
        provider: str = "mock",
        config: dict = None,
    ) -> Integration:
        integration = Integration(
            workspace_id=workspace.id,
            type=channel,
            provider=provider,
            config=config or {},
            is_active=True,
        )
        db_session.add(integration)
        if channel == IntegrationType.EMAIL:
            workspace.email_connected = True
        else:
            workspace.sms_connected = True
        db_session.commit()
        db_session.refresh(integration)
        return integration

    return _factory


@pytest.fixture
def ready_workspace(make_workspace, make_booking_type, make_window, make_integration, db_session):
    """Active workspace that accepts bookings for "Haircut" on Mondays 09:00-10:00 UTC."""
    workspace = make_workspace(status=WorkspaceStatus.ACTIVE)
    make_integration(workspace, IntegrationType.EMAIL)
    haircut = make_booking_type(workspace, "Haircut", 30)
    make_window(workspace, 1, "09:00", "10:00", booking_type=haircut)
    db_session.refresh(workspace)
    return workspace, haircut


# ---------------------------------------------------------------------------
# Notification stand-in
# ---------------------------------------------------------------------------

class RecordingNotifier:
    """Records every delivery request; succeeds, fails or raises on demand."""

    def __init__(self):
        self.calls = []
        self.succeed = True
        self.raise_error = None

    def __call__(self, db, workspace_id, channel, to, body, subject=None):
        self.calls.append({
            "workspace_id": workspace_id,
            "channel": channel,
            "to": to,
            "body": body,
            "subject": subject,
        })
        if self.raise_error is not None:
            raise self.raise_error
        if self.succeed:
            return DeliveryResult(success=True, external_id=f"rec-{len(self.calls)}")
        return DeliveryResult(success=False, error="provider unavailable")

    def channels(self):
        return [call["channel"] for call in self.calls]


@pytest.fixture
def recording_notifier():
    return RecordingNotifier()


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------

@pytest.fixture
def client(session_factory):
    from ops_platform.main import app

    def _get_test_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _factory(user: WorkspaceUser) -> dict:
        token = create_access_token(
            {"sub": str(user.id), "workspace_id": user.workspace_id, "role": user.role.value}
        )
        return {"Authorization": f"Bearer {token}"}

    return _factory
