"""Shared test fixtures for the content store, export service, and auth tokens."""

import uuid
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from haven_api.core.background import BoundedTaskRunner
from haven_api.core.config import Settings
from haven_api.core.security import create_access_token
from haven_api.lib.export_jobs import JobRegistry
from haven_api.models import (
    Attendance,
    Blog,
    Contact,
    Event,
    EventAttendee,
    MembershipRole,
    Ministry,
    MinistryMember,
    Sermon,
    User,
)
from haven_api.models.base import Base
from haven_api.services.export_service import ExportService


@dataclass
class SeededContent:
    """Ids of the rows created by the ``seeded_content`` fixture."""

    admin: User
    users: list[User] = field(default_factory=list)
    blog_ids: dict[str, uuid.UUID] = field(default_factory=dict)
    sermon_ids: dict[str, uuid.UUID] = field(default_factory=dict)


@pytest.fixture
def export_dir(tmp_path: Path) -> Path:
    return tmp_path / "exports"


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    # File-backed so background jobs and requests get separate connections
    return f"sqlite+aiosqlite:///{tmp_path / 'content.db'}"


@pytest.fixture
def settings(database_url: str, export_dir: Path) -> Settings:
    """Test application settings."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        database_url=database_url,
        jwt_secret_key="test-secret-key-not-for-production",
        jwt_algorithm="HS256",
        jwt_access_token_expire_minutes=30,
        export_dir=str(export_dir),
    )


@pytest.fixture
async def async_engine(database_url: str) -> AsyncGenerator[AsyncEngine]:
    """Create a SQLite content store with every table."""
    engine = create_async_engine(database_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, expire_on_commit=False)


@pytest.fixture
async def async_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession]:
    async with session_factory() as session:
        yield session


def _user(first_name: str, role: str = "member", **overrides) -> User:
    defaults = {
        "id": uuid.uuid4(),
        "first_name": first_name,
        "last_name": "Tester",
        "email": f"{first_name.lower()}@havenword.test",
        "hashed_password": "$2b$12$not-a-real-hash",
        "role": role,
        "active": True,
        "avatar_url": f"https://cdn.havenword.test/avatars/{first_name.lower()}.png",
    }
    defaults.update(overrides)
    return User(**defaults)


@pytest.fixture
async def seeded_content(session_factory: async_sessionmaker[AsyncSession]) -> SeededContent:
    """Populate every collection.

    5 users (1 admin, 1 inactive), 3 blogs (2 published, 1 over a year old),
    2 sermons, 1 event with an attendee, 1 ministry with a leader and a
    member, 2 attendance records, and 1 contact submission.
    """
    async with session_factory() as session:
        return await _seed(session)


async def _seed(async_session: AsyncSession) -> SeededContent:
    now = datetime.now(UTC)
    admin = _user("Grace", role="admin")
    members = [
        _user("Daniel"),
        _user("Esther"),
        _user("Samuel", role="pastor"),
        _user("Ruth", active=False),
    ]
    async_session.add_all([admin, *members])
    await async_session.flush()

    news = Blog(
        title="Harvest Sunday",
        slug="harvest-sunday",
        excerpt="Join us",
        content="Harvest service details",
        category="news",
        tags=["harvest"],
        status="published",
        author_id=admin.id,
        moderated_by_id=members[2].id,
        featured_image={"url": "https://cdn.havenword.test/harvest.jpg", "alt": "Harvest"},
        images=[{"url": "https://cdn.havenword.test/inline.jpg"}],
        published_at=now,
    )
    devotional = Blog(
        title="Morning Devotional",
        slug="morning-devotional",
        excerpt="Daily word",
        content="=SUM(A1:A2)",
        category="devotional",
        tags=[],
        status="draft",
        author_id=members[0].id,
    )
    archived = Blog(
        title="Old Announcement",
        slug="old-announcement",
        excerpt="From long ago",
        content="Archived content",
        category="news",
        tags=[],
        status="published",
        author_id=admin.id,
        created_at=now - timedelta(days=400),
    )
    sermon = Sermon(
        title="Walking in Faith",
        description="Hebrews 11",
        scripture_reference="Hebrews 11:1-6",
        speaker_name="Pastor John Doe",
        service_date=now,
        category="sunday-service",
        status="published",
        tags=["faith"],
        media={"audio": {"url": "https://cdn.havenword.test/faith.mp3"}},
        featured_image_url="https://cdn.havenword.test/faith.jpg",
        created_by_id=admin.id,
    )
    guest_sermon = Sermon(
        title="Hope Renewed",
        description="Isaiah 40",
        scripture_reference="Isaiah 40:31",
        speaker_name="Guest Speaker",
        service_date=now,
        category="special",
        status="draft",
        tags=[],
    )
    event = Event(
        title="Youth Camp",
        description="Summer youth camp",
        category="youth",
        event_type="retreat",
        start_date=now + timedelta(days=10),
        end_date=now + timedelta(days=12),
        location={"name": "Camp Hill"},
        status="published",
        images=[{"url": "https://cdn.havenword.test/camp.jpg"}],
        created_by_id=admin.id,
    )
    ministry = Ministry(
        name="Choir",
        slug="choir",
        description="Music ministry",
        category="worship",
        images=[],
    )
    contact = Contact(
        first_name="Visitor",
        last_name="One",
        email="visitor@example.test",
        subject="Prayer request",
        message="Please pray for my family",
        documents=[{"url": "https://cdn.havenword.test/letter.pdf"}],
        assigned_to_id=members[2].id,
    )
    async_session.add_all([news, devotional, archived, sermon, guest_sermon, event, ministry, contact])
    await async_session.flush()

    async_session.add_all(
        [
            EventAttendee(event_id=event.id, user_id=members[0].id, status="registered"),
            MinistryMember(ministry_id=ministry.id, user_id=admin.id, role=MembershipRole.LEADER),
            MinistryMember(ministry_id=ministry.id, user_id=members[1].id, role=MembershipRole.MEMBER),
            Attendance(
                user_id=members[0].id,
                activity_type="service",
                activity_title="Sunday Service",
                attendance_date=now,
                check_in_time=now,
            ),
            Attendance(
                user_id=members[0].id,
                activity_type="event",
                activity_title="Youth Camp",
                attendance_date=now,
                check_in_time=now,
                status="late",
            ),
        ]
    )
    await async_session.commit()

    return SeededContent(
        admin=admin,
        users=[admin, *members],
        blog_ids={"news": news.id, "devotional": devotional.id, "archived": archived.id},
        sermon_ids={"faith": sermon.id, "guest": guest_sermon.id},
    )


@pytest.fixture
async def task_runner() -> AsyncGenerator[BoundedTaskRunner]:
    runner = BoundedTaskRunner(max_concurrency=2)
    yield runner
    await runner.shutdown()


@pytest.fixture
def job_registry() -> JobRegistry:
    return JobRegistry()


@pytest.fixture
def export_service(
    job_registry: JobRegistry,
    task_runner: BoundedTaskRunner,
    session_factory: async_sessionmaker[AsyncSession],
    export_dir: Path,
) -> ExportService:
    """Export service wired to the SQLite content store and a temp export dir."""
    return ExportService(
        job_registry,
        task_runner,
        session_factory,
        export_dir=export_dir,
    )


@pytest.fixture
def admin_token(settings: Settings) -> str:
    """Generate a JWT access token for the seeded admin."""
    return create_access_token(
        subject="grace@havenword.test",
        role="admin",
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


@pytest.fixture
def member_token(settings: Settings) -> str:
    """Generate a JWT access token for a seeded member."""
    return create_access_token(
        subject="daniel@havenword.test",
        role="member",
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )
