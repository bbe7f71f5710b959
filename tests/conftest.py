from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import services.notification_management.models  # noqa: F401  (registers every model)
from services.user_management.models.classes import SchoolClass
from services.user_management.models.students import Student
from services.user_management.models.subjects import Subject
from services.user_management.models.users import User, UserRole
from shared.auth import Identity, create_identity_token
from shared.db import Base, get_db


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


def identity_for(user):
    return Identity(user_id=user.id, username=user.username, role=user.role)


def auth_headers(user):
    return {"Authorization": f"Bearer {create_identity_token(identity_for(user))}"}


@pytest.fixture
async def school(db):
    """
    Two teachers, two headteachers, one admin.
    Class 1A (teacher) teaches Math and English; Class 1B (other_teacher) has no subjects.
    """
    admin = User(username="admin", hashed_password="-", role=UserRole.ADMIN)
    teacher = User(username="teacher1", full_name="Tom Teacher", hashed_password="-", role=UserRole.TEACHER)
    other_teacher = User(username="teacher2", hashed_password="-", role=UserRole.TEACHER)
    head = User(username="headteacher1", hashed_password="-", role=UserRole.HEADTEACHER)
    deputy_head = User(username="headteacher2", hashed_password="-", role=UserRole.HEADTEACHER)
    db.add_all([admin, teacher, other_teacher, head, deputy_head])
    await db.flush()

    math = Subject(name="Math")
    english = Subject(name="English")
    science = Subject(name="Science")
    class_1a = SchoolClass(name="Class 1A", teacher_id=teacher.id, subjects=[math, english])
    class_1b = SchoolClass(name="Class 1B", teacher_id=other_teacher.id)
    db.add_all([math, english, science, class_1a, class_1b])
    await db.flush()

    student = Student(name="John Doe", class_id=class_1a.id)
    unassigned = Student(name="Jane Smith", class_id=None)
    student_1b = Student(name="Bob Johnson", class_id=class_1b.id)
    db.add_all([student, unassigned, student_1b])
    await db.commit()

    return SimpleNamespace(
        admin=admin,
        teacher=teacher,
        other_teacher=other_teacher,
        head=head,
        deputy_head=deputy_head,
        math=math,
        english=english,
        science=science,
        class_1a=class_1a,
        class_1b=class_1b,
        student=student,
        unassigned=unassigned,
        student_1b=student_1b,
    )


@pytest.fixture
async def client(session_factory):
    from main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
