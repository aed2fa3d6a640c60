import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from staffboard.main import app
from staffboard.allocation import AllocationService
from staffboard.core.allocation import get_allocation_service, reset_allocation_service
from staffboard.db.base import Base
from staffboard.db.session import get_db

# one shared in-memory database; StaticPool keeps the single connection alive
# across the TestClient worker thread and the test body
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db_session():
    """
    Fresh schema per test. Application code commits freely; the tables are
    dropped afterwards instead of rolling back an outer transaction.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def allocation_service():
    return AllocationService()


@pytest.fixture(autouse=True)
def override_dependencies(request):
    if "db_session" not in request.fixturenames:
        yield
        return

    db_session = request.getfixturevalue("db_session")
    service = request.getfixturevalue("allocation_service")

    def _get_db_override():
        yield db_session

    app.dependency_overrides[get_db] = _get_db_override
    app.dependency_overrides[get_allocation_service] = lambda: service
    yield
    app.dependency_overrides.clear()
    reset_allocation_service()
