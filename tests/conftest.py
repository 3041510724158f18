import pytest
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SEED_DEMO_DATA"] = "false"

from app.database import Base, get_db
from app.main import app
from app.models.department import Department
from app.models.user import User, UserRole
from app.schemas.review import ReviewItemIn
from app.services.review_service import ReviewService
from app.services.review_store import ReviewStore
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite://"


@pytest.fixture(scope="function")
def db_session():
    """A fresh in-memory database per test; StaticPool keeps one shared connection."""
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


def _add_user(db_session, **fields):
    user = User(is_active=True, **fields)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope="function")
def department(db_session):
    root = Department(name="Engineering")
    team = Department(name="Platform", parent=root)
    db_session.add_all([root, team])
    db_session.commit()
    return team


@pytest.fixture(scope="function")
def manager(db_session, department):
    return _add_user(db_session, name="Wang Manager", email="manager@example.com",
                     role=UserRole.TEAM_LEAD, department_id=department.id)


@pytest.fixture(scope="function")
def employee(db_session, manager, department):
    return _add_user(db_session, name="Li Si", email="lisi@example.com",
                     role=UserRole.EMPLOYEE, department_id=department.id, manager_id=manager.id)


@pytest.fixture(scope="function")
def other_manager(db_session):
    return _add_user(db_session, name="Chen Lead", email="chen@example.com", role=UserRole.TEAM_LEAD)


@pytest.fixture(scope="function")
def orphan_employee(db_session):
    """An employee with no manager on record."""
    return _add_user(db_session, name="Zhou Solo", email="zhou@example.com", role=UserRole.EMPLOYEE)


@pytest.fixture(scope="function")
def hr_user(db_session):
    return _add_user(db_session, name="HR Partner", email="hr@example.com", role=UserRole.HR)


@pytest.fixture(scope="function")
def admin_user(db_session):
    return _add_user(db_session, name="Administrator", email="admin@example.com", role=UserRole.ADMIN)


@pytest.fixture(scope="function")
def service(db_session):
    return ReviewService(ReviewStore(db_session))


@pytest.fixture
def valid_items():
    """Four items; the two work-performance items carry 50 + 30 = 80."""
    return [
        ReviewItemIn(category="work_performance", title="Ship v2.0", description="Deliver the module",
                     weight=50, target="Released on time"),
        ReviewItemIn(category="work_performance", title="Fix bugs", description="Reduce production bugs",
                     weight=30, target="Bug count down 50%"),
        ReviewItemIn(category="ai_usage", title="Large-model usage", description="Use AI tooling",
                     weight=10, target="Used in daily work"),
        ReviewItemIn(category="values", title="Values", description="Share knowledge",
                     weight=10, target="Monthly sharing"),
    ]


@pytest.fixture(scope="function")
def get_token():
    """Helper fixture to create access tokens for a user."""
    from app.core.security import create_access_token

    def _get_token(user):
        return create_access_token(data={
            "sub": str(user.id),
            "role": user.role.value,
            "type": "access"
        })
    return _get_token


@pytest.fixture(scope="function")
def auth_headers(get_token):
    def _headers(user):
        return {"Authorization": f"Bearer {get_token(user)}"}
    return _headers


@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
