import pytest
import os
from datetime import timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["CRON_SECRET"] = "test-cron-secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["EMAIL_ENABLED"] = "false"

from hrms.core.clock import local_today
from hrms.database import Base, get_db
from hrms.main import app
from hrms.services.email import RecordingEmailSender, get_email_sender
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def db_session():
    """Get a clean database session for each test function with rollback safety."""
    connection = engine.connect()
    transaction = connection.begin()
    # Use sessionmaker with the active connection
    session = TestingSessionLocal(bind=connection)
    
    yield session
    
    session.close()
    transaction.rollback()
    connection.close()

def _add_employee(db_session, employee_id, email, manager=None, joined_days_ago=730):
    from hrms.models.employee import Employee

    employee = Employee(
        employee_id=employee_id,
        first_name=employee_id.title(),
        last_name="Tester",
        email=email,
        joining_date=local_today() - timedelta(days=joined_days_ago),
        reporting_manager=manager,
    )
    db_session.add(employee)
    db_session.commit()
    return employee

@pytest.fixture(scope="function")
def hr_employee(db_session):
    return _add_employee(db_session, "HR001", "hr@alphacorp.com")

@pytest.fixture(scope="function")
def manager(db_session):
    return _add_employee(db_session, "MGR001", "manager@alphacorp.com")

@pytest.fixture(scope="function")
def employee(db_session, manager):
    """Regular employee reporting to `manager`, well past probation."""
    return _add_employee(db_session, "EMP001", "employee@alphacorp.com", manager=manager.employee_id)

@pytest.fixture(scope="function")
def new_joiner(db_session, manager):
    """Joined a month ago, so still on probation."""
    return _add_employee(db_session, "EMP002", "joiner@alphacorp.com", manager=manager.employee_id, joined_days_ago=30)

@pytest.fixture(scope="function")
def get_token():
    """Helper fixture to create access tokens for an employee and role."""
    from hrms.services.auth import create_access_token
    
    def _get_token(employee, role="employee"):
        return create_access_token(data={
            "sub": employee.email,
            "role": role,
            "employee_id": employee.employee_id,
            "name": employee.full_name,
            "type": "access"
        })
    return _get_token

@pytest.fixture(scope="function")
def auth_headers(get_token):
    def _auth_headers(employee, role="employee"):
        return {"Authorization": f"Bearer {get_token(employee, role)}"}
    return _auth_headers

@pytest.fixture(scope="function")
def outbox():
    """Captures outgoing email instead of calling SES."""
    return RecordingEmailSender()

@pytest.fixture(scope="function")
def client(db_session, outbox):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass
            
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_sender] = lambda: outbox
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
