import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from postboard.database import get_session
from postboard.main import app


@pytest.fixture(autouse=True)
def _fast_hashing(monkeypatch):
    """Keep bcrypt cheap in tests."""
    monkeypatch.setattr("postboard.config.settings.bcrypt_rounds", 4)


@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    def get_session_override():
        yield session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def register_user(client: TestClient):
    def _register(username: str, password: str = "secret1") -> dict:
        response = client.post(
            "/api/auth/register",
            json={"username": username, "password": password},
        )
        assert response.status_code == 201
        return response.json()

    return _register


@pytest.fixture
def alice(register_user) -> dict:
    return register_user("alice")


@pytest.fixture
def alice_token(alice: dict) -> str:
    return alice["token"]


@pytest.fixture
def bob_token(register_user) -> str:
    return register_user("bob", "hunter22")["token"]
