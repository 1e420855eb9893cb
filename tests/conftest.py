import pytest
import os
from typing import Any, Dict, List, Optional
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from aria.core.exceptions import UpstreamError
from aria.core.limiter import limiter
from aria.database import Base, get_db
from aria.main import app
from aria.services.embedding_service import get_embedding_client
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# pysqlite's own transaction handling breaks SAVEPOINT-based rollback;
# let SQLAlchemy emit BEGIN itself (documented SQLAlchemy recipe).
@event.listens_for(engine, "connect")
def _sqlite_connect(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _sqlite_begin(conn):
    conn.exec_driver_sql("BEGIN")


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeEmbedder:
    """
    Deterministic embedder. Texts listed in ``vectors`` get that vector,
    anything else gets ``default``. ``fail_on`` makes the n-th call (0-based)
    raise an UpstreamError.
    """

    def __init__(
        self,
        vectors: Optional[Dict[str, List[float]]] = None,
        default: Optional[List[float]] = None,
        fail_on: Optional[int] = None,
    ):
        self.vectors = vectors or {}
        self.default = default or [1.0, 0.0, 0.0]
        self.fail_on = fail_on
        self.calls: List[str] = []

    def embed(self, text: str) -> List[float]:
        call_number = len(self.calls)
        self.calls.append(text)
        if self.fail_on is not None and call_number == self.fail_on:
            raise UpstreamError("Embedding service request failed.")
        return list(self.vectors.get(text, self.default))

    def embed_or_none(self, text: str) -> Optional[List[float]]:
        try:
            return self.embed(text)
        except UpstreamError:
            return None


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield

@pytest.fixture(scope="function")
def db_session():
    """Get a clean database session for each test function with rollback safety."""
    connection = engine.connect()
    transaction = connection.begin()
    # Commits inside the service layer become savepoints on this connection
    session = TestingSessionLocal(bind=connection, join_transaction_mode="create_savepoint")

    yield session

    session.close()
    transaction.rollback()
    connection.close()

@pytest.fixture(scope="function")
def fake_embedder():
    return FakeEmbedder()

@pytest.fixture(scope="function")
def client(db_session, fake_embedder):
    """TestClient using the test database session and a fake embedder."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_embedding_client] = lambda: fake_embedder
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

@pytest.fixture(scope="function")
def embedder_factory():
    """The FakeEmbedder class, for tests that need a custom configuration."""
    return FakeEmbedder
