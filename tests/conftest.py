#tests\conftest.py

"""Pytest configuration and fixtures."""

import pytest

from sqlalchemy import create_engine, event
from sqlalchemy.pool import StaticPool

from provisioning_engine.core.daemon import ServerDaemon
from provisioning_engine.core.errors import AgentConnectionError
from provisioning_engine.core.identifiers import UuidGenerator
from provisioning_engine.domain.eggs import PAPER_EGG, VALHEIM_EGG
from provisioning_engine.domain.models import Node
from provisioning_engine.infrastructure.memory.repository import (
    InMemoryEggRepository,
    InMemoryNodeRepository,
    InMemoryServerRepository,
)
from provisioning_engine.infrastructure.postgres.database import (
    drop_db,
    get_session_factory,
    init_db,
)
from provisioning_engine.infrastructure.postgres.egg_repository import (
    SqlEggRepository,
    SqlNodeRepository,
)
from provisioning_engine.infrastructure.postgres.repository import SqlServerRepository
from provisioning_engine.orchestrator.server_creation import ServerCreationService
from provisioning_engine.services.deletion import ServerDeletionService


# ============================================
# FAKE DAEMON
# ============================================

class FakeDaemon(ServerDaemon):
    """Records daemon calls; can be told to fail like an unreachable node."""

    def __init__(self, fail_create=False, fail_delete=False):
        self.fail_create = fail_create
        self.fail_delete = fail_delete
        self.created = []
        self.deleted = []

    def create_server(self, server, start_on_completion=True):
        if self.fail_create:
            raise AgentConnectionError("daemon unreachable", node_id=server.node_id)
        self.created.append((server.uuid, start_on_completion))

    def delete_server(self, server):
        if self.fail_delete:
            raise AgentConnectionError("daemon unreachable", node_id=server.node_id)
        self.deleted.append(server.uuid)


# ============================================
# DATABASE
# ============================================

@pytest.fixture(scope="function")
def test_engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def enable_foreign_keys(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    init_db(engine)

    yield engine

    drop_db(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def test_session_factory(test_engine):
    """Create session factory for tests."""
    return get_session_factory(test_engine)


@pytest.fixture
def server_repository(test_session_factory):
    """Create repository with test database session factory."""
    return SqlServerRepository(session_factory=test_session_factory)


@pytest.fixture
def egg_repository(test_session_factory):
    return SqlEggRepository(session_factory=test_session_factory)


@pytest.fixture
def node_repository(test_session_factory):
    return SqlNodeRepository(session_factory=test_session_factory)


@pytest.fixture
def node(node_repository):
    return node_repository.create(
        Node(name="node-1", fqdn="node1.example.com", daemon_token="secret-token")
    )


@pytest.fixture
def paper_egg(egg_repository):
    return egg_repository.create(PAPER_EGG)


@pytest.fixture
def valheim_egg(egg_repository):
    return egg_repository.create(VALHEIM_EGG)


# ============================================
# IN-MEMORY
# ============================================

@pytest.fixture
def memory_server_repository():
    return InMemoryServerRepository()


@pytest.fixture
def memory_egg_repository():
    return InMemoryEggRepository()


@pytest.fixture
def memory_node_repository():
    return InMemoryNodeRepository()


# ============================================
# SERVICES
# ============================================

@pytest.fixture
def daemon():
    return FakeDaemon()


@pytest.fixture
def deletion_service(server_repository, daemon):
    return ServerDeletionService(server_repository, daemon)


@pytest.fixture
def creation_service(server_repository, egg_repository, daemon, deletion_service):
    """Create service wired to the SQLite repositories and the fake daemon."""
    return ServerCreationService(
        server_repo=server_repository,
        egg_repo=egg_repository,
        daemon=daemon,
        deletion_service=deletion_service,
        uuid_generator=UuidGenerator(server_repository),
    )


@pytest.fixture
def server_data(node, paper_egg):
    """Minimal valid creation payload for the Paper egg."""
    return {
        "name": "Survival",
        "owner_id": 1,
        "node_id": node.id,
        "egg_id": paper_egg.id,
        "memory": 2048,
        "disk": 10240,
        "cpu": 200,
        "ports": ["25565"],
        "environment": {"SERVER_JARFILE": "paper.jar"},
    }
