#provisioning_engine\container.py

"""Dependency injection container - wires all services together."""

from daemon_agent.client import DaemonServerClient
from provisioning_engine.core.identifiers import UuidGenerator
from provisioning_engine.core.validation import VariableValidator
from provisioning_engine.infrastructure.postgres.egg_repository import (
    SqlEggRepository,
    SqlNodeRepository,
)
from provisioning_engine.infrastructure.postgres.repository import SqlServerRepository
from provisioning_engine.orchestrator.server_creation import ServerCreationService
from provisioning_engine.services.deletion import ServerDeletionService
from provisioning_engine.services.startup import StartupVariableService


# ============================================
# REPOSITORIES
# ============================================

server_repository = SqlServerRepository()
egg_repository = SqlEggRepository()
node_repository = SqlNodeRepository()


# ============================================
# DAEMON
# ============================================

daemon_client = DaemonServerClient(node_repo=node_repository)


# ============================================
# SERVICES
# ============================================

deletion_service = ServerDeletionService(
    server_repo=server_repository,
    daemon=daemon_client,
)

creation_service = ServerCreationService(
    server_repo=server_repository,
    egg_repo=egg_repository,
    daemon=daemon_client,
    deletion_service=deletion_service,
    validator=VariableValidator(egg_repository),
    uuid_generator=UuidGenerator(server_repository),
)

startup_service = StartupVariableService(
    server_repo=server_repository,
    egg_repo=egg_repository,
)
