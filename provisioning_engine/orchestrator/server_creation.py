# provisioning_engine/orchestrator/server_creation.py
"""Server creation orchestrator - persists a server then creates it on its node."""

import logging
from typing import Any, Dict, List, Optional

from provisioning_engine.core.daemon import ServerDaemon
from provisioning_engine.core.endpoint import Endpoint
from provisioning_engine.core.errors import AgentConnectionError, PreconditionError
from provisioning_engine.core.identifiers import UuidGenerator
from provisioning_engine.core.models import Server, UserLevel
from provisioning_engine.core.repository import EggRepository, ServerRepository
from provisioning_engine.core.validation import ValidatedVariable, VariableValidator
from provisioning_engine.domain.models import Egg
from provisioning_engine.services.deletion import ServerDeletionService

logger = logging.getLogger(__name__)


class ServerCreationService:
    """
    Creates a server in the panel and on the daemon.

    Flow:
    1. Normalize input and fill image/startup from the egg
    2. Validate egg variables at the admin tier
    3. Persist server and variables in one transaction
    4. Ask the daemon to create the server
    5. If the daemon call fails, force-delete the local server and re-raise

    The daemon needs the server on disk before it can create it, so the local
    commit always happens first and the forced deletion is the only rollback.
    """

    def __init__(
        self,
        server_repo: ServerRepository,
        egg_repo: EggRepository,
        daemon: ServerDaemon,
        deletion_service: ServerDeletionService,
        validator: Optional[VariableValidator] = None,
        uuid_generator: Optional[UuidGenerator] = None,
    ):
        self._server_repo = server_repo
        self._egg_repo = egg_repo
        self._daemon = daemon
        self._deletion_service = deletion_service
        self._validator = validator or VariableValidator(egg_repo)
        self._uuid_generator = uuid_generator or UuidGenerator(server_repo)

    def provision(
        self,
        data: Dict[str, Any],
        egg_id: int,
        node_id: int,
        validate_variables: bool = True,
    ) -> Server:
        """Entry point taking egg and node explicitly."""
        return self.handle(
            {**data, "egg_id": egg_id, "node_id": node_id},
            validate_variables=validate_variables,
        )

    def handle(self, data: Dict[str, Any], validate_variables: bool = True) -> Server:
        """
        Create a server and trigger its creation on the daemon.

        Raises:
            PreconditionError: node or egg missing
            ValidationError: a variable value violates its rules
            PersistenceError: the local transaction could not commit
            AgentConnectionError: the daemon failed; the local server was removed
        """
        data = dict(data)

        if data.get("oom_killer") is None and data.get("oom_disabled") is not None:
            data["oom_killer"] = not data["oom_disabled"]

        egg = self._require_egg(data.get("egg_id"))

        # Fill missing fields from egg
        if data.get("image") is None:
            data["image"] = egg.default_image
        if data.get("startup") is None:
            data["startup"] = egg.startup

        if not data.get("node_id"):
            raise PreconditionError("A node_id is required to create a server")

        data["ports"] = [Endpoint(port) for port in data.get("ports") or []]

        variables = self._validate_variables(egg, data, validate_variables)

        server = self._server_repo.create_with_variables(data, variables, self._uuid_generator)
        logger.info(f"[creation] persisted server {server.uuid} on node {server.node_id}")

        start_on_completion = data.get("start_on_completion")
        if start_on_completion is None:
            start_on_completion = True

        try:
            self._daemon.create_server(server, start_on_completion=bool(start_on_completion))
        except AgentConnectionError as exception:
            logger.error(f"[creation] daemon failed to create server {server.uuid}: {exception}")
            self._compensate(server)
            raise

        logger.info(f"[creation] server {server.uuid} created on daemon")
        return server

    # -------------------------
    # INTERNAL HELPERS
    # -------------------------

    def _require_egg(self, egg_id: Optional[int]) -> Egg:
        if egg_id is None:
            raise PreconditionError("An egg_id is required to create a server")

        egg = self._egg_repo.get(egg_id)
        if egg is None:
            raise PreconditionError(f"Egg {egg_id} not found")
        return egg

    def _validate_variables(
        self,
        egg: Egg,
        data: Dict[str, Any],
        enforce: bool,
    ) -> List[ValidatedVariable]:
        # Creation always validates at the admin tier, whoever the caller is.
        return self._validator.set_user_level(UserLevel.ADMIN).validate(
            egg.id,
            data.get("environment") or {},
            enforce,
        )

    def _compensate(self, server: Server) -> None:
        """Remove the local server after the daemon failed to create it."""
        try:
            self._deletion_service.with_force().handle(server)
            logger.info(f"[creation] rolled back server {server.uuid}")
        except Exception as e:
            # The daemon error is what the caller needs to see.
            logger.exception(f"[creation] rollback of server {server.uuid} failed: {e}")
