"""Server deletion - removes a server from its node and from the panel."""

import logging

from provisioning_engine.core.daemon import ServerDaemon
from provisioning_engine.core.errors import AgentConnectionError
from provisioning_engine.core.models import Server
from provisioning_engine.core.repository import ServerRepository

logger = logging.getLogger(__name__)


class ServerDeletionService:
    """
    Deletes a server.

    Without force, a daemon failure aborts the deletion and the local record
    stays. With force, the daemon failure is logged and the local record is
    removed anyway.
    """

    def __init__(self, server_repo: ServerRepository, daemon: ServerDaemon, force: bool = False):
        self._server_repo = server_repo
        self._daemon = daemon
        self._force = force

    @property
    def force(self) -> bool:
        return self._force

    def with_force(self, force: bool = True) -> "ServerDeletionService":
        return ServerDeletionService(self._server_repo, self._daemon, force=force)

    def handle(self, server: Server) -> None:
        try:
            self._daemon.delete_server(server)
        except AgentConnectionError as e:
            if not self._force:
                raise
            logger.warning(
                f"[deletion] daemon delete failed for {server.uuid}, "
                f"removing local record anyway: {e}"
            )

        if not self._server_repo.delete(server.id):
            logger.warning(f"[deletion] server {server.uuid} was already gone")
            return

        logger.info(f"[deletion] deleted server {server.uuid}")
