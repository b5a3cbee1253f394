# daemon_agent/client.py
"""Daemon client for creating and removing servers on nodes."""

import logging
from typing import Any, Dict, Optional

import requests

from provisioning_engine.config import daemon_settings
from provisioning_engine.core.daemon import ServerDaemon
from provisioning_engine.core.errors import AgentConnectionError
from provisioning_engine.core.models import Server
from provisioning_engine.core.repository import NodeRepository
from provisioning_engine.domain.models import Node

logger = logging.getLogger(__name__)


class DaemonServerClient(ServerDaemon):
    """Client for the daemon HTTP API on each node."""

    def __init__(
        self,
        node_repo: NodeRepository,
        session: Optional[requests.Session] = None,
        connect_timeout: Optional[float] = None,
        request_timeout: Optional[float] = None,
    ):
        """
        Initialize client.

        Args:
            node_repo: Used to resolve a server's node into a daemon URL and token
            session: Optional requests session (connection reuse, tests)
            connect_timeout: Seconds to wait for the TCP connection
            request_timeout: Seconds to wait for the response
        """
        self._node_repo = node_repo
        self._http = session or requests.Session()
        self.connect_timeout = connect_timeout or daemon_settings.connect_timeout
        self.request_timeout = request_timeout or daemon_settings.request_timeout

    def health_check(self, node: Node) -> bool:
        """
        Check if the daemon on a node answers.

        Returns:
            True if healthy, False otherwise
        """
        try:
            response = self._http.get(
                f"{node.daemon_url}/api/system",
                headers=self._headers(node),
                timeout=(self.connect_timeout, 5),
                verify=daemon_settings.verify_tls,
            )
            return response.status_code == 200
        except requests.exceptions.RequestException as e:
            logger.error(f"Health check for node {node.id} failed: {e}")
            return False

    def create_server(self, server: Server, start_on_completion: bool = True) -> None:
        """
        Create a server on its node.

        Raises:
            AgentConnectionError: If the daemon cannot be reached or rejects the request
        """
        node = self._require_node(server)
        logger.info(f"[{server.uuid_short}] Creating server on node {node.id}")

        self._request(
            "post",
            node,
            "/api/servers",
            json={
                "uuid": server.uuid,
                "start_on_completion": start_on_completion,
            },
        )

        logger.info(f"[{server.uuid_short}] Daemon accepted server creation")

    def delete_server(self, server: Server) -> None:
        """
        Delete a server from its node. A server the daemon does not know
        about counts as deleted.
        """
        node = self._require_node(server)
        logger.info(f"[{server.uuid_short}] Deleting server from node {node.id}")

        self._request("delete", node, f"/api/servers/{server.uuid}", allow_not_found=True)

    # -------------------------
    # INTERNAL HELPERS
    # -------------------------

    def _require_node(self, server: Server) -> Node:
        node = self._node_repo.get(server.node_id) if server.node_id is not None else None
        if node is None:
            raise AgentConnectionError(
                f"Node {server.node_id} for server {server.uuid} is not registered",
                node_id=server.node_id,
            )
        return node

    @staticmethod
    def _headers(node: Node) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {node.daemon_token}",
            "Accept": "application/json",
        }

    def _request(
        self,
        method: str,
        node: Node,
        path: str,
        allow_not_found: bool = False,
        **kwargs: Any,
    ) -> requests.Response:
        url = f"{node.daemon_url}{path}"
        try:
            response = self._http.request(
                method,
                url,
                headers=self._headers(node),
                timeout=(self.connect_timeout, self.request_timeout),
                verify=daemon_settings.verify_tls,
                **kwargs,
            )
        except requests.exceptions.Timeout as e:
            raise AgentConnectionError(
                f"Daemon on node {node.id} timed out after {self.request_timeout}s",
                node_id=node.id,
            ) from e
        except requests.exceptions.RequestException as e:
            raise AgentConnectionError(
                f"Cannot connect to daemon at {node.daemon_url}: {e}",
                node_id=node.id,
            ) from e

        if allow_not_found and response.status_code == 404:
            return response

        if not 200 <= response.status_code < 300:
            raise AgentConnectionError(
                f"Daemon on node {node.id} returned HTTP {response.status_code}: "
                f"{self._error_detail(response)}",
                node_id=node.id,
                status_code=response.status_code,
            )

        return response

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text
        if isinstance(body, dict):
            return str(body.get("error") or body.get("detail") or body)
        return str(body)
