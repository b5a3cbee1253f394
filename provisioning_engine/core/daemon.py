# provisioning_engine/core/daemon.py

from abc import ABC, abstractmethod

from provisioning_engine.core.models import Server


class ServerDaemon(ABC):
    """
    Contract for the remote agent that runs servers on a node.
    Implementations raise AgentConnectionError on any failure.
    """

    @abstractmethod
    def create_server(self, server: Server, start_on_completion: bool = True) -> None:
        """
        Ask the daemon on the server's node to create (and optionally start)
        the workload. Called only after the server row is committed.
        """
        raise NotImplementedError

    @abstractmethod
    def delete_server(self, server: Server) -> None:
        """
        Remove the workload from the node.
        """
        raise NotImplementedError
