# provisioning_engine/core/repository.py

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from provisioning_engine.core.identifiers import UuidGenerator
from provisioning_engine.core.models import Server, ServerVariable
from provisioning_engine.domain.models import Egg, Node


class ServerRepository(ABC):
    """
    Persistence contract for servers and their variables.
    """

    @abstractmethod
    def create_with_variables(
        self,
        data: Dict[str, Any],
        variables: Sequence[Any],
        uuid_generator: UuidGenerator,
    ) -> Server:
        """
        Insert the server row and one variable row per validated variable
        in a single transaction. The identifier is generated inside the
        same transaction.
        Must raise PersistenceError if the transaction cannot commit.
        """
        raise NotImplementedError

    @abstractmethod
    def uuid_in_use(self, uuid: str, uuid_short: str) -> bool:
        """
        True if any server already uses the full or short identifier.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, uuid: str) -> Optional[Server]:
        """
        Fetch server by identifier (full or short form).
        Returns None if not found.
        """
        raise NotImplementedError

    @abstractmethod
    def get_by_id(self, server_id: int) -> Optional[Server]:
        raise NotImplementedError

    @abstractmethod
    def list_variables(self, server_id: int) -> List[ServerVariable]:
        raise NotImplementedError

    @abstractmethod
    def update_variable(
        self,
        server_id: int,
        variable_id: int,
        value: str,
    ) -> ServerVariable:
        """
        Create or overwrite the value for (server, variable).
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, server_id: int) -> bool:
        """
        Remove the server and its variables.
        Returns False if nothing was deleted.
        """
        raise NotImplementedError

    @abstractmethod
    def count(self) -> int:
        raise NotImplementedError


class EggRepository(ABC):

    @abstractmethod
    def create(self, egg: Egg) -> Egg:
        raise NotImplementedError

    @abstractmethod
    def get(self, egg_id: int) -> Optional[Egg]:
        raise NotImplementedError


class NodeRepository(ABC):

    @abstractmethod
    def create(self, node: Node) -> Node:
        raise NotImplementedError

    @abstractmethod
    def get(self, node_id: int) -> Optional[Node]:
        raise NotImplementedError
