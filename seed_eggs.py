# seed_eggs.py
"""Seed database with the bundled eggs and a local node."""

import logging
import os

from provisioning_engine.core.errors import PersistenceError
from provisioning_engine.domain.eggs import PAPER_EGG, VALHEIM_EGG
from provisioning_engine.domain.models import Node
from provisioning_engine.infrastructure.postgres.egg_repository import (
    SqlEggRepository,
    SqlNodeRepository,
)

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def main():
    logger.info("Seeding eggs...")

    egg_repo = SqlEggRepository()
    for egg in (PAPER_EGG, VALHEIM_EGG):
        try:
            created = egg_repo.create(egg)
            logger.info(f"Created egg {created.id}: {created.name} ({len(created.variables)} variables)")
        except PersistenceError as e:
            logger.warning(f"Egg {egg.name} already exists or error: {e}")

    node_repo = SqlNodeRepository()
    try:
        node = node_repo.create(
            Node(
                name=os.environ.get("SEED_NODE_NAME", "local"),
                fqdn=os.environ.get("SEED_NODE_FQDN", "localhost"),
                scheme=os.environ.get("SEED_NODE_SCHEME", "http"),
                daemon_listen=int(os.environ.get("SEED_NODE_PORT", "8080")),
                daemon_token=os.environ.get("SEED_NODE_TOKEN", "change-me"),
            )
        )
        logger.info(f"Registered node {node.id} at {node.daemon_url}")
    except PersistenceError as e:
        logger.warning(f"Node already registered or error: {e}")


if __name__ == "__main__":
    main()
