#provisioning_engine\api\dependencies.py
from provisioning_engine import container


def get_creation_service():
    return container.creation_service


def get_startup_service():
    return container.startup_service


def get_server_repository():
    return container.server_repository


def get_egg_repository():
    return container.egg_repository
