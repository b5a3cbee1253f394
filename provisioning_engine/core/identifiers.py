"""Unique server identifier generation."""

import logging
from typing import Callable, Optional
from uuid import uuid4

logger = logging.getLogger(__name__)

SHORT_UUID_LENGTH = 8

InUseCheck = Callable[[str, str], bool]


def short_uuid(uuid: str) -> str:
    """Short identifier shown in the panel and used for lookups."""
    return uuid[:SHORT_UUID_LENGTH]


class UuidGenerator:
    """
    Generates a UUID whose full and short forms are both unused.

    Collisions on the 32-bit short form are rare but possible, so every
    candidate is checked before it is returned. The repository passes its
    own ``in_use`` check when generating inside an open transaction.
    """

    def __init__(self, repository=None):
        self._repo = repository

    def generate(self, in_use: Optional[InUseCheck] = None) -> str:
        if in_use is None and self._repo is None:
            raise ValueError("UuidGenerator needs a repository or an in_use check")
        check = in_use or self._repo.uuid_in_use

        while True:
            candidate = str(uuid4())
            if not check(candidate, short_uuid(candidate)):
                return candidate

            logger.warning(f"Identifier {candidate} collides with an existing server, retrying")
