"""Bundled eggs."""

from .paper import PAPER_EGG
from .valheim import VALHEIM_EGG


__all__ = ["PAPER_EGG", "VALHEIM_EGG"]
