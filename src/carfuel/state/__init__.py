"""State/store layer.

This package is the single owner of car records and their fuel
histories. Everything above it sees frozen snapshots only.
"""

from carfuel.state.sequence import IdSequence
from carfuel.state.store import CarStore

__all__ = ["CarStore", "IdSequence"]
