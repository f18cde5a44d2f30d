"""
InfOpt Utils - Storage and Deletion Helpers
===========================================

Classes:
- ObjectArena: Stable-key object store with tombstone deletion
- DeletionPlan: Dependents-first ordering for cascading deletes
"""

from .arena import ObjectArena
from .deletion_plan import DeletionPlan

__all__ = [
    "ObjectArena",
    "DeletionPlan",
]
