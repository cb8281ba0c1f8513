"""
Collaboration Core - comments and reactions.
"""

from catalog.kernel.collaboration.collaboration_service import CollaborationService, ReactionState

__all__ = [
    "CollaborationService",
    "ReactionState",
]
