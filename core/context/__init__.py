"""
BillingCore Context — Public API
==================================
Actor attribution for commands.
"""

from core.context.actor_context import ActorContext

__all__ = [
    "ActorContext",
]
