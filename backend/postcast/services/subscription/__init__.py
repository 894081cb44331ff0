"""
Subscription services.
"""

from postcast.services.subscription.projection import (
    EffectivePlan,
    PlanLimits,
    get_effective_plan,
    project_subscription,
)

__all__ = [
    "EffectivePlan",
    "PlanLimits",
    "get_effective_plan",
    "project_subscription",
]
