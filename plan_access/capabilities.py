"""
Member capability resolution.

Derives a member's active plans, features and permissions from their raw
plan connections. Unknown plan ids are dropped silently (plans may have been
retired); a member with no active plan is still authenticated.
"""

from __future__ import annotations

from typing import FrozenSet, Iterable, List, Optional, Union

from plan_access.models import Member, Plan
from plan_access.rules import RuleSet


def _as_id_list(plan_ids: Union[str, Iterable[str]]) -> List[str]:
    if isinstance(plan_ids, str):
        return [plan_ids]
    return list(plan_ids)


class MemberCapabilities:
    """Resolves derived capability sets against one rule set."""

    def __init__(self, rule_set: RuleSet) -> None:
        self.rule_set = rule_set

    @staticmethod
    def active_plan_ids(member: Optional[Member]) -> List[str]:
        if member is None:
            return []
        return [conn.plan_id for conn in member.plan_connections if conn.active]

    def active_plans(self, member: Optional[Member]) -> List[Plan]:
        """Recognized active plans, highest priority first (stable for ties)."""
        plans = []
        for plan_id in self.active_plan_ids(member):
            plan = self.rule_set.get_plan(plan_id)
            if plan is not None:
                plans.append(plan)
        return sorted(plans, key=lambda p: p.priority, reverse=True)

    def primary_plan(self, member: Optional[Member]) -> Optional[Plan]:
        plans = self.active_plans(member)
        return plans[0] if plans else None

    def member_features(self, member: Optional[Member]) -> FrozenSet[str]:
        features: set[str] = set()
        for plan in self.active_plans(member):
            features.update(plan.features)
        return frozenset(features)

    def member_permissions(self, member: Optional[Member]) -> FrozenSet[str]:
        if member is None:
            return frozenset()
        permissions: set[str] = set(member.permissions)
        for plan in self.active_plans(member):
            permissions.update(plan.permissions)
        return frozenset(permissions)

    def has_plan(self, member: Optional[Member], plan_ids: Union[str, Iterable[str]]) -> bool:
        """Any-of membership against the member's active plan ids."""
        if member is None:
            return False
        active = set(self.active_plan_ids(member))
        return any(plan_id in active for plan_id in _as_id_list(plan_ids))

    def has_all_plans(self, member: Optional[Member], plan_ids: Iterable[str]) -> bool:
        if member is None:
            return False
        active = set(self.active_plan_ids(member))
        return all(plan_id in active for plan_id in _as_id_list(plan_ids))
