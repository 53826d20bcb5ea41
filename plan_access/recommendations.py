"""Plan comparison, upgrade eligibility and plan recommendations."""

from typing import Iterable, List, Optional

from plan_access.capabilities import MemberCapabilities
from plan_access.models import Member, Plan, PlanComparison
from plan_access.rules import RuleSet


class PlanAdvisor:
    """Read-only queries over the plan catalog of a rule set."""

    def __init__(self, rule_set: RuleSet) -> None:
        self.rule_set = rule_set
        self.capabilities = MemberCapabilities(rule_set)

    def can_upgrade_to_plan(self, member: Optional[Member], target_plan_id: str) -> bool:
        """
        Check if a member may move to target_plan_id.

        Anonymous visitors may always subscribe. Otherwise both the member's
        primary plan and the target must resolve, and the target must rank
        strictly higher.
        """
        if member is None:
            return True

        current_plan = self.capabilities.primary_plan(member)
        target_plan = self.rule_set.get_plan(target_plan_id)
        if current_plan is None or target_plan is None:
            return False

        return target_plan.priority > current_plan.priority

    def recommended_plan_for_feature(self, feature: str) -> Optional[Plan]:
        """Cheapest (lowest priority) plan that grants the feature."""
        plan_ids = self.rule_set.get_feature_plans(feature)
        if not plan_ids:
            return None

        plans = [p for p in (self.rule_set.get_plan(pid) for pid in plan_ids) if p is not None]
        plans.sort(key=lambda p: p.priority)
        return plans[0] if plans else None

    def compare_plans(self, plan_ids: Iterable[str]) -> List[PlanComparison]:
        comparisons = []
        for plan_id in plan_ids:
            plan = self.rule_set.get_plan(plan_id)
            if plan is None:
                continue
            comparisons.append(
                PlanComparison(
                    plan=plan,
                    features=plan.features,
                    permissions=plan.permissions,
                    routes=plan.routes,
                )
            )
        return comparisons

    def format_plan_name(self, plan_id: str) -> str:
        plan = self.rule_set.get_plan(plan_id)
        return plan.name if plan else plan_id

    def access_requirements_text(
        self,
        required_plans: Optional[Iterable[str]] = None,
        required_permissions: Optional[Iterable[str]] = None,
        required_features: Optional[Iterable[str]] = None,
    ) -> str:
        """
        Human-readable summary of access requirements.

        Example: "Plan: Premium Plan or Enterprise Plan • Permissions: admin"
        """
        requirements = []

        plans = list(required_plans or ())
        if plans:
            names = [self.format_plan_name(plan_id) for plan_id in plans]
            requirements.append(f"Plan: {' or '.join(names)}")

        permissions = list(required_permissions or ())
        if permissions:
            requirements.append(f"Permissions: {', '.join(permissions)}")

        features = list(required_features or ())
        if features:
            requirements.append(f"Features: {', '.join(features)}")

        return " • ".join(requirements)
