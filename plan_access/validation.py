"""
Rule set consistency checks and access introspection.

validate_rule_set() reports problems as strings and never raises: a partly
misconfigured rule set stays usable, and a dangling plan id simply never
matches a member.

access_debug_info() returns a structured snapshot of how a member resolves
and why a route decision came out the way it did. It is for tooling only.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from plan_access.capabilities import MemberCapabilities
from plan_access.evaluator import AccessEvaluator
from plan_access.models import AccessDecision, Member, path_matches
from plan_access.rules import ProtectedRoute, RuleSet


def validate_rule_set(rule_set: RuleSet) -> List[str]:
    errors: List[str] = []

    for route in rule_set.protected_routes:
        for plan_id in route.required_plans:
            if rule_set.get_plan(plan_id) is None:
                errors.append(f"Route {route.path} references non-existent plan: {plan_id}")
        for feature in route.required_features:
            if rule_set.get_feature_plans(feature) is None:
                errors.append(f"Route {route.path} references non-existent feature: {feature}")
        if route.custom_redirect is not None and not route.custom_redirect.startswith("/"):
            errors.append(
                f"Route {route.path} has invalid custom redirect: {route.custom_redirect} (must start with /)"
            )

    for name, rule in rule_set.components.items():
        for plan_id in rule.required_plans:
            if rule_set.get_plan(plan_id) is None:
                errors.append(f"Component {name} references non-existent plan: {plan_id}")
        for feature in rule.required_features:
            if rule_set.get_feature_plans(feature) is None:
                errors.append(f"Component {name} references non-existent feature: {feature}")

    for feature, plan_ids in rule_set.features.items():
        for plan_id in plan_ids:
            if rule_set.get_plan(plan_id) is None:
                errors.append(f"Feature {feature} references non-existent plan: {plan_id}")

    for target in rule_set.redirects.as_mapping().values():
        if not target.startswith("/"):
            errors.append(f"Invalid redirect path: {target} (must start with /)")

    for public_path in rule_set.public_routes:
        # a public entry under a protected prefix makes the two lists disagree
        for route in rule_set.protected_routes:
            if path_matches(route.path, public_path):
                errors.append(f"Route {public_path} is both public and protected by {route.path}")
                break

    for route in rule_set.protected_routes:
        # "/" prefixes every path, so it never counts as covering a protected route
        for public_path in rule_set.public_routes:
            if public_path == "/" or path_matches(route.path, public_path):
                continue
            if path_matches(public_path, route.path):
                errors.append(f"Route {route.path} is both protected and public under {public_path}")
                break

    return errors


@dataclass(frozen=True)
class RouteDebugInfo:
    path: str
    is_protected: bool
    requirements: Optional[ProtectedRoute]
    has_access: bool
    decision: AccessDecision

    def to_dict(self) -> Dict[str, Any]:
        requirements = None
        if self.requirements is not None:
            route = self.requirements
            requirements = {
                "path": route.path,
                "requiredPlans": list(route.required_plans),
                "requiredPermissions": list(route.required_permissions),
                "requiredFeatures": list(route.required_features),
                "allowUnauthenticated": route.allow_unauthenticated,
                "customRedirect": route.custom_redirect,
            }
        return {
            "path": self.path,
            "isProtected": self.is_protected,
            "requirements": requirements,
            "hasAccess": self.has_access,
            "decision": self.decision.to_dict(),
        }


@dataclass(frozen=True)
class AccessDebugInfo:
    member_id: Optional[str]
    email: Optional[str]
    plans: Tuple[str, ...]
    permissions: Tuple[str, ...]
    features: Tuple[str, ...]
    route: Optional[RouteDebugInfo] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "member": {
                "id": self.member_id,
                "email": self.email,
                "plans": list(self.plans),
                "permissions": list(self.permissions),
                "features": list(self.features),
            }
        }
        if self.route is not None:
            d["route"] = self.route.to_dict()
        return d


def access_debug_info(
    rule_set: RuleSet,
    member: Optional[Member],
    path: Optional[str] = None,
) -> AccessDebugInfo:
    """
    Snapshot a member's resolved capabilities and, optionally, a route check.

    Permissions and features are sorted so snapshots compare stably.
    """
    capabilities = MemberCapabilities(rule_set)

    route_info = None
    if path:
        # introspection must not emit access-attempt traces
        decision = AccessEvaluator(rule_set, debug=False).has_route_access(member, path)
        matched = rule_set.find_protected_route(path)
        route_info = RouteDebugInfo(
            path=path,
            is_protected=matched is not None,
            requirements=matched,
            has_access=decision.has_access,
            decision=decision,
        )

    return AccessDebugInfo(
        member_id=member.id if member else None,
        email=member.email if member else None,
        plans=tuple(capabilities.active_plan_ids(member)),
        permissions=tuple(sorted(capabilities.member_permissions(member))),
        features=tuple(sorted(capabilities.member_features(member))),
        route=route_info,
    )
