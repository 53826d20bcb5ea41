"""
Access evaluation.

Decides route, feature and component access for a member (or an anonymous
visitor) against an immutable rule set. Checks are short-circuiting and run
in a fixed order: authentication, plan, permission, then feature (components
only). The first failing check is reported; failures are never aggregated.

Evaluation never raises for unknown plans, features or components. Every
outcome is an AccessDecision.
"""

import logging
from typing import Literal, Optional

from plan_access.capabilities import MemberCapabilities
from plan_access.models import AccessDecision, Member
from plan_access.rules import ContentGatingRule, ProtectedRoute, RuleSet

logger = logging.getLogger(__name__)

AccessTargetType = Literal["route", "feature", "component"]

REASON_AUTH_REQUIRED = "Authentication required"
REASON_PLAN_REQUIRED = "Plan upgrade required"
REASON_INSUFFICIENT_PERMISSIONS = "Insufficient permissions"
REASON_FEATURE_UNAVAILABLE = "Feature not available in your plan"
REASON_UNKNOWN_FEATURE = "Unknown feature: {feature}"

ACTION_LOGIN_PAGE = "Please log in to access this page"
ACTION_LOGIN_FEATURE = "Please log in to access this feature"
ACTION_UPGRADE = "Please upgrade your plan to access this feature"
ACTION_NO_PERMISSION_PAGE = "You do not have permission to access this page"
ACTION_NO_PERMISSION_FEATURE = "You do not have permission to access this feature"


class AccessEvaluator:
    """
    Stateless decision service bound to one rule set.

    Safe to share across threads and requests; it holds no mutable state.
    """

    def __init__(self, rule_set: RuleSet, *, debug: Optional[bool] = None) -> None:
        """
        Args:
            rule_set: Rule set to evaluate against
            debug: Force access-attempt logging on or off. Defaults to
                rule_set.settings.enable_debug_mode.
        """
        self.rule_set = rule_set
        self.capabilities = MemberCapabilities(rule_set)
        self.debug = rule_set.settings.enable_debug_mode if debug is None else debug

    def has_route_access(self, member: Optional[Member], path: str) -> AccessDecision:
        """
        Check access to a route path.

        The first protected route (in declaration order) whose path equals or
        prefixes `path` governs. Unprotected paths are open.

        Args:
            member: Authenticated member, or None for anonymous
            path: Request path

        Returns:
            AccessDecision
        """
        route = self.rule_set.find_protected_route(path)
        if route is None:
            decision = AccessDecision.allow()
        else:
            decision = self._check_route(member, route)
        self.log_access_attempt(member, path, "route", decision)
        return decision

    def has_feature_access(self, member: Optional[Member], feature: str) -> AccessDecision:
        """
        Check access to a named feature via the feature map.

        An unknown feature yields a distinct reason so callers can tell a
        configuration typo from a missing entitlement.
        """
        required_plans = self.rule_set.get_feature_plans(feature)

        if required_plans is None:
            decision = AccessDecision(
                has_access=False,
                reason=REASON_UNKNOWN_FEATURE.format(feature=feature),
            )
        elif member is None:
            decision = AccessDecision(
                has_access=False,
                reason=REASON_AUTH_REQUIRED,
                required_plans=required_plans,
                suggested_action=ACTION_LOGIN_FEATURE,
            )
        elif not self.capabilities.has_plan(member, required_plans):
            decision = AccessDecision(
                has_access=False,
                reason=REASON_PLAN_REQUIRED,
                required_plans=required_plans,
                suggested_action=ACTION_UPGRADE,
            )
        else:
            decision = AccessDecision.allow()

        self.log_access_attempt(member, feature, "feature", decision)
        return decision

    def has_component_access(self, member: Optional[Member], component: str) -> AccessDecision:
        """
        Check access to a UI component via its content gating rule.

        Components without a rule are open. The feature gate runs last and
        checks the member's plan-derived features, not plan membership.
        """
        rule = self.rule_set.get_component_rule(component)
        if rule is None:
            decision = AccessDecision.allow()
        else:
            decision = self._check_component(member, rule)
        self.log_access_attempt(member, component, "component", decision)
        return decision

    def fallback_component(self, component: str) -> Optional[str]:
        rule = self.rule_set.get_component_rule(component)
        return rule.fallback_component if rule else None

    def _check_route(self, member: Optional[Member], route: ProtectedRoute) -> AccessDecision:
        if member is None and not route.allow_unauthenticated:
            return AccessDecision(
                has_access=False,
                reason=REASON_AUTH_REQUIRED,
                suggested_action=ACTION_LOGIN_PAGE,
            )

        if route.required_plans and not self.capabilities.has_plan(member, route.required_plans):
            return AccessDecision(
                has_access=False,
                reason=REASON_PLAN_REQUIRED,
                required_plans=route.required_plans,
                suggested_action=ACTION_UPGRADE,
            )

        if route.required_permissions and not self._has_any_permission(member, route.required_permissions):
            return AccessDecision(
                has_access=False,
                reason=REASON_INSUFFICIENT_PERMISSIONS,
                required_permissions=route.required_permissions,
                suggested_action=ACTION_NO_PERMISSION_PAGE,
            )

        return AccessDecision.allow()

    def _check_component(self, member: Optional[Member], rule: ContentGatingRule) -> AccessDecision:
        if member is None and not rule.allow_unauthenticated:
            return AccessDecision(
                has_access=False,
                reason=REASON_AUTH_REQUIRED,
                required_plans=rule.required_plans or None,
                suggested_action=ACTION_LOGIN_FEATURE,
            )

        if rule.required_plans and not self.capabilities.has_plan(member, rule.required_plans):
            return AccessDecision(
                has_access=False,
                reason=REASON_PLAN_REQUIRED,
                required_plans=rule.required_plans,
                suggested_action=ACTION_UPGRADE,
            )

        if rule.required_permissions and not self._has_any_permission(member, rule.required_permissions):
            return AccessDecision(
                has_access=False,
                reason=REASON_INSUFFICIENT_PERMISSIONS,
                required_permissions=rule.required_permissions,
                suggested_action=ACTION_NO_PERMISSION_FEATURE,
            )

        if rule.required_features:
            features = self.capabilities.member_features(member)
            if not any(feature in features for feature in rule.required_features):
                return AccessDecision(
                    has_access=False,
                    reason=REASON_FEATURE_UNAVAILABLE,
                    suggested_action=ACTION_UPGRADE,
                )

        return AccessDecision.allow()

    def _has_any_permission(self, member: Optional[Member], required) -> bool:
        permissions = self.capabilities.member_permissions(member)
        return any(permission in permissions for permission in required)

    def log_access_attempt(
        self,
        member: Optional[Member],
        resource: str,
        target_type: AccessTargetType,
        decision: AccessDecision,
    ) -> None:
        """Emit a debug trace of an evaluation when debug mode is on."""
        if not self.debug:
            return
        logger.debug(
            "Access check",
            extra={
                "resource": resource,
                "target_type": target_type,
                "member": (member.email or member.id) if member else "anonymous",
                "has_access": decision.has_access,
                "reason": decision.reason,
                "required_plans": list(decision.required_plans or ()),
                "required_permissions": list(decision.required_permissions or ()),
            },
        )
