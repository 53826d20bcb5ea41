"""
Navigation guard.

Translates a route AccessDecision into "proceed" or "redirect" for a
request-interception layer. Asset and API paths are never guarded.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import urlencode

from plan_access.evaluator import (
    REASON_AUTH_REQUIRED,
    REASON_INSUFFICIENT_PERMISSIONS,
    REASON_PLAN_REQUIRED,
    AccessEvaluator,
)
from plan_access.models import AccessDecision, Member
from plan_access.rules import ProtectedRoute, RedirectScenario, RuleSet

logger = logging.getLogger(__name__)

SKIPPED_PREFIXES: Tuple[str, ...] = ("/_next/", "/api/", "/static/", "/favicon")


@dataclass(frozen=True)
class NavigationDecision:
    """What the interception layer should do with a request."""
    allowed: bool
    redirect_url: Optional[str] = None
    reason: Optional[str] = None
    decision: Optional[AccessDecision] = None


def is_skipped_path(path: str) -> bool:
    """Static files, API routes and anything with a file extension."""
    return path.startswith(SKIPPED_PREFIXES) or "." in path


def redirect_target_for(rule_set: RuleSet, route: Optional[ProtectedRoute], decision: AccessDecision) -> str:
    """Absolute in-app path a denied navigation should be sent to."""
    if decision.reason == REASON_AUTH_REQUIRED or route is None:
        return rule_set.redirect_url(RedirectScenario.UNAUTHENTICATED)
    if route.custom_redirect:
        return route.custom_redirect
    if decision.reason == REASON_PLAN_REQUIRED:
        return rule_set.redirect_url(RedirectScenario.PLAN_REQUIRED)
    if decision.reason == REASON_INSUFFICIENT_PERMISSIONS:
        return rule_set.redirect_url(RedirectScenario.INSUFFICIENT_PERMISSIONS)
    return rule_set.redirect_url(RedirectScenario.UNAUTHENTICATED)


def build_redirect_url(target: str, path: str, reason: str) -> str:
    separator = "&" if "?" in target else "?"
    return f"{target}{separator}{urlencode({'redirect': path, 'reason': reason})}"


class RouteGuard:
    """Per-navigation route check bound to one rule set."""

    def __init__(self, rule_set: RuleSet, evaluator: Optional[AccessEvaluator] = None) -> None:
        self.rule_set = rule_set
        self.evaluator = evaluator or AccessEvaluator(rule_set)

    def check(
        self,
        path: str,
        member: Optional[Member],
        *,
        is_authenticated: Optional[bool] = None,
    ) -> NavigationDecision:
        """
        Decide whether a navigation to `path` may proceed.

        Args:
            path: Request path
            member: Resolved member, or None
            is_authenticated: Session state from the identity provider. When
                False the member is ignored; defaults to `member is not None`.

        Returns:
            NavigationDecision
        """
        if is_skipped_path(path):
            return NavigationDecision(allowed=True)

        if is_authenticated is False:
            member = None

        route = self.rule_set.find_protected_route(path)
        if route is None:
            # public or unlisted: both open
            return NavigationDecision(allowed=True)

        decision = self.evaluator.has_route_access(member, path)
        if decision.has_access:
            return NavigationDecision(allowed=True, decision=decision)

        reason = decision.reason or "access_denied"
        target = redirect_target_for(self.rule_set, route, decision)
        logger.warning(
            "Navigation denied",
            extra={
                "path": path,
                "reason": reason,
                "redirect_to": target,
                "member_id": member.id if member else None,
            },
        )
        return NavigationDecision(
            allowed=False,
            redirect_url=build_redirect_url(target, path, reason),
            reason=reason,
            decision=decision,
        )

    def auth_error(self, path: str) -> NavigationDecision:
        """Decision used when the member could not be resolved at all."""
        target = self.rule_set.redirect_url(RedirectScenario.UNAUTHENTICATED)
        return NavigationDecision(
            allowed=False,
            redirect_url=build_redirect_url(target, path, "auth_error"),
            reason="auth_error",
        )
