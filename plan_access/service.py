from __future__ import annotations

import logging
from threading import RLock
from typing import Iterable, List, Optional

from plan_access import config
from plan_access.evaluator import AccessEvaluator
from plan_access.loader import RuleSetLoader
from plan_access.models import AccessDecision, Member, Plan, PlanComparison
from plan_access.navigation import NavigationDecision, RouteGuard
from plan_access.recommendations import PlanAdvisor
from plan_access.rules import RuleSet
from plan_access.validation import AccessDebugInfo, access_debug_info, validate_rule_set

logger = logging.getLogger(__name__)


def _warn_on_validation_errors(rule_set: RuleSet) -> List[str]:
    errors = validate_rule_set(rule_set)
    if errors:
        logger.warning(
            "Rule set validation errors",
            extra={"source": "<memory>", "errors": errors},
        )
    return errors


class _Bound:
    """Evaluator, advisor and guard built for one rule set snapshot."""

    def __init__(self, rule_set: RuleSet, debug: Optional[bool]) -> None:
        self.rule_set = rule_set
        self.evaluator = AccessEvaluator(rule_set, debug=debug)
        self.advisor = PlanAdvisor(rule_set)
        self.guard = RouteGuard(rule_set, self.evaluator)


class AccessControlService:
    """Entry point for callers that hold a rule set for the process lifetime.

    Each call reads one snapshot, so a concurrent reload never mixes rule
    sets inside a single evaluation.
    """

    def __init__(
        self,
        rule_set: Optional[RuleSet] = None,
        *,
        loader: Optional[RuleSetLoader] = None,
        debug: Optional[bool] = None,
    ) -> None:
        if rule_set is None and loader is None:
            raise ValueError("rule_set or loader is required")
        self._loader = loader
        self._debug = config.debug_override() if debug is None else debug
        self._lock = RLock()
        if rule_set is None:
            # the loader has already validated its rule set
            rule_set = loader.rule_set
        else:
            _warn_on_validation_errors(rule_set)
        self._bound = _Bound(rule_set, self._debug)

    @classmethod
    def from_file(cls, config_path: Optional[str] = None, **kwargs) -> "AccessControlService":
        return cls(loader=RuleSetLoader(config_path), **kwargs)

    def get_rule_set(self) -> RuleSet:
        return self._snapshot().rule_set

    def _snapshot(self) -> _Bound:
        with self._lock:
            return self._bound

    def reload(self) -> RuleSet:
        """Re-read the backing file and swap the rule set in one step."""
        if self._loader is None:
            raise ValueError("service was not created from a rule set file")
        rule_set = self._loader.reload()
        self._install(rule_set)
        return rule_set

    def replace_rule_set(self, rule_set: RuleSet) -> None:
        _warn_on_validation_errors(rule_set)
        self._install(rule_set)

    def _install(self, rule_set: RuleSet) -> None:
        bound = _Bound(rule_set, self._debug)
        with self._lock:
            self._bound = bound
        logger.info("Rule set replaced", extra={"plans": len(rule_set.plans)})

    def has_route_access(self, member: Optional[Member], path: str) -> AccessDecision:
        return self._snapshot().evaluator.has_route_access(member, path)

    def has_feature_access(self, member: Optional[Member], feature: str) -> AccessDecision:
        return self._snapshot().evaluator.has_feature_access(member, feature)

    def has_component_access(self, member: Optional[Member], component: str) -> AccessDecision:
        return self._snapshot().evaluator.has_component_access(member, component)

    def check_navigation(
        self,
        path: str,
        member: Optional[Member],
        *,
        is_authenticated: Optional[bool] = None,
    ) -> NavigationDecision:
        return self._snapshot().guard.check(path, member, is_authenticated=is_authenticated)

    def can_upgrade_to_plan(self, member: Optional[Member], target_plan_id: str) -> bool:
        return self._snapshot().advisor.can_upgrade_to_plan(member, target_plan_id)

    def recommended_plan_for_feature(self, feature: str) -> Optional[Plan]:
        return self._snapshot().advisor.recommended_plan_for_feature(feature)

    def compare_plans(self, plan_ids: Iterable[str]) -> List[PlanComparison]:
        return self._snapshot().advisor.compare_plans(plan_ids)

    def debug_info(self, member: Optional[Member], path: Optional[str] = None) -> AccessDebugInfo:
        return access_debug_info(self._snapshot().rule_set, member, path)


_default_service: Optional[AccessControlService] = None
_default_lock = RLock()


def get_access_service() -> AccessControlService:
    """Process-wide service backed by PLAN_ACCESS_RULES_PATH, created on first use."""
    global _default_service
    with _default_lock:
        if _default_service is None:
            _default_service = AccessControlService.from_file()
        return _default_service


def reset_access_service() -> None:
    global _default_service
    with _default_lock:
        _default_service = None
