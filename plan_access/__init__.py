"""
Plan-based access control for routes, UI components and named features.

This package provides:
- RuleSet: immutable plans, protected/public routes, redirects and gating rules
- RuleSetLoader: load a rule set from JSON with validation and reload
- MemberCapabilities: active plans, features and permissions of a member
- AccessEvaluator: route, feature and component access decisions
- PlanAdvisor: upgrade eligibility, recommendations and plan comparison
- validate_rule_set / access_debug_info: consistency checks and introspection
- RouteGuard / RouteAccessMiddleware: redirect decisions for navigations
- AccessControlService: snapshot-consistent facade with hot reload
"""

from plan_access.models import (
    ALL_ROUTES,
    AccessDecision,
    Member,
    Plan,
    PlanComparison,
    PlanConnection,
)
from plan_access.rules import (
    ContentGatingRule,
    ProtectedRoute,
    RedirectConfig,
    RedirectScenario,
    RuleSet,
    RuleSetSettings,
)
from plan_access.capabilities import MemberCapabilities
from plan_access.evaluator import AccessEvaluator
from plan_access.recommendations import PlanAdvisor
from plan_access.validation import (
    AccessDebugInfo,
    RouteDebugInfo,
    access_debug_info,
    validate_rule_set,
)
from plan_access.errors import PlanAccessError, RuleSetLoadError, RuleSetValidationError
from plan_access.loader import RuleSetLoader, parse_rule_set
from plan_access.defaults import DEFAULT_RULE_SET
from plan_access.navigation import NavigationDecision, RouteGuard
from plan_access.service import AccessControlService, get_access_service

__all__ = [
    # Models
    "ALL_ROUTES",
    "AccessDecision",
    "Member",
    "Plan",
    "PlanComparison",
    "PlanConnection",
    # Rules
    "ContentGatingRule",
    "ProtectedRoute",
    "RedirectConfig",
    "RedirectScenario",
    "RuleSet",
    "RuleSetSettings",
    "DEFAULT_RULE_SET",
    # Evaluation
    "MemberCapabilities",
    "AccessEvaluator",
    "PlanAdvisor",
    # Validation
    "AccessDebugInfo",
    "RouteDebugInfo",
    "access_debug_info",
    "validate_rule_set",
    # Loading
    "RuleSetLoader",
    "parse_rule_set",
    # Errors
    "PlanAccessError",
    "RuleSetLoadError",
    "RuleSetValidationError",
    # Navigation
    "NavigationDecision",
    "RouteGuard",
    # Service
    "AccessControlService",
    "get_access_service",
]
