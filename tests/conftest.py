"""
Shared pytest fixtures for plan access tests.

Provides a compact free/premium/enterprise rule set plus helpers for
building members.
"""

from pathlib import Path

import pytest

from plan_access.models import ALL_ROUTES, Member, Plan, PlanConnection
from plan_access.rules import ContentGatingRule, ProtectedRoute, RedirectConfig, RuleSet

SAMPLE_RULES_PATH = Path(__file__).resolve().parent.parent / "config" / "access_rules.json"


def make_member(*plan_ids, inactive=(), permissions=(), member_id="mem_1", email="member@example.com"):
    """Build a member with active connections for plan_ids and inactive ones for `inactive`."""
    connections = [PlanConnection(plan_id=pid, active=True, status="ACTIVE", type="FREE") for pid in plan_ids]
    connections += [PlanConnection(plan_id=pid, active=False, status="CANCELED", type="PAID") for pid in inactive]
    return Member(
        id=member_id,
        email=email,
        plan_connections=tuple(connections),
        permissions=tuple(permissions),
    )


@pytest.fixture
def plans():
    return [
        Plan(
            id="free",
            name="Free",
            routes=("/dashboard",),
            features=frozenset({"basic-analytics"}),
            permissions=frozenset({"read"}),
            priority=1,
        ),
        Plan(
            id="premium",
            name="Premium",
            routes=("/dashboard", "/premium"),
            features=frozenset({"basic-analytics", "advanced-analytics", "export-data"}),
            permissions=frozenset({"read", "write"}),
            priority=2,
        ),
        Plan(
            id="enterprise",
            name="Enterprise",
            routes=(ALL_ROUTES,),
            features=frozenset({"basic-analytics", "advanced-analytics", "export-data", "white-label"}),
            permissions=frozenset({"read", "write", "admin"}),
            priority=3,
        ),
    ]


@pytest.fixture
def rule_set(plans):
    return RuleSet.build(
        plans=plans,
        protected_routes=[
            ProtectedRoute(path="/dashboard", required_plans=("free", "premium", "enterprise")),
            ProtectedRoute(path="/premium", required_plans=("premium", "enterprise"), custom_redirect="/pricing"),
            ProtectedRoute(path="/admin", required_plans=("enterprise",), required_permissions=("admin",)),
            ProtectedRoute(path="/account"),
            ProtectedRoute(path="/reports", required_permissions=("write",)),
            ProtectedRoute(path="/preview", allow_unauthenticated=True),
        ],
        public_routes=("/", "/login", "/pricing"),
        redirects=RedirectConfig(),
        components=[
            ContentGatingRule(component="PremiumBanner", required_plans=("premium", "enterprise")),
            ContentGatingRule(
                component="AdminPanel",
                required_plans=("enterprise",),
                required_permissions=("admin",),
                fallback_component="AccessDenied",
            ),
            ContentGatingRule(
                component="AnalyticsDashboard",
                required_features=("advanced-analytics",),
                fallback_component="BasicAnalytics",
            ),
            ContentGatingRule(component="PublicTeaser", allow_unauthenticated=True),
        ],
        features={
            "basic-analytics": ("free", "premium", "enterprise"),
            "advanced-analytics": ("premium", "enterprise"),
            "export-data": ("premium", "enterprise"),
            "white-label": ("enterprise",),
            "legacy-reports": (),
        },
    )


@pytest.fixture
def free_member():
    return make_member("free")


@pytest.fixture
def premium_member():
    return make_member("premium")


@pytest.fixture
def enterprise_member():
    return make_member("enterprise")
