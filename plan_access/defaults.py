"""
Placeholder rule set used before a real plan catalog has been configured.

Any authenticated member may reach the dashboard area; one catch-all plan
grants every route.
"""

from plan_access.models import ALL_ROUTES, Plan
from plan_access.rules import ProtectedRoute, RedirectConfig, RuleSet, RuleSetSettings

DEFAULT_PUBLIC_ROUTES = (
    "/",
    "/login",
    "/signup",
    "/pricing",
    "/about",
    "/contact",
    "/terms",
    "/privacy",
    "/forgot-password",
    "/reset-password",
    "/setup",
)

DEFAULT_RULE_SET = RuleSet.build(
    plans=[
        Plan(
            id="default",
            name="Default Plan",
            routes=(ALL_ROUTES,),
            features=frozenset({"basic-features"}),
            permissions=frozenset({"read"}),
            priority=1,
        ),
    ],
    protected_routes=[
        ProtectedRoute(path="/dashboard"),
        ProtectedRoute(path="/profile"),
        ProtectedRoute(path="/settings"),
    ],
    public_routes=DEFAULT_PUBLIC_ROUTES,
    redirects=RedirectConfig(),
    features={"basic-features": ("default",)},
    settings=RuleSetSettings(),
)
