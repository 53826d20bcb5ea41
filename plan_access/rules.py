"""
Rule set: the static plan/route/feature graph.

A RuleSet is built once (see plan_access.loader) and never mutated.
Protected routes keep their declaration order; the first matching prefix
governs a path.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from plan_access.models import Plan, _normalize_ids, path_matches


class RedirectScenario(str, Enum):
    """Redirect targets recognized by the navigation layer."""
    UNAUTHENTICATED = "unauthenticated"
    AFTER_LOGIN = "afterLogin"
    AFTER_SIGNUP = "afterSignup"
    AFTER_LOGOUT = "afterLogout"
    INSUFFICIENT_PERMISSIONS = "insufficientPermissions"
    PLAN_REQUIRED = "planRequired"


@dataclass(frozen=True)
class _AccessRequirements:
    required_plans: Tuple[str, ...] = ()
    required_permissions: Tuple[str, ...] = ()
    required_features: Tuple[str, ...] = ()
    allow_unauthenticated: bool = False

    def _normalize_requirements(self) -> None:
        # absent and empty lists both mean "no restriction"
        object.__setattr__(self, "required_plans", _normalize_ids(self.required_plans))
        object.__setattr__(self, "required_permissions", _normalize_ids(self.required_permissions))
        object.__setattr__(self, "required_features", _normalize_ids(self.required_features))
        object.__setattr__(self, "allow_unauthenticated", bool(self.allow_unauthenticated))


@dataclass(frozen=True)
class ProtectedRoute(_AccessRequirements):
    """A path-prefix rule."""

    path: str = ""
    custom_redirect: Optional[str] = None

    def __post_init__(self) -> None:
        path = str(self.path).strip()
        if not path:
            raise ValueError("protected route path is required")
        object.__setattr__(self, "path", path)
        self._normalize_requirements()

    def matches(self, path: str) -> bool:
        return path_matches(self.path, path)


@dataclass(frozen=True)
class ContentGatingRule(_AccessRequirements):
    """A rule keyed by component name, optionally naming a fallback to render."""

    component: str = ""
    fallback_component: Optional[str] = None

    def __post_init__(self) -> None:
        component = str(self.component).strip()
        if not component:
            raise ValueError("content gating rule component is required")
        object.__setattr__(self, "component", component)
        self._normalize_requirements()


@dataclass(frozen=True)
class RedirectConfig:
    unauthenticated: str = "/login"
    after_login: str = "/dashboard"
    after_signup: str = "/dashboard"
    after_logout: str = "/"
    insufficient_permissions: str = "/dashboard"
    plan_required: str = "/pricing"

    def as_mapping(self) -> Dict[RedirectScenario, str]:
        return {
            RedirectScenario.UNAUTHENTICATED: self.unauthenticated,
            RedirectScenario.AFTER_LOGIN: self.after_login,
            RedirectScenario.AFTER_SIGNUP: self.after_signup,
            RedirectScenario.AFTER_LOGOUT: self.after_logout,
            RedirectScenario.INSUFFICIENT_PERMISSIONS: self.insufficient_permissions,
            RedirectScenario.PLAN_REQUIRED: self.plan_required,
        }

    def get(self, scenario: RedirectScenario) -> str:
        return self.as_mapping()[RedirectScenario(scenario)]


@dataclass(frozen=True)
class RuleSetSettings:
    """Rule set options.

    Only ``enable_debug_mode`` is read here. The timing values are carried
    through unchanged for presentation-layer consumers (session expiry
    prompts, redirect transitions, client-side caching of decisions).
    """

    enable_debug_mode: bool = False
    session_timeout: int = 30  # minutes
    redirect_delay: int = 100  # milliseconds
    cache_expiry: int = 5  # minutes


@dataclass(frozen=True)
class RuleSet:
    """Complete, immutable access configuration."""

    plans: Mapping[str, Plan]
    protected_routes: Tuple[ProtectedRoute, ...] = ()
    public_routes: Tuple[str, ...] = ()
    redirects: RedirectConfig = field(default_factory=RedirectConfig)
    components: Mapping[str, ContentGatingRule] = field(default_factory=dict)
    features: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    settings: RuleSetSettings = field(default_factory=RuleSetSettings)

    def __post_init__(self) -> None:
        object.__setattr__(self, "plans", MappingProxyType(dict(self.plans)))
        object.__setattr__(self, "protected_routes", tuple(self.protected_routes))
        object.__setattr__(self, "public_routes", _normalize_ids(self.public_routes))
        object.__setattr__(self, "components", MappingProxyType(dict(self.components)))
        object.__setattr__(
            self,
            "features",
            MappingProxyType({key: _normalize_ids(ids) for key, ids in self.features.items()}),
        )

    @classmethod
    def build(
        cls,
        *,
        plans: Iterable[Plan],
        protected_routes: Iterable[ProtectedRoute] = (),
        public_routes: Iterable[str] = (),
        redirects: Optional[RedirectConfig] = None,
        components: Iterable[ContentGatingRule] = (),
        features: Optional[Mapping[str, Iterable[str]]] = None,
        settings: Optional[RuleSetSettings] = None,
    ) -> "RuleSet":
        """Convenience constructor keyed from plain sequences."""
        return cls(
            plans={plan.id: plan for plan in plans},
            protected_routes=tuple(protected_routes),
            public_routes=tuple(public_routes),
            redirects=redirects or RedirectConfig(),
            components={rule.component: rule for rule in components},
            features={key: tuple(ids) for key, ids in (features or {}).items()},
            settings=settings or RuleSetSettings(),
        )

    def get_plan(self, plan_id: str) -> Optional[Plan]:
        return self.plans.get(plan_id)

    def find_protected_route(self, path: str) -> Optional[ProtectedRoute]:
        for route in self.protected_routes:
            if route.matches(path):
                return route
        return None

    def is_protected_route(self, path: str) -> bool:
        return self.find_protected_route(path) is not None

    def is_public_route(self, path: str) -> bool:
        return any(path_matches(route, path) for route in self.public_routes)

    def get_component_rule(self, component: str) -> Optional[ContentGatingRule]:
        return self.components.get(component)

    def get_feature_plans(self, feature: str) -> Optional[Tuple[str, ...]]:
        return self.features.get(feature)

    def redirect_url(self, scenario: RedirectScenario) -> str:
        return self.redirects.get(scenario)
