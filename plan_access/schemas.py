"""
Wire schemas for rule set files.

Rule set JSON uses the camelCase layout of the access configuration:

    {
      "routes": {"protected": [...], "public": [...], "redirects": {...}},
      "plans": {"<id>": {...}},
      "contentGating": {"components": {...}, "features": {...}},
      "settings": {...}
    }
"""

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from plan_access.models import Plan
from plan_access.rules import (
    ContentGatingRule,
    ProtectedRoute,
    RedirectConfig,
    RuleSet,
    RuleSetSettings,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ProtectedRouteSchema(_CamelModel):
    path: str = Field(..., min_length=1)
    required_plans: Optional[List[str]] = Field(None, alias="requiredPlans")
    required_permissions: Optional[List[str]] = Field(None, alias="requiredPermissions")
    required_features: Optional[List[str]] = Field(None, alias="requiredFeatures")
    allow_unauthenticated: bool = Field(False, alias="allowUnauthenticated")
    custom_redirect: Optional[str] = Field(None, alias="customRedirect")


class RedirectsSchema(_CamelModel):
    unauthenticated: str = "/login"
    after_login: str = Field("/dashboard", alias="afterLogin")
    after_signup: str = Field("/dashboard", alias="afterSignup")
    after_logout: str = Field("/", alias="afterLogout")
    insufficient_permissions: str = Field("/dashboard", alias="insufficientPermissions")
    plan_required: str = Field("/pricing", alias="planRequired")


class RoutesSchema(_CamelModel):
    protected: List[ProtectedRouteSchema] = Field(default_factory=list)
    public: List[str] = Field(default_factory=list)
    redirects: RedirectsSchema = Field(default_factory=RedirectsSchema)


class PlanSchema(_CamelModel):
    id: Optional[str] = None
    name: str = ""
    routes: List[str] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    permissions: List[str] = Field(default_factory=list)
    priority: Union[int, float] = 0


class ContentGatingRuleSchema(_CamelModel):
    component: Optional[str] = None
    required_plans: Optional[List[str]] = Field(None, alias="requiredPlans")
    required_permissions: Optional[List[str]] = Field(None, alias="requiredPermissions")
    required_features: Optional[List[str]] = Field(None, alias="requiredFeatures")
    allow_unauthenticated: bool = Field(False, alias="allowUnauthenticated")
    fallback_component: Optional[str] = Field(None, alias="fallbackComponent")


class ContentGatingSchema(_CamelModel):
    components: Dict[str, ContentGatingRuleSchema] = Field(default_factory=dict)
    features: Dict[str, List[str]] = Field(default_factory=dict)


class SettingsSchema(_CamelModel):
    enable_debug_mode: bool = Field(False, alias="enableDebugMode")
    session_timeout: int = Field(30, alias="sessionTimeout", ge=0)
    redirect_delay: int = Field(100, alias="redirectDelay", ge=0)
    cache_expiry: int = Field(5, alias="cacheExpiry", ge=0)


class RuleSetSchema(_CamelModel):
    routes: RoutesSchema = Field(default_factory=RoutesSchema)
    plans: Dict[str, PlanSchema]
    content_gating: ContentGatingSchema = Field(default_factory=ContentGatingSchema, alias="contentGating")
    settings: SettingsSchema = Field(default_factory=SettingsSchema)

    @field_validator("plans")
    @classmethod
    def plans_not_empty(cls, v: Dict[str, PlanSchema]) -> Dict[str, PlanSchema]:
        if not v:
            raise ValueError("rule set must define at least one plan")
        return v

    def to_rule_set(self) -> RuleSet:
        plans = [
            Plan(
                id=key,
                name=schema.name,
                routes=tuple(schema.routes),
                features=frozenset(schema.features),
                permissions=frozenset(schema.permissions),
                priority=schema.priority,
            )
            for key, schema in self.plans.items()
        ]

        protected = [
            ProtectedRoute(
                path=route.path,
                required_plans=tuple(route.required_plans or ()),
                required_permissions=tuple(route.required_permissions or ()),
                required_features=tuple(route.required_features or ()),
                allow_unauthenticated=route.allow_unauthenticated,
                custom_redirect=route.custom_redirect,
            )
            for route in self.routes.protected
        ]

        components = [
            ContentGatingRule(
                component=name,
                required_plans=tuple(rule.required_plans or ()),
                required_permissions=tuple(rule.required_permissions or ()),
                required_features=tuple(rule.required_features or ()),
                allow_unauthenticated=rule.allow_unauthenticated,
                fallback_component=rule.fallback_component,
            )
            for name, rule in self.content_gating.components.items()
        ]

        redirects = self.routes.redirects
        return RuleSet.build(
            plans=plans,
            protected_routes=protected,
            public_routes=self.routes.public,
            redirects=RedirectConfig(
                unauthenticated=redirects.unauthenticated,
                after_login=redirects.after_login,
                after_signup=redirects.after_signup,
                after_logout=redirects.after_logout,
                insufficient_permissions=redirects.insufficient_permissions,
                plan_required=redirects.plan_required,
            ),
            components=components,
            features=self.content_gating.features,
            settings=RuleSetSettings(
                enable_debug_mode=self.settings.enable_debug_mode,
                session_timeout=self.settings.session_timeout,
                redirect_delay=self.settings.redirect_delay,
                cache_expiry=self.settings.cache_expiry,
            ),
        )
