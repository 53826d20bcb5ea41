from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple, Union

ALL_ROUTES = "*"


def _normalize_ids(values: Optional[Iterable[str]]) -> Tuple[str, ...]:
    """Strip entries and drop blanks while keeping declaration order."""
    if values is None:
        return ()
    if isinstance(values, str):
        values = [values]
    normalized = []
    for value in values:
        text = str(value).strip()
        if text:
            normalized.append(text)
    return tuple(normalized)


def path_matches(prefix: str, path: str) -> bool:
    return path == prefix or path.startswith(prefix)


@dataclass(frozen=True)
class Plan:
    """A named access tier. Higher priority means more privileged."""

    id: str
    name: str
    routes: Tuple[str, ...] = ()
    features: FrozenSet[str] = frozenset()
    permissions: FrozenSet[str] = frozenset()
    priority: Union[int, float] = 0

    def __post_init__(self) -> None:
        plan_id = str(self.id).strip()
        if not plan_id:
            raise ValueError("plan id is required")
        object.__setattr__(self, "id", plan_id)
        object.__setattr__(self, "name", str(self.name).strip() or plan_id)
        object.__setattr__(self, "routes", _normalize_ids(self.routes))
        object.__setattr__(self, "features", frozenset(_normalize_ids(self.features)))
        object.__setattr__(self, "permissions", frozenset(_normalize_ids(self.permissions)))

    @property
    def allows_all_routes(self) -> bool:
        return ALL_ROUTES in self.routes

    def grants_route(self, path: str) -> bool:
        if self.allows_all_routes:
            return True
        return any(path_matches(route, path) for route in self.routes)


@dataclass(frozen=True)
class PlanConnection:
    """A member's subscription record. Only active connections count."""

    plan_id: str
    active: bool
    status: str = ""
    type: str = ""
    id: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "plan_id", str(self.plan_id).strip())
        object.__setattr__(self, "active", self.active is True)


@dataclass(frozen=True)
class Member:
    """Authenticated member snapshot supplied by the identity provider."""

    id: str
    email: Optional[str] = None
    plan_connections: Tuple[PlanConnection, ...] = ()
    permissions: Tuple[str, ...] = ()
    verified: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "plan_connections", tuple(self.plan_connections))
        object.__setattr__(self, "permissions", _normalize_ids(self.permissions))

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Member":
        """Build a member from the identity provider's JSON payload."""
        auth = raw.get("auth") or {}
        email = auth.get("email") if isinstance(auth, Mapping) else None
        connections = []
        for conn in raw.get("planConnections") or []:
            connections.append(
                PlanConnection(
                    plan_id=conn.get("planId", ""),
                    active=conn.get("active") is True,
                    status=conn.get("status") or "",
                    type=conn.get("type") or "",
                    id=conn.get("id"),
                )
            )
        return cls(
            id=str(raw.get("id") or ""),
            email=email or raw.get("email"),
            plan_connections=tuple(connections),
            permissions=tuple(raw.get("permissions") or ()),
            verified=bool(raw.get("verified", False)),
        )


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of an access check. Always fully determined."""

    has_access: bool
    reason: Optional[str] = None
    required_plans: Optional[Tuple[str, ...]] = None
    required_permissions: Optional[Tuple[str, ...]] = None
    suggested_action: Optional[str] = None

    def __post_init__(self) -> None:
        if self.required_plans is not None:
            object.__setattr__(self, "required_plans", tuple(self.required_plans))
        if self.required_permissions is not None:
            object.__setattr__(self, "required_permissions", tuple(self.required_permissions))

    @classmethod
    def allow(cls) -> "AccessDecision":
        return cls(has_access=True)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"hasAccess": self.has_access}
        if self.reason is not None:
            d["reason"] = self.reason
        if self.required_plans is not None:
            d["requiredPlans"] = list(self.required_plans)
        if self.required_permissions is not None:
            d["requiredPermissions"] = list(self.required_permissions)
        if self.suggested_action is not None:
            d["suggestedAction"] = self.suggested_action
        return d


@dataclass(frozen=True)
class PlanComparison:
    """Side-by-side projection of a plan."""

    plan: Plan
    features: FrozenSet[str] = field(default_factory=frozenset)
    permissions: FrozenSet[str] = field(default_factory=frozenset)
    routes: Tuple[str, ...] = ()
