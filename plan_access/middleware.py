"""
ASGI middleware for route access enforcement.

Runs the RouteGuard once per request and redirects denied navigations.
Member resolution is delegated to a caller-supplied callable (sync or async)
so the identity provider stays outside this package.
"""

import inspect
import logging
from typing import Awaitable, Callable, Optional, Union

from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse, Response

from plan_access.models import Member
from plan_access.navigation import RouteGuard
from plan_access.rules import RuleSet

logger = logging.getLogger(__name__)

MemberResolver = Callable[[Request], Union[Optional[Member], Awaitable[Optional[Member]]]]


class RouteAccessMiddleware(BaseHTTPMiddleware):
    """
    Redirects requests for protected routes the member cannot access.

    Usage:
        app.add_middleware(
            RouteAccessMiddleware,
            rule_set_provider=service.get_rule_set,
            member_resolver=resolve_member_from_session,
        )

    The rule set is read from `rule_set_provider` on every request so a
    reloaded rule set takes effect without rebuilding the app.
    """

    def __init__(
        self,
        app,
        rule_set_provider: Callable[[], RuleSet],
        member_resolver: MemberResolver,
    ):
        super().__init__(app)
        self.rule_set_provider = rule_set_provider
        self.member_resolver = member_resolver

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        guard = RouteGuard(self.rule_set_provider())

        if not guard.rule_set.is_protected_route(path):
            return await call_next(request)

        try:
            member = await self._resolve_member(request)
        except Exception as e:
            logger.error(
                "Member resolution failed during route access check",
                extra={"error": str(e), "path": path},
            )
            decision = guard.auth_error(path)
        else:
            decision = guard.check(path, member)

        if decision.allowed:
            return await call_next(request)

        request.state.access_decision = decision
        return RedirectResponse(url=decision.redirect_url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    async def _resolve_member(self, request: Request) -> Optional[Member]:
        result = self.member_resolver(request)
        if inspect.isawaitable(result):
            result = await result
        return result
