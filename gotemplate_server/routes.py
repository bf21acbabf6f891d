"""Route registration that keeps the router and the OpenAPI spec in step."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Callable, Iterable

from .openapi import add_operation, new_openapi_spec
from .readiness import Handler
from .transaction import TransactionMiddleware

RequestHandler = Callable[[Any], Any]
Middleware = Callable[[RequestHandler], RequestHandler]

_log = logging.getLogger(__name__)


class RouteExistsError(ValueError):
    """A route with the same method and path is already registered."""


@dataclass(frozen=True)
class Route:
    """A named handler bound to an HTTP method and path."""

    name: str
    method: str
    path: str
    handler: RequestHandler

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())


def _join(prefix: str, path: str) -> str:
    prefix = prefix.strip("/")
    if not path.startswith("/"):
        path = "/" + path
    return f"/{prefix}{path}" if prefix else path


class RouteGroup:
    """Routes sharing a path prefix and middleware."""

    def __init__(self, router: Router, prefix: str = "", middleware: Iterable[Middleware] = ()) -> None:
        self.router = router
        self.prefix = prefix
        self.middleware = list(middleware)

    def add_route(self, route: Route) -> Route:
        """Register ``route`` under this group's prefix, wrapped in its middleware."""
        handler = route.handler
        for middleware in reversed(self.middleware):
            handler = middleware(handler)
        registered = Route(route.name, route.method, _join(self.prefix, route.path), handler)
        self.router._register(registered)
        return registered


class Router:
    """The set of served routes together with their OpenAPI document."""

    def __init__(self, oas: dict[str, Any] | None = None, handler: Handler | None = None) -> None:
        self.oas = oas if oas is not None else new_openapi_spec()
        self.handler = handler if handler is not None else Handler()
        self.middleware: list[Middleware] = []
        self.auth_middleware: list[Middleware] = []
        self._routes: dict[tuple[str, str], Route] = {}
        self._request_counts: Counter[tuple[str, str]] = Counter()

    @property
    def routes(self) -> list[Route]:
        """Registered routes in registration order."""
        return list(self._routes.values())

    def _register(self, route: Route) -> None:
        key = (route.method, route.path)
        if key in self._routes:
            raise RouteExistsError(f"route {route.method} {route.path} already exists")
        self._routes[key] = route

    def add_route(self, pattern: str, method: str, operation: dict[str, Any] | None, route: Route) -> None:
        """Add ``route`` at the router root and document it in the spec."""
        RouteGroup(self).add_route(route)
        add_operation(self.oas, pattern, method, operation)

    def add_v1_route(self, pattern: str, method: str, operation: dict[str, Any] | None, route: Route) -> None:
        """Add ``route`` under ``/v1`` and document it in the spec."""
        self.version_one().add_route(route)
        add_operation(self.oas, pattern, method, operation)

    def add_unversioned_route(
        self, pattern: str, method: str, operation: dict[str, Any] | None, route: Route
    ) -> None:
        """Add ``route`` without a version prefix and document it in the spec."""
        self.base().add_route(route)
        add_operation(self.oas, pattern, method, operation)

    def add_echo_only_route(self, pattern: str, method: str, route: Route) -> None:
        """Add ``route`` without a version prefix and leave the spec untouched."""
        self.base().add_route(route)

    def version_one(self) -> RouteGroup:
        """Return a group for version 1 of the API."""
        return RouteGroup(self, "v1")

    def version_two(self) -> RouteGroup:
        """Return a group for version 2 of the API."""
        return RouteGroup(self, "v2")

    def base(self) -> RouteGroup:
        """Return the group with no version prefix."""
        return RouteGroup(self, "")

    def dispatch(self, method: str, path: str, request: Any = None) -> Any:
        """Call the handler registered for ``method`` and ``path``."""
        key = (method.upper(), path)
        route = self._routes.get(key)
        if route is None:
            raise LookupError(f"no route for {method.upper()} {path}")
        self._request_counts[key] += 1
        return route.handler(request)


def _recover(next_handler: RequestHandler) -> RequestHandler:
    def handle(request: Any) -> Any:
        try:
            return next_handler(request)
        except Exception:  # noqa: BLE001 - turn any failure into a 500
            _log.exception("recovered from handler failure")
            status = HTTPStatus.INTERNAL_SERVER_ERROR
            return status, {"error": status.phrase}

    return handle


def _register_liveness(router: Router) -> None:
    route = Route("Livez", "GET", "/livez", lambda request: (HTTPStatus.OK, {"status": "UP"}))
    router.add_unversioned_route("/livez", "GET", None, route)


def _register_readiness(router: Router) -> None:
    route = Route("Ready", "GET", "/ready", lambda request: router.handler.ready_checks.ready())
    router.add_unversioned_route("/ready", "GET", None, route)


def _register_metrics(router: Router) -> None:
    def metrics(request: Any) -> tuple[HTTPStatus, str]:
        lines = ["# TYPE http_requests_total counter"]
        for (method, path), count in sorted(router._request_counts.items()):
            lines.append(f'http_requests_total{{method="{method}",path="{path}"}} {count}')
        return HTTPStatus.OK, "\n".join(lines) + "\n"

    router.add_unversioned_route("/metrics", "GET", None, Route("Metrics", "GET", "/metrics", metrics))


def register_routes(router: Router) -> None:
    """Set up the shared middleware and register the base routes."""
    handler = router.handler
    if handler.logger is not None:
        transaction = TransactionMiddleware(handler.db_client, handler.logger)
    else:
        transaction = TransactionMiddleware(handler.db_client)

    router.middleware = [_recover, transaction.middleware]
    router.auth_middleware = [*router.middleware, *handler.auth_middleware]

    for register in (_register_readiness, _register_liveness, _register_metrics):
        register(router)