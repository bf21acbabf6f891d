from http import HTTPStatus

import pytest

from gotemplate_server.readiness import Handler
from gotemplate_server.routes import (
    Route,
    RouteExistsError,
    RouteGroup,
    Router,
    register_routes,
)
from gotemplate_server.transaction import current_transaction


def _echo(request):
    return HTTPStatus.OK, request


class _FakeTx:
    def __init__(self):
        self.events = []

    def commit(self):
        self.events.append("commit")

    def rollback(self):
        self.events.append("rollback")


class _FakeDB:
    def __init__(self):
        self.txs = []

    def tx(self):
        tx = _FakeTx()
        self.txs.append(tx)
        return tx


@pytest.fixture
def router():
    r = Router(handler=Handler(db_client=_FakeDB()))
    register_routes(r)
    return r


def test_livez(router):
    assert router.dispatch("GET", "/livez") == (HTTPStatus.OK, {"status": "UP"})


def test_ready_all_ok(router):
    router.handler.add_readiness_check("db_primary", lambda: None)
    assert router.dispatch("GET", "/ready") == (HTTPStatus.OK, {"status": {"db_primary": "OK"}})


def test_ready_failure(router):
    def broken():
        raise RuntimeError("down")

    router.handler.add_readiness_check("redis", broken)
    status, body = router.dispatch("GET", "/ready")
    assert status == HTTPStatus.SERVICE_UNAVAILABLE
    assert body == {"redis": "down"}


def test_base_routes_documented(router):
    assert set(router.oas["paths"]) == {"/livez", "/ready", "/metrics"}
    assert [route.name for route in router.routes] == ["Ready", "Livez", "Metrics"]


def test_metrics_counts_requests(router):
    router.dispatch("GET", "/livez")
    router.dispatch("GET", "/livez")
    status, text = router.dispatch("GET", "/metrics")
    assert status == HTTPStatus.OK
    assert 'http_requests_total{method="GET",path="/livez"} 2' in text


def test_unknown_route(router):
    with pytest.raises(LookupError):
        router.dispatch("GET", "/nope")


def test_duplicate_route_rejected(router):
    with pytest.raises(RouteExistsError):
        router.add_unversioned_route("/livez", "GET", None, Route("again", "GET", "/livez", _echo))


def test_method_is_case_insensitive():
    r = Router()
    r.add_route("/thing", "post", {"summary": "make"}, Route("thing", "post", "/thing", _echo))
    assert r.dispatch("post", "/thing", "body") == (HTTPStatus.OK, "body")
    assert r.oas["paths"]["/thing"] == {"post": {"summary": "make"}}


def test_v1_route_prefix():
    r = Router()
    r.add_v1_route("/items", "GET", None, Route("items", "GET", "/items", _echo))
    assert r.dispatch("GET", "/v1/items", 1) == (HTTPStatus.OK, 1)
    with pytest.raises(LookupError):
        r.dispatch("GET", "/items")
    assert "/items" in r.oas["paths"]


def test_version_two_group():
    r = Router()
    registered = r.version_two().add_route(Route("x", "GET", "x", _echo))
    assert registered.path == "/v2/x"


def test_echo_only_route_not_documented():
    r = Router()
    r.add_echo_only_route("/hidden", "GET", Route("hidden", "GET", "/hidden", _echo))
    assert r.dispatch("GET", "/hidden", "h") == (HTTPStatus.OK, "h")
    assert "/hidden" not in r.oas["paths"]


def test_auth_middleware_includes_handler_middleware():
    def auth(next_handler):
        return next_handler

    r = Router(handler=Handler(auth_middleware=[auth]))
    register_routes(r)
    assert r.auth_middleware[-1] is auth
    assert r.auth_middleware[: len(r.middleware)] == r.middleware


def test_middleware_commits_and_binds_transaction(router):
    group = RouteGroup(router, "", router.middleware)
    group.add_route(Route("tx", "GET", "/tx", lambda request: (HTTPStatus.OK, current_transaction())))
    status, tx = router.dispatch("GET", "/tx")
    assert status == HTTPStatus.OK
    db = router.handler.db_client
    assert tx is db.txs[-1]
    assert tx.events == ["commit"]


def test_middleware_recovers_and_rolls_back(router):
    def boom(request):
        raise RuntimeError("fail")

    RouteGroup(router, "", router.middleware).add_route(Route("boom", "GET", "/boom", boom))
    status, body = router.dispatch("GET", "/boom")
    assert status == HTTPStatus.INTERNAL_SERVER_ERROR
    assert body == {"error": HTTPStatus.INTERNAL_SERVER_ERROR.phrase}
    assert router.handler.db_client.txs[-1].events == ["rollback"]