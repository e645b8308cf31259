"""
Unit tests for URL routing.
"""

import pytest

from minihttp.http.request import HTTPRequest
from minihttp.http.response import HTTPStatus, ok
from minihttp.http.router import Route, Router


def make_request(path: str, method: str = "GET") -> HTTPRequest:
    return HTTPRequest(method=method, path=path, version="HTTP/1.1")


@pytest.fixture
def router() -> Router:
    """Router with the standard route table, each handler naming itself."""
    r = Router()
    r.add_route("/", lambda req: ok("root"), name="root")
    r.add_route("/echo/*text", lambda req: ok(f"echo:{req.path_params['text']}"), name="echo")
    r.add_route("/user-agent", lambda req: ok("ua"), name="user_agent")
    r.add_route("/files/*filename", lambda req: ok(f"file:{req.path_params['filename']}"), name="files")
    return r


class TestRouteMatching:
    """Tests for path → route resolution."""

    @pytest.mark.parametrize("path,name,params", [
        ("/", "root", {}),
        ("/echo/abc", "echo", {"text": "abc"}),
        ("/echo/", "echo", {"text": ""}),
        ("/echo/a/b/c", "echo", {"text": "a/b/c"}),
        ("/echo/a%20b", "echo", {"text": "a%20b"}),
        ("/user-agent", "user_agent", {}),
        ("/files/report.txt", "files", {"filename": "report.txt"}),
        ("/files/../secret", "files", {"filename": "../secret"}),
    ])
    def test_match(self, router: Router, path: str, name: str, params: dict):
        result = router.match(path)

        assert result is not None
        assert result.route.name == name
        assert result.params == params

    @pytest.mark.parametrize("path", [
        "",
        "/echo",
        "/user-agent/",
        "/user-agentx",
        "/files",
        "/index.html",
        "//",
        "/ECHO/abc",
    ])
    def test_no_match(self, router: Router, path: str):
        assert router.match(path) is None

    def test_first_registered_wins(self):
        r = Router()
        r.add_route("/echo/*text", lambda req: ok("wildcard"), name="wildcard")
        r.add_route("/echo/special", lambda req: ok("exact"), name="exact")

        assert r.match("/echo/special").route.name == "wildcard"


class TestRouterHandle:
    """Tests for Router.handle()."""

    def test_dispatches_with_params(self, router: Router):
        response = router.handle(make_request("/echo/abc123"))

        assert response.status == HTTPStatus.OK
        assert response.body == b"echo:abc123"

    def test_unknown_path_is_404(self, router: Router):
        response = router.handle(make_request("/nope"))
        assert response.to_bytes() == b"HTTP/1.1 404 Not Found\r\n\r\n"

    @pytest.mark.parametrize("method", ["GET", "POST", "DELETE", "BREW", ""])
    def test_method_is_ignored(self, router: Router, method: str):
        response = router.handle(make_request("/user-agent", method=method))
        assert response.body == b"ua"

    def test_original_request_not_modified(self, router: Router):
        request = make_request("/files/a.txt")
        router.handle(request)

        assert request.path_params == {}

    def test_handler_sees_request_fields(self):
        seen = []
        r = Router()
        r.add_route("/echo/*text", lambda req: seen.append(req) or ok())

        r.handle(HTTPRequest(
            method="GET",
            path="/echo/x",
            headers={"user-agent": "ua"},
            client_address=("10.0.0.1", 5000),
        ))

        assert seen[0].path_params == {"text": "x"}
        assert seen[0].user_agent == "ua"
        assert seen[0].client_address == ("10.0.0.1", 5000)


class TestRegistration:
    """Tests for add_route() and the route() decorator."""

    def test_decorator_returns_handler(self):
        r = Router()

        @r.route("/ping")
        def ping(request):
            return ok("pong")

        assert ping(make_request("/ping")).body == b"pong"
        assert r.routes()[0].name == "ping"
        assert r.handle(make_request("/ping")).body == b"pong"

    def test_name_defaults_to_handler_name(self):
        def my_handler(request):
            return ok()

        route = Router().add_route("/x", my_handler)
        assert route.name == "my_handler"

    def test_routes_in_registration_order(self, router: Router):
        assert [r.pattern for r in router.routes()] == [
            "/", "/echo/*text", "/user-agent", "/files/*filename",
        ]

    def test_unnamed_wildcard(self):
        r = Router()
        r.add_route("/static/*", lambda req: ok(req.path_params["wildcard"]))

        assert r.handle(make_request("/static/a/b")).body == b"a/b"

    @pytest.mark.parametrize("pattern", [
        "echo/*text",
        "",
        "/echo/*text/more",
        "/echo*text",
        "/a/*b*c",
    ])
    def test_invalid_pattern(self, pattern: str):
        with pytest.raises(ValueError):
            Router().add_route(pattern, lambda req: ok())


class TestRoute:
    """Tests for a single Route."""

    def test_static_route(self):
        route = Route(pattern="/user-agent", handler=lambda req: ok(), prefix="/user-agent")

        assert route.match("/user-agent") == {}
        assert route.match("/user-agent/") is None

    def test_prefix_route(self):
        route = Route(pattern="/echo/*text", handler=lambda req: ok(), prefix="/echo/", param="text")

        assert route.match("/echo/hi") == {"text": "hi"}
        assert route.match("/echo") is None
