"""ASGI scope view tests."""

from ipaddress import ip_address

from forwarded_headers.models import Endpoint
from forwarded_headers.scope import ScopeView


class TestRemoteEndpoint:
    """Client endpoint access tests."""

    def test_reads_ip_client(self, make_scope):
        view = ScopeView(make_scope(client=("10.0.0.1", 41000)))

        assert view.remote_endpoint == Endpoint(address=ip_address("10.0.0.1"), port=41000)

    def test_missing_client(self, make_scope):
        assert ScopeView(make_scope(client=None)).remote_endpoint is None

    def test_symbolic_client_is_not_an_address(self, make_scope):
        """Peers without an IP (unix sockets, test clients) have no native address."""
        assert ScopeView(make_scope(client=("testclient", 50000))).remote_endpoint is None

    def test_writes_client_tuple(self, make_scope):
        scope = make_scope()

        ScopeView(scope).remote_endpoint = Endpoint(address=ip_address("2001:db8::7"), port=443)

        assert scope["client"] == ("2001:db8::7", 443)


class TestScheme:
    """Scheme access tests."""

    def test_http_scheme(self, make_scope):
        scope = make_scope(scheme="http")
        view = ScopeView(scope)

        view.scheme = "https"

        assert view.scheme == "https"
        assert scope["scheme"] == "https"

    def test_websocket_scheme_is_mapped(self, make_scope):
        """https on a websocket connection becomes wss."""
        scope = make_scope(scheme="ws", scope_type="websocket")

        ScopeView(scope).scheme = "https"

        assert scope["scheme"] == "wss"

    def test_websocket_keeps_ws_schemes(self, make_scope):
        scope = make_scope(scheme="ws", scope_type="websocket")

        ScopeView(scope).scheme = "wss"

        assert scope["scheme"] == "wss"

    def test_default_scheme(self, make_scope):
        scope = make_scope()
        del scope["scheme"]

        assert ScopeView(scope).scheme == "http"


class TestHeaders:
    """Header access tests."""

    def test_header_lookup_is_case_insensitive(self, make_scope):
        view = ScopeView(make_scope(headers=[("X-Forwarded-For", "203.0.113.7")]))

        assert view.get_header_values("x-forwarded-for") == ["203.0.113.7"]
        assert view.get_header_values("X-FORWARDED-FOR") == ["203.0.113.7"]

    def test_repeated_headers_are_returned_in_order(self, make_scope):
        view = ScopeView(make_scope(headers=[("X-Forwarded-For", "203.0.113.7"), ("X-Forwarded-For", "10.0.0.2")]))

        assert view.get_header_values("X-Forwarded-For") == ["203.0.113.7", "10.0.0.2"]

    def test_set_header_replaces_all_lines_in_place(self, make_scope):
        # Arrange
        scope = make_scope(
            headers=[
                ("X-Forwarded-For", "203.0.113.7"),
                ("Accept", "*/*"),
                ("X-Forwarded-For", "10.0.0.2"),
            ]
        )

        # Act
        ScopeView(scope).set_header("X-Forwarded-For", ["203.0.113.7"])

        # Assert
        assert scope["headers"] == [
            (b"host", b"internal.example:8000"),
            (b"x-forwarded-for", b"203.0.113.7"),
            (b"accept", b"*/*"),
        ]

    def test_set_header_appends_new_header(self, make_scope):
        scope = make_scope()

        ScopeView(scope).set_header("X-Original-For", ["10.0.0.1:41000"])

        assert scope["headers"][-1] == (b"x-original-for", b"10.0.0.1:41000")

    def test_set_header_joins_values(self, make_scope):
        scope = make_scope()

        ScopeView(scope).set_header("X-Forwarded-For", ["192.0.2.1", "203.0.113.7"])

        assert ScopeView(scope).get_header_values("X-Forwarded-For") == ["192.0.2.1, 203.0.113.7"]

    def test_remove_header(self, make_scope):
        scope = make_scope(headers=[("X-Forwarded-For", "203.0.113.7"), ("x-forwarded-for", "10.0.0.2")])

        ScopeView(scope).remove_header("X-Forwarded-For")

        assert scope["headers"] == [(b"host", b"internal.example:8000")]

    def test_host_property(self, make_scope):
        scope = make_scope(host="internal.example:8000")
        view = ScopeView(scope)

        view.host = "example.com"

        assert view.host == "example.com"
        assert scope["headers"][0] == (b"host", b"example.com")
