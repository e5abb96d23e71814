"""test suite for the HTTP registry client."""
import json
import sys
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from flam.domain.errors import RegistryError
from flam.domain.models import PackageDescriptor
from flam.registry.http import HttpRegistry, ipv4_transport
from flam.utils.streams import ArchiveReader


class TestTransport:
    def test_ipv4_transport_binds_ipv4_wildcard(self):
        with patch("flam.registry.http.httpx.HTTPTransport") as MockTransport:
            ipv4_transport()
        MockTransport.assert_called_once_with(local_address="0.0.0.0")

    def test_default_transport_is_ipv4(self):
        fake = httpx.MockTransport(lambda r: httpx.Response(200))
        with patch("flam.registry.http.ipv4_transport", return_value=fake) as factory:
            registry = HttpRegistry("https://registry.test/")
            registry.close()
        factory.assert_called_once_with()

    def test_injected_transport_skips_default(self):
        fake = httpx.MockTransport(lambda r: httpx.Response(200))
        with patch("flam.registry.http.ipv4_transport") as factory:
            HttpRegistry("https://registry.test/", transport=fake).close()
        factory.assert_not_called()

    def test_base_url_trailing_slash(self, handler):
        handler.add("GET", "/packages/details/foo", httpx.Response(200, json={"version": "1.0.0"}))
        with HttpRegistry("https://registry.test/", transport=httpx.MockTransport(handler)) as registry:
            registry.get_package_details("foo")
        assert str(handler.requests[0].url) == "https://registry.test/packages/details/foo"


class TestLoginEndpoints:
    def test_login_posts_credentials(self, registry, handler):
        handler.add("POST", "/auth/login", httpx.Response(200, json={"token": "session"}))

        assert registry.login("a@b.c", "pw") == "session"

        request = handler.requests[0]
        assert json.loads(request.content) == {"email": "a@b.c", "password": "pw"}
        assert "authorization" not in request.headers

    def test_api_token_uses_bearer(self, registry, handler):
        handler.add("POST", "/user/api-token", httpx.Response(200, json={"api_token": "key"}))

        assert registry.create_api_token("session") == "key"
        assert handler.requests[0].headers["authorization"] == "Bearer session"

    def test_missing_field_is_error(self, registry, handler):
        handler.add("POST", "/auth/login", httpx.Response(200, json={"nope": 1}))
        with pytest.raises(RegistryError, match="missing 'token'"):
            registry.login("a@b.c", "pw")


class TestErrorMapping:
    def test_server_error_field_preferred(self, registry, handler):
        handler.add("POST", "/auth/login", httpx.Response(401, json={"error": "Invalid credentials"}))

        with pytest.raises(RegistryError) as exc:
            registry.login("a@b.c", "bad")

        assert str(exc.value) == "Invalid credentials"
        assert exc.value.status_code == 401
        assert exc.value.server_message == "Invalid credentials"

    def test_status_text_without_error_field(self, registry, handler):
        handler.add("GET", "/packages/search", httpx.Response(500, text="boom"))

        with pytest.raises(RegistryError) as exc:
            registry.search("foo")

        assert "500" in str(exc.value)
        assert exc.value.server_message is None

    def test_transport_failure(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        with HttpRegistry("https://registry.test", transport=httpx.MockTransport(refuse)) as registry:
            with pytest.raises(RegistryError, match="connection refused") as exc:
                registry.search("foo")
        assert exc.value.status_code is None

    def test_non_json_success(self, registry, handler):
        handler.add("GET", "/packages/search", httpx.Response(200, text="<html>"))
        with pytest.raises(RegistryError, match="did not return JSON"):
            registry.search("foo")


class TestSearch:
    def test_query_is_url_encoded(self, registry, handler):
        handler.add("GET", "/packages/search", httpx.Response(200, json=[]))

        registry.search("fire & ice")

        request = handler.requests[0]
        assert request.url.params["q"] == "fire & ice"
        assert b"fire%20%26%20ice" in request.url.raw_path or b"fire+%26+ice" in request.url.raw_path

    def test_results_keep_server_order(self, registry, handler):
        handler.add("GET", "/packages/search", httpx.Response(200, json=[
            {"package_name": "zeta", "version": "1.0.0", "description": "z", "author": "x"},
            {"package_name": "alpha", "version": "2.0.0", "description": None, "author": None},
        ]))

        results = registry.search("a")

        assert [r.package_name for r in results] == ["zeta", "alpha"]

    def test_unexpected_shape(self, registry, handler):
        handler.add("GET", "/packages/search", httpx.Response(200, json={"results": []}))
        with pytest.raises(RegistryError, match="unexpected response"):
            registry.search("a")


class TestPublish:
    def test_multipart_body(self, registry, handler, tmp_path):
        archive_path = tmp_path / "foo.zip"
        archive_path.write_bytes(b"PK\x03\x04archive-bytes")
        handler.add("POST", "/packages/publish", httpx.Response(201, json={"message": "published"}))
        descriptor = PackageDescriptor(name="foo", version="1.2.0", description="A foo")

        with ArchiveReader(archive_path) as archive:
            message = registry.publish(descriptor, archive, "api-key")
            assert archive.finished

        assert message == "published"
        request = handler.requests[0]
        assert request.headers["authorization"] == "Bearer api-key"
        assert request.headers["content-type"].startswith("multipart/form-data")
        body = request.content
        assert b'name="packageName"\r\n\r\nfoo\r\n' in body
        assert b'name="version"\r\n\r\n1.2.0\r\n' in body
        assert b'name="description"\r\n\r\nA foo\r\n' in body
        assert b'name="package"; filename="foo.zip"' in body
        assert b"PK\x03\x04archive-bytes" in body

    def test_version_field_is_manifest_version(self, registry, handler, tmp_path):
        archive_path = tmp_path / "foo.zip"
        archive_path.write_bytes(b"x")
        handler.add("POST", "/packages/publish", httpx.Response(200, json={"message": "ok"}))
        descriptor = PackageDescriptor(name="same-as-name", version="3.1.4")

        with ArchiveReader(archive_path) as archive:
            registry.publish(descriptor, archive, "k")

        body = handler.requests[0].content
        assert b'name="version"\r\n\r\n3.1.4\r\n' in body
        assert b'name="version"\r\n\r\nsame-as-name\r\n' not in body


class TestDownload:
    def test_details_path_is_escaped(self, registry, handler):
        handler.add("GET", "/packages/details/a/b", httpx.Response(200, json={"version": "1"}))
        registry.get_package_details("a/b")
        assert handler.requests[0].url.raw_path == b"/packages/details/a%2Fb"

    def test_stream_yields_body(self, registry, handler):
        handler.add(
            "GET",
            "/packages/download/foo/1.2.0",
            httpx.Response(200, content=iter([b"abc", b"def"])),
        )

        with registry.download_package("foo", "1.2.0") as stream:
            data = b"".join(stream.iter_bytes())

        assert data == b"abcdef"

    def test_stream_reports_length(self, registry, handler):
        handler.add("GET", "/packages/download/foo/1.2.0", httpx.Response(200, content=b"12345"))
        with registry.download_package("foo", "1.2.0") as stream:
            assert stream.total == 5
            b"".join(stream.iter_bytes())

    def test_malformed_length_is_unknown(self, registry, handler):
        handler.add(
            "GET",
            "/packages/download/foo/1.2.0",
            httpx.Response(200, headers={"content-length": "abc"}, content=iter([b"12345"])),
        )
        with registry.download_package("foo", "1.2.0") as stream:
            assert stream.total is None
            assert b"".join(stream.iter_bytes()) == b"12345"

    def test_stream_error_status(self, registry, handler):
        handler.add(
            "GET",
            "/packages/download/foo/9.9.9",
            httpx.Response(404, json={"error": "Version not found"}),
        )
        with pytest.raises(RegistryError, match="Version not found"):
            with registry.download_package("foo", "9.9.9"):
                pass


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
