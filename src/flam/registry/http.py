import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from .client import DownloadStream, RegistryClient
from ..domain.errors import RegistryError
from ..domain.models import PackageDescriptor, PackageDetails, SearchResult
from ..utils.streams import ArchiveReader

logger = logging.getLogger(__name__)

# binding the local side to the IPv4 wildcard makes httpx connect over IPv4
# only; some networks refuse the IPv6 attempt outright
IPV4_LOCAL_ADDRESS = "0.0.0.0"

_search_results = TypeAdapter(List[SearchResult])


def ipv4_transport() -> httpx.HTTPTransport:
    return httpx.HTTPTransport(local_address=IPV4_LOCAL_ADDRESS)


class _HttpDownloadStream(DownloadStream):
    def __init__(self, response: httpx.Response):
        self.response = response
        self.total = None
        if "content-length" in response.headers:
            try:
                self.total = int(response.headers["content-length"])
            except ValueError:
                logger.debug(f"ignoring malformed content-length {response.headers['content-length']!r}")

    def iter_bytes(self) -> Iterator[bytes]:
        try:
            yield from self.response.iter_bytes()
        except httpx.HTTPError as e:
            raise RegistryError(str(e)) from e


class HttpRegistry(RegistryClient):
    """registry client speaking the registry's JSON/multipart HTTP API."""

    def __init__(self, base_url: str, transport: Optional[httpx.BaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.client = httpx.Client(
            base_url=self.base_url,
            transport=transport or ipv4_transport(),
        )

    def close(self):
        self.client.close()

    def __enter__(self) -> "HttpRegistry":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def login(self, email: str, password: str) -> str:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        return self._field(data, "token")

    def create_api_token(self, session_token: str) -> str:
        data = self._request(
            "POST",
            "/user/api-token",
            json={},
            headers=_bearer(session_token),
        )
        return self._field(data, "api_token")

    def publish(self, descriptor: PackageDescriptor, archive: ArchiveReader, api_key: str) -> str:
        # version always comes from the manifest's version field
        form = {
            "packageName": descriptor.name,
            "version": descriptor.version,
            "description": descriptor.description,
        }
        files = {"package": (archive.name, archive, "application/zip")}
        data = self._request(
            "POST",
            "/packages/publish",
            data=form,
            files=files,
            headers=_bearer(api_key),
        )
        return self._field(data, "message")

    def search(self, query: str) -> List[SearchResult]:
        data = self._request("GET", "/packages/search", params={"q": query})
        try:
            return _search_results.validate_python(data)
        except ValidationError as e:
            raise RegistryError(f"unexpected response from registry: {e}") from e

    def get_package_details(self, package_name: str) -> PackageDetails:
        data = self._request("GET", f"/packages/details/{_segment(package_name)}")
        try:
            return PackageDetails.model_validate(data)
        except ValidationError as e:
            raise RegistryError(f"unexpected response from registry: {e}") from e

    @contextmanager
    def download_package(self, package_name: str, version: str) -> Iterator[DownloadStream]:
        """
        stream a package archive.

        the response stays open until the with block exits; the body has to
        be consumed inside it.
        """
        url = f"/packages/download/{_segment(package_name)}/{_segment(version)}"
        logger.debug(f"GET {url} (streamed)")
        try:
            with self.client.stream("GET", url) as response:
                if not response.is_success:
                    response.read()
                    _raise_for_status(response)
                yield _HttpDownloadStream(response)
        except httpx.HTTPError as e:
            raise RegistryError(str(e)) from e

    def _request(self, method: str, url: str, **kwargs):
        logger.debug(f"{method} {url}")
        try:
            response = self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise RegistryError(str(e)) from e

        _raise_for_status(response)
        try:
            return response.json()
        except ValueError as e:
            raise RegistryError(
                f"unexpected response from registry: {method} {url} did not return JSON",
                response.status_code,
            ) from e

    @staticmethod
    def _field(data, key: str) -> str:
        value = data.get(key) if isinstance(data, dict) else None
        if not isinstance(value, str) or not value:
            raise RegistryError(f"unexpected response from registry: missing '{key}'")
        return value


def _raise_for_status(response: httpx.Response):
    """raise RegistryError, preferring the registry's own error text."""
    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        server_message = _server_error(response)
        raise RegistryError(server_message or str(e), response.status_code, server_message) from e


def _server_error(response: httpx.Response) -> Optional[str]:
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return None


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _segment(value: str) -> str:
    return quote(value, safe="")
