"""shared fixtures: a registry backed by httpx.MockTransport and a scratch project."""
import json
import sys
from pathlib import Path

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from flam.credentials import CredentialStore
from flam.registry.http import HttpRegistry

BASE_URL = "https://registry.test"


class RecordingHandler:
    """routes requests to canned responses and remembers every request seen."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method: str, path: str, response):
        """response is an httpx.Response or a callable taking the request."""
        self.routes[(method, path)] = response

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": f"no route for {request.url.path}"})
        if callable(route):
            return route(request)
        return route


def fail_on_request(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected request: {request.method} {request.url}")


@pytest.fixture
def handler():
    return RecordingHandler()


@pytest.fixture
def registry(handler):
    client = HttpRegistry(BASE_URL, transport=httpx.MockTransport(handler))
    yield client
    client.close()


@pytest.fixture
def offline_registry():
    """a registry that fails the test if any request is attempted."""
    client = HttpRegistry(BASE_URL, transport=httpx.MockTransport(fail_on_request))
    yield client
    client.close()


@pytest.fixture
def store(tmp_path):
    return CredentialStore(tmp_path / "home" / ".flamconfig.json")


@pytest.fixture
def project_dir(tmp_path):
    project = tmp_path / "project"
    project.mkdir()
    return project


def write_manifest(project_dir: Path, **fields) -> Path:
    manifest = project_dir / "package.json"
    manifest.write_text(json.dumps(fields))
    return manifest
