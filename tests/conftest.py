"""Shared fixtures for asana-mcp tests.

Two fakes cover the HTTP boundary:

- ``http_response`` builds ``MagicMock`` responses for tests that patch
  ``httpx.AsyncClient`` (client tests).
- ``fake_client`` builds a path-routed stand-in for ``AsanaClient`` whose
  ``get`` / ``get_all`` / ``post`` / ``put`` / ``post_empty`` are
  ``AsyncMock``s (traversal and tool tests).
"""

import json
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from asana_mcp.core.errors import AsanaError, NotFoundError
from asana_mcp.core.models import Resource


class FakeAsanaClient:
    """Path-routed fake client.

    ``objects`` maps a path to the ``data`` object ``get`` returns, ``lists``
    maps a path to the full item list ``get_all`` returns, and ``errors`` maps
    a path to an exception raised instead. A ``get`` on an unknown path
    answers 404, like the real API.
    """

    def __init__(
        self,
        objects: Optional[Dict[str, Dict[str, Any]]] = None,
        lists: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        errors: Optional[Dict[str, AsanaError]] = None,
    ):
        self.objects = dict(objects or {})
        self.lists = dict(lists or {})
        self.errors = dict(errors or {})
        self.calls: List[tuple] = []

        self.get = AsyncMock(side_effect=self._get)
        self.get_all = AsyncMock(side_effect=self._get_all)
        self.post = AsyncMock(side_effect=self._write)
        self.put = AsyncMock(side_effect=self._write)
        self.post_empty = AsyncMock(return_value=None)

    def paths(self, method: str) -> List[str]:
        return [path for called, path, _ in self.calls if called == method]

    def _raise_if_failing(self, path: str) -> None:
        if path in self.errors:
            raise self.errors[path]

    async def _get(self, path, params=(), *, model=Resource):
        self.calls.append(("get", path, list(params)))
        self._raise_if_failing(path)
        if path not in self.objects:
            raise NotFoundError("Unknown object")
        return model.model_validate(self.objects[path])

    async def _get_all(self, path, params=(), *, model=Resource):
        self.calls.append(("get_all", path, list(params)))
        self._raise_if_failing(path)
        return [model.model_validate(item) for item in self.lists.get(path, [])]

    async def _write(self, path, body, *, model=Resource):
        self.calls.append(("write", path, body))
        self._raise_if_failing(path)
        data = {"gid": "9000", **body.get("data", {})}
        return model.model_validate(self.objects.get(path, data))


@pytest.fixture
def fake_client():
    """Factory for :class:`FakeAsanaClient` instances."""

    def _factory(**kwargs):
        return FakeAsanaClient(**kwargs)

    return _factory


@pytest.fixture
def http_response():
    """Factory for mocked ``httpx.Response`` objects."""

    def _factory(status_code: int = 200, body: Any = None, *, text: Optional[str] = None, reason: str = "OK"):
        response = MagicMock()
        response.status_code = status_code
        response.text = text if text is not None else json.dumps(body)
        response.reason_phrase = reason
        return response

    return _factory


@pytest.fixture
def mock_http():
    """Patch ``httpx.AsyncClient`` and return the mocked client instance.

    Set ``mock_http.request`` to an ``AsyncMock`` with the responses to
    return, in order.
    """
    with patch("asana_mcp.core.client.httpx.AsyncClient") as mock_client_class:
        mock_client = MagicMock()
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=None)
        mock_client.request = AsyncMock()
        mock_client_class.return_value = mock_client
        yield mock_client
