import asyncio
import base64

import httpx
import pytest

from readme_generator import config
from readme_generator.models import RepositoryRef

OWNER = "acme"
REPO = "widget"
REPO_API = f"https://api.github.com/repos/{OWNER}/{REPO}"
TREE_SHA = "7f3c2a"

EXAMPLE_TREE = [
    {"path": "package.json", "type": "blob", "sha": "b1", "url": f"{REPO_API}/git/blobs/b1"},
    {"path": "src/index.ts", "type": "blob", "sha": "b2", "url": f"{REPO_API}/git/blobs/b2"},
    {"path": "node_modules/x.js", "type": "blob", "sha": "b3", "url": f"{REPO_API}/git/blobs/b3"},
    {"path": "docs", "type": "tree", "sha": "d1", "url": f"{REPO_API}/git/trees/d1"},
]

EXAMPLE_CONTENTS = {
    "package.json": '{\n  "name": "widget",\n  "scripts": {"dev": "next dev"}\n}\n',
    "src/index.ts": "export const answer = 42;\n",
    "node_modules/x.js": "module.exports = {};\n",
}

EXAMPLE_PATTERNS = {"package.json", "src/index.ts"}


def encode(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    config.get_config.cache_clear()
    yield
    config.get_config.cache_clear()


@pytest.fixture
def ref():
    return RepositoryRef(account=OWNER, repository=REPO)


@pytest.fixture
def repo_api():
    return REPO_API


@pytest.fixture
def tree_sha():
    return TREE_SHA


@pytest.fixture
def example_tree():
    return [dict(e) for e in EXAMPLE_TREE]


@pytest.fixture
def example_contents():
    return dict(EXAMPLE_CONTENTS)


@pytest.fixture
def example_patterns():
    return set(EXAMPLE_PATTERNS)


@pytest.fixture
def mock_github(respx_mock):
    """Register GitHub routes for acme/widget and return them by name.

    Blob routes are keyed by path. ``*_response`` and ``blob_responses``
    replace the default success response; an exception instance is raised
    instead of answering.
    """

    def _mock(route, response):
        if isinstance(response, Exception):
            return route.mock(side_effect=response)
        return route.mock(return_value=response)

    def _register(
        tree=None,
        contents=None,
        blob_responses=None,
        truncated=False,
        repo_response=None,
        branch_response=None,
        tree_response=None,
    ):
        tree = EXAMPLE_TREE if tree is None else tree
        contents = EXAMPLE_CONTENTS if contents is None else contents
        blob_responses = blob_responses or {}

        routes = {
            "repo": _mock(
                respx_mock.get(REPO_API),
                repo_response
                or httpx.Response(200, json={"full_name": f"{OWNER}/{REPO}", "default_branch": "main"}),
            ),
            "branch": _mock(
                respx_mock.get(f"{REPO_API}/branches/main"),
                branch_response
                or httpx.Response(
                    200,
                    json={"name": "main", "commit": {"sha": "c0ffee", "commit": {"tree": {"sha": TREE_SHA}}}},
                ),
            ),
            "tree": _mock(
                respx_mock.get(f"{REPO_API}/git/trees/{TREE_SHA}", params={"recursive": "1"}),
                tree_response
                or httpx.Response(200, json={"sha": TREE_SHA, "tree": tree, "truncated": truncated}),
            ),
        }
        for entry in tree:
            path = entry["path"]
            if entry.get("type") != "blob" or "url" not in entry:
                continue
            if path in blob_responses:
                response = blob_responses[path]
            elif path in contents:
                response = httpx.Response(200, json={"content": encode(contents[path]), "encoding": "base64"})
            else:
                continue
            routes[path] = _mock(respx_mock.get(entry["url"]), response)
        return routes

    return _register


@pytest.fixture
def run_with_client():
    """Run ``fn(client)`` on a fresh event loop with a throwaway AsyncClient."""

    def _run(fn):
        async def _main():
            async with httpx.AsyncClient() as client:
                return await fn(client)

        return asyncio.run(_main())

    return _run
