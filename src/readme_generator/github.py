import base64
import binascii
from urllib.parse import quote

import httpx

from readme_generator.models import RepositoryRef

GITHUB_API = "https://api.github.com"


class ResolutionError(Exception):
    """Fatal failure while resolving a repository's tree."""

    def __init__(self, message: str, status_code: int = 502):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class RepositoryNotFound(ResolutionError):
    def __init__(self, message: str, status_code: int = 404):
        super().__init__(message, status_code)


class BranchNotFound(ResolutionError):
    def __init__(self, message: str, status_code: int = 404):
        super().__init__(message, status_code)


class TreeUnavailable(ResolutionError):
    pass


class UpstreamUnavailable(ResolutionError):
    pass


class BlobError(Exception):
    """A single file could not be fetched or decoded."""


def make_headers(token: str | None) -> dict[str, str]:
    headers = {"Accept": "application/vnd.github.v3+json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


async def _get(client: httpx.AsyncClient, url: str, token: str | None, **kwargs) -> httpx.Response:
    try:
        return await client.get(url, headers=make_headers(token), **kwargs)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise UpstreamUnavailable(f"Failed to connect to GitHub: {exc}") from exc


def _json(resp: httpx.Response, error: type[ResolutionError], context: str) -> dict:
    try:
        data = resp.json()
    except ValueError as exc:
        raise error(f"{context}: malformed response from GitHub") from exc
    if not isinstance(data, dict):
        raise error(f"{context}: malformed response from GitHub")
    return data


def _is_rate_limited(resp: httpx.Response) -> bool:
    if resp.status_code == 429:
        return True
    return resp.status_code == 403 and (
        resp.headers.get("x-ratelimit-remaining") == "0" or "rate limit" in resp.text.lower()
    )


def _raise_for_upstream(resp: httpx.Response) -> None:
    if _is_rate_limited(resp):
        raise UpstreamUnavailable("GitHub API rate limit exceeded", status_code=429)
    if resp.status_code >= 400:
        raise UpstreamUnavailable(f"GitHub API error ({resp.status_code}): {resp.text[:200]}")


async def fetch_default_branch(
    client: httpx.AsyncClient, ref: RepositoryRef, token: str | None = None
) -> str:
    resp = await _get(client, f"{GITHUB_API}/repos/{ref.account}/{ref.repository}", token)
    if resp.status_code == 404:
        raise RepositoryNotFound(f"Repository {ref.full_name}: not found (or not public)")
    if resp.status_code == 403 and not _is_rate_limited(resp):
        raise RepositoryNotFound(
            f"Repository {ref.full_name}: private or access denied", status_code=403
        )
    _raise_for_upstream(resp)
    data = _json(resp, UpstreamUnavailable, f"Repository {ref.full_name}")
    branch = data.get("default_branch")
    if not isinstance(branch, str) or not branch:
        raise UpstreamUnavailable(f"Repository {ref.full_name}: no default branch reported")
    return branch


async def fetch_tree_sha(
    client: httpx.AsyncClient, ref: RepositoryRef, branch: str, token: str | None = None
) -> str:
    # branch names may contain "#", "?" or "%"; "/" stays a path separator
    url = f"{GITHUB_API}/repos/{ref.account}/{ref.repository}/branches/{quote(branch, safe='/')}"
    resp = await _get(client, url, token)
    if resp.status_code == 404:
        raise BranchNotFound(f"Branch '{branch}' of {ref.full_name}: not found")
    _raise_for_upstream(resp)
    data = _json(resp, UpstreamUnavailable, f"Branch '{branch}'")
    try:
        sha = data["commit"]["commit"]["tree"]["sha"]
    except (KeyError, TypeError):
        sha = None
    if not isinstance(sha, str) or not sha:
        raise BranchNotFound(f"Branch '{branch}' of {ref.full_name}: head commit has no tree")
    return sha


async def fetch_tree(
    client: httpx.AsyncClient, ref: RepositoryRef, tree_sha: str, token: str | None = None
) -> tuple[list[dict], bool]:
    """Recursive listing of one tree object. Returns (entries, truncated)."""
    url = f"{GITHUB_API}/repos/{ref.account}/{ref.repository}/git/trees/{tree_sha}"
    try:
        resp = await _get(client, url, token, params={"recursive": "1"})
    except UpstreamUnavailable as exc:
        raise TreeUnavailable(exc.message) from exc
    if resp.status_code >= 400:
        raise TreeUnavailable(
            f"File tree of {ref.full_name} unavailable ({resp.status_code})"
        )
    data = _json(resp, TreeUnavailable, f"File tree of {ref.full_name}")
    entries = data.get("tree")
    if not isinstance(entries, list) or not all(
        isinstance(e, dict) and isinstance(e.get("path"), str) for e in entries
    ):
        raise TreeUnavailable(f"File tree of {ref.full_name}: malformed response from GitHub")
    return entries, bool(data.get("truncated", False))


def decode_content(encoded: str) -> str:
    # GitHub wraps base64 bodies at 60 columns
    try:
        raw = base64.b64decode("".join(encoded.split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise BlobError(f"invalid base64 content: {exc}") from exc
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise BlobError(f"not UTF-8 text: {exc}") from exc


async def fetch_blob(client: httpx.AsyncClient, url: str, token: str | None = None) -> str:
    try:
        resp = await client.get(url, headers=make_headers(token))
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise BlobError(f"transport error: {exc}") from exc
    if resp.status_code != 200:
        raise BlobError(f"HTTP {resp.status_code}")

    try:
        data = resp.json()
    except ValueError as exc:
        raise BlobError("malformed response") from exc
    if not isinstance(data, dict) or not isinstance(data.get("content"), str):
        raise BlobError("malformed response")
    if data.get("encoding", "base64") != "base64":
        raise BlobError(f"unexpected encoding '{data.get('encoding')}'")

    return decode_content(data["content"])
