"""Repository content extraction: resolve the default-branch tree, then fetch key files."""

import asyncio
import logging
from collections.abc import Iterable

import httpx

from readme_generator import config, github
from readme_generator.models import (
    ExtractionResult,
    ExtractionTree,
    FetchedFile,
    FetchFailure,
    NodeKind,
    RepositoryRef,
    TreeNode,
)

logger = logging.getLogger(__name__)


def _to_node(entry: dict) -> TreeNode:
    url = entry.get("url")
    if entry.get("type") == "blob" and isinstance(url, str) and url:
        return TreeNode(path=entry["path"], kind=NodeKind.BLOB, content_url=url)
    return TreeNode(path=entry["path"], kind=NodeKind.OTHER)


async def resolve_tree(
    client: httpx.AsyncClient,
    ref: RepositoryRef,
    token: str | None = None,
) -> ExtractionTree:
    """Repository -> default branch -> head commit tree -> recursive listing.

    Three calls, each depending on the previous one. Any failure raises a
    ``github.ResolutionError`` and nothing further is requested.
    """
    branch = await github.fetch_default_branch(client, ref, token)
    tree_sha = await github.fetch_tree_sha(client, ref, branch, token)
    entries, truncated = await github.fetch_tree(client, ref, tree_sha, token)

    if truncated:
        logger.warning(f"Tree of {ref.full_name} was truncated by GitHub ({len(entries)} entries kept)")

    nodes = tuple(_to_node(entry) for entry in entries)
    logger.info(f"Resolved {ref.full_name}@{branch}: {len(nodes)} entries")
    return ExtractionTree(ref=ref, nodes=nodes, truncated=truncated)


def select_key_nodes(tree: ExtractionTree, patterns: Iterable[str]) -> list[TreeNode]:
    wanted = set(patterns)
    return [node for node in tree.nodes if node.kind is NodeKind.BLOB and node.path in wanted]


async def fetch_key_files(
    client: httpx.AsyncClient,
    tree: ExtractionTree,
    patterns: Iterable[str],
    token: str | None = None,
    concurrency: int = 8,
) -> ExtractionResult:
    selected = select_key_nodes(tree, patterns)
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def _fetch_one(node: TreeNode) -> tuple[str, str | None, str | None]:
        async with semaphore:
            try:
                content = await github.fetch_blob(client, node.content_url, token)
                return node.path, content, None
            except github.BlobError as exc:
                logger.warning(f"Skipping '{node.path}': {exc}")
                return node.path, None, str(exc)

    outcomes = await asyncio.gather(*[_fetch_one(node) for node in selected])

    contents: dict[str, str] = {}
    failures: list[FetchFailure] = []
    for path, content, reason in outcomes:
        if content is not None:
            contents[path] = content
        else:
            failures.append(FetchFailure(path=path, reason=reason))

    files = tuple(
        FetchedFile(path=node.path, content=contents[node.path])
        for node in selected
        if node.path in contents
    )
    logger.info(f"Key files: {len(selected)} matched, {len(files)} fetched, {len(failures)} dropped")
    return ExtractionResult(tree=tree.paths, files=files, failures=tuple(failures))


async def _extract(
    client: httpx.AsyncClient,
    ref: RepositoryRef,
    patterns: Iterable[str],
    token: str | None,
    concurrency: int,
) -> ExtractionResult:
    tree = await resolve_tree(client, ref, token)
    return await fetch_key_files(client, tree, patterns, token, concurrency)


async def extract_repository(
    ref: RepositoryRef,
    patterns: Iterable[str] = config.KEY_FILE_PATTERNS,
) -> ExtractionResult:
    cfg = config.get_config()
    logger.info(f"Extracting {ref.full_name}")

    async with httpx.AsyncClient(timeout=cfg.extraction.http_timeout) as client:
        try:
            return await asyncio.wait_for(
                _extract(client, ref, patterns, cfg.github_token, cfg.extraction.fetch_concurrency),
                timeout=cfg.extraction.pipeline_timeout,
            )
        except asyncio.TimeoutError as exc:
            raise github.UpstreamUnavailable(
                f"Timed out after {cfg.extraction.pipeline_timeout:.0f}s reading {ref.full_name} from GitHub",
                status_code=504,
            ) from exc
