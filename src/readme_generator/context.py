import re
from pathlib import PurePosixPath

from readme_generator.models import ExtractionResult

_CONSECUTIVE_BLANK_LINES = re.compile(r"\n{3,}")
# Markdown badge images: [![alt](badge-url)](link-url) or ![alt](shields-url)
_MARKDOWN_BADGES = re.compile(r"!?\[!\[[^\]]*\]\([^)]*\)\]\([^)]*\)|!\[[^\]]*\]\(https?://img\.shields\.io[^)]*\)")


def is_binary_path(path: str, binary_extensions: set[str]) -> bool:
    return PurePosixPath(path).suffix.lower() in binary_extensions


def format_directory_tree(
    paths: tuple[str, ...] | list[str],
    binary_extensions: set[str],
    max_entries: int = 500,
) -> str:
    lines = ["Directory structure:", ""]
    listed = [p for p in paths if not is_binary_path(p, binary_extensions)]
    lines.extend(listed[:max_entries])
    if len(listed) > max_entries:
        lines.append(f"... ({len(listed) - max_entries} more entries)")
    return "\n".join(lines)


def clean_content(content: str) -> str:
    content = _MARKDOWN_BADGES.sub("", content)
    content = _CONSECUTIVE_BLANK_LINES.sub("\n\n", content)
    lines = [line.rstrip() for line in content.split("\n")]
    return "\n".join(lines).strip()


def build_context(
    result: ExtractionResult,
    budget: int,
    max_file_size: int,
    binary_extensions: set[str],
    max_tree_entries: int = 500,
) -> str:
    """Render the tree listing followed by key-file blocks, within ``budget`` chars.

    The listing always goes first; file blocks that would overflow the budget
    are skipped, smaller later ones may still fit.
    """
    header = format_directory_tree(result.tree, binary_extensions, max_tree_entries)
    parts = [header]
    used = len(header)

    for fetched in result.files:
        content = clean_content(fetched.content)
        if len(content) > max_file_size:
            content = content[:max_file_size] + "\n... (truncated)"

        file_block = f"\n\n--- {fetched.path} ---\n{content}"
        if used + len(file_block) > budget:
            continue

        parts.append(file_block)
        used += len(file_block)

    return "".join(parts)
