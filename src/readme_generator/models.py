from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

_NAME_PATTERN = r"^[\w.\-]+$"


class RepositoryRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    account: str = Field(pattern=_NAME_PATTERN)
    repository: str = Field(pattern=_NAME_PATTERN)

    @property
    def full_name(self) -> str:
        return f"{self.account}/{self.repository}"


class NodeKind(str, Enum):
    BLOB = "blob"
    OTHER = "other"


class TreeNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    kind: NodeKind
    content_url: str | None = None


class ExtractionTree(BaseModel):
    """Flat recursive listing of a repository's default branch, in upstream order."""

    model_config = ConfigDict(frozen=True)

    ref: RepositoryRef
    nodes: tuple[TreeNode, ...]
    truncated: bool = False

    @property
    def paths(self) -> tuple[str, ...]:
        return tuple(node.path for node in self.nodes)


class FetchedFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    content: str


class FetchFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    reason: str


class ExtractionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    tree: tuple[str, ...]
    files: tuple[FetchedFile, ...]
    # Diagnostics only; never serialized.
    failures: tuple[FetchFailure, ...] = Field(default=(), exclude=True)


class GenerateReadmeRequest(BaseModel):
    user_name: str = Field(pattern=_NAME_PATTERN)
    repo_name: str = Field(pattern=_NAME_PATTERN)
    repo_description: str = ""
    prompt: str = ""

    def to_ref(self) -> RepositoryRef:
        return RepositoryRef(account=self.user_name, repository=self.repo_name)


class ReadmeResponse(BaseModel):
    readme_content: str


class ErrorResponse(BaseModel):
    status: Literal["error"] = "error"
    message: str
