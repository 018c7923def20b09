from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
    openai_api_key: str | None = None
    openai_base_url: str = "https://api.openai.com/v1"
    model_name: str = "gpt-4o-mini"


class ContextConfig(BaseSettings):
    context_budget: int = 60_000  # chars total for LLM context
    max_file_size: int = 12_000  # chars per file
    max_tree_entries: int = 500  # paths listed in the directory section


class ExtractionConfig(BaseSettings):
    pipeline_timeout: float = 60.0  # seconds for resolve + all file fetches
    fetch_concurrency: int = 8
    http_timeout: float = 30.0


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
    llm: LLMConfig = Field(default_factory=LLMConfig)
    context: ContextConfig = Field(default_factory=ContextConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    github_token: str | None = None
    log_level: str = "INFO"


@lru_cache
def get_config() -> Config:
    return Config()


# Exact repository paths, not globs. Matched files come back in tree order.
KEY_FILE_PATTERNS = (
    # manifests
    "package.json",
    "pyproject.toml",
    "setup.py",
    "setup.cfg",
    "requirements.txt",
    "Pipfile",
    "Cargo.toml",
    "go.mod",
    "pom.xml",
    "build.gradle",
    "build.gradle.kts",
    "Gemfile",
    "composer.json",
    "mix.exs",
    # tooling / framework config
    "Dockerfile",
    "docker-compose.yml",
    "Makefile",
    "tsconfig.json",
    "next.config.js",
    "next.config.mjs",
    "next.config.ts",
    "vite.config.js",
    "vite.config.ts",
    "tailwind.config.js",
    "tailwind.config.ts",
    "angular.json",
    # entry points
    "index.js",
    "main.py",
    "app.py",
    "main.go",
    "src/index.js",
    "src/index.ts",
    "src/index.tsx",
    "src/main.ts",
    "src/main.tsx",
    "src/main.py",
    "src/main.rs",
    "src/lib.rs",
    "src/App.tsx",
    "src/app/page.tsx",
    "src/app/layout.tsx",
    "app/page.tsx",
    "app/layout.tsx",
)

# Hidden from the directory listing sent to the LLM; they stay in ExtractionResult.tree.
BINARY_EXTENSIONS = {
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".bmp",
    ".ico",
    ".svg",
    ".webp",
    ".pdf",
    ".zip",
    ".gz",
    ".rar",
    ".woff",
    ".woff2",
    ".eot",
    ".ttf",
    ".otf",
}
