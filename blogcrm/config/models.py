from typing import Literal

from pydantic import BaseModel, Field


class GitHubSettings(BaseModel):
    token_env: str = "GITHUB_TOKEN"
    owner: str = ""
    repo: str = ""
    branch: str = "main"
    cache_timeout_ms: int = Field(default=300_000, ge=0)
    max_retries: int = Field(default=3, gt=0)
    retry_delay: float = Field(default=1.0, ge=0)
    request_timeout: float = Field(default=10.0, gt=0)
    rate_limit_buffer: int = 100
    api_base: str = "https://api.github.com"
    raw_base: str = "https://raw.githubusercontent.com"

    @property
    def repo_id(self) -> str:
        return f"{self.owner}/{self.repo}"


class MarkdownSettings(BaseModel):
    excerpt_length: int = Field(default=160, gt=0)
    words_per_minute: int = Field(default=200, gt=0)
    base_url: str = ""
    image_path: str = "/images"
    highlight: bool = True
    allow_html: bool = False


class PipelineSettings(BaseModel):
    max_concurrency: int = Field(default=8, gt=0)


class OutputSettings(BaseModel):
    base_dir: str = ".blogcrm"
    index_file: str = "posts.json"


class BlogCRMConfig(BaseModel):
    github: GitHubSettings = Field(default_factory=GitHubSettings)
    markdown: MarkdownSettings = Field(default_factory=MarkdownSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)
    debug: bool = False
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
