from .loader import load_config
from .models import (
    BlogCRMConfig,
    GitHubSettings,
    MarkdownSettings,
    OutputSettings,
    PipelineSettings,
)

__all__ = [
    "BlogCRMConfig",
    "GitHubSettings",
    "MarkdownSettings",
    "OutputSettings",
    "PipelineSettings",
    "load_config",
]
