"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import BlogCRMConfig

# Only these variables may be interpolated via ${VAR} in config files.
_ALLOWED_ENV_VARS: frozenset[str] = frozenset({
    "GITHUB_TOKEN",
    "GITHUB_OWNER",
    "GITHUB_REPO",
    "GITHUB_BRANCH",
    "BLOGCRM_BASE_URL",
    "BLOGCRM_IMAGE_PATH",
})


def load_config(cli_path: str | None = None) -> BlogCRMConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./blogcrm.yaml"),
        Path.home() / ".blogcrm" / "config.yaml",
    ]

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    continue
                raw = _expand_env_vars(raw)
                return BlogCRMConfig(**raw)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e

    return BlogCRMConfig()


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings.

    Variables outside the allow-list expand to an empty string.
    """
    if isinstance(obj, str):
        return re.sub(
            r"\$\{(\w+)\}",
            lambda m: os.environ.get(m.group(1), "") if m.group(1) in _ALLOWED_ENV_VARS else "",
            obj,
        )
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `blogcrm config init`
DEFAULT_CONFIG_TEMPLATE = """\
# blogcrm.yaml

# Content source
github:
  token_env: "GITHUB_TOKEN"    # env var holding the API token (optional for public repos)
  owner: "${GITHUB_OWNER}"
  repo: "${GITHUB_REPO}"
  branch: "main"
  cache_timeout_ms: 300000     # 5 minutes
  max_retries: 3
  retry_delay: 1.0             # seconds; attempt N waits N * retry_delay
  request_timeout: 10.0
  rate_limit_buffer: 100

# Rendering
markdown:
  excerpt_length: 160
  words_per_minute: 200
  base_url: ""
  image_path: "/images"
  highlight: true
  allow_html: false            # pass raw HTML in posts through to the output

# Fan-out
pipeline:
  max_concurrency: 8

# Posts index
output:
  base_dir: ".blogcrm"
  index_file: "posts.json"

# Logging
debug: false
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
