"""reposync configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site — not in this module)
  2. Environment variables  (REPOSYNC_GENERATION_MODEL, REPOSYNC_SUMMARY_MODEL,
                             REPOSYNC_EMBEDDING_MODEL)
  3. Per-project reposync.yaml  (working directory)
  4. Global ~/.reposync/config.yaml  (model defaults only — no API keys)
  5. Hardcoded defaults

Global config must never contain API keys or the GitHub token; use
environment variables (GITHUB_TOKEN, GEMINI_API_KEY, ...) instead.
All YAML reads use yaml.safe_load() — never yaml.load().
"""

from __future__ import annotations

import os
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".reposync"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "reposync.yaml"

# Credential-like key names are forbidden in global config.
# Does NOT match legitimate keys like max_tokens or summary_max_tokens.
_API_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)"
    r"|_token$"
    r"|^token$"
    r"|_secret$"
    r"|^secret$"
    r"|passw(?:ord|d)"
    r"|credential",
    re.IGNORECASE,
)

_KNOWN_SECTIONS: frozenset[str] = frozenset(
    ["github", "embedding", "generation", "ingest", "usage"]
)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid or forbidden value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class GitHubCfg:
    """GitHub access (reposync.yaml: github:). The token comes from GITHUB_TOKEN."""

    api_url: str = "https://api.github.com"
    timeout: float = 30.0
    per_page: int = 30


@dataclass
class EmbeddingCfg:
    """Embedding model configuration (reposync.yaml: embedding:)."""

    model: str = "gemini/text-embedding-004"
    dimensions: int = 768


@dataclass
class GenerationCfg:
    """LLM configuration for answers and commit summaries (reposync.yaml: generation:)."""

    model: str = "gemini/gemini-1.5-flash"
    summary_model: str = "gemini/gemini-1.5-flash"
    max_tokens: int = 2048
    summary_max_tokens: int = 500


@dataclass
class IngestCfg:
    """Commit ingestion tuning (reposync.yaml: ingest:)."""

    max_workers: int = 10


@dataclass
class UsageCfg:
    """Usage reporting limits (reposync.yaml: usage:)."""

    request_limit: int = 1000
    window_days: int = 30


@dataclass
class ReposyncConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    github: GitHubCfg = field(default_factory=GitHubCfg)
    embedding: EmbeddingCfg = field(default_factory=EmbeddingCfg)
    generation: GenerationCfg = field(default_factory=GenerationCfg)
    ingest: IngestCfg = field(default_factory=IngestCfg)
    usage: UsageCfg = field(default_factory=UsageCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_no_api_keys(data: dict[str, Any], source: Path) -> None:
    """Raise ConfigError if *data* contains any API-key-like key names."""

    def _scan(obj: Any, path: str) -> None:
        if isinstance(obj, dict):
            for k, v in obj.items():
                full = f"{path}.{k}" if path else k
                if _API_KEY_RE.search(str(k)):
                    raise ConfigError(
                        f"Global config '{source}' contains a forbidden key '{full}'.\n"
                        f"  Secrets must be set via environment variables, not config files.\n"
                        f"  Remove '{full}' from {source.name} and use:\n"
                        f"    export {str(k).upper().replace('-', '_')}=<value>"
                    )
                _scan(v, full)

    _scan(data, "")


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


def _validate(cfg: ReposyncConfig) -> None:
    if cfg.embedding.dimensions < 1:
        raise ConfigError(
            f"embedding.dimensions must be >= 1, got {cfg.embedding.dimensions}"
        )
    if cfg.ingest.max_workers < 1:
        raise ConfigError(f"ingest.max_workers must be >= 1, got {cfg.ingest.max_workers}")
    if cfg.github.timeout <= 0:
        raise ConfigError(f"github.timeout must be > 0, got {cfg.github.timeout}")
    if not cfg.github.api_url.startswith(("https://", "http://")):
        raise ConfigError(f"github.api_url must be an http(s) URL: '{cfg.github.api_url}'")


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _cfg_from_dict(data: dict[str, Any]) -> ReposyncConfig:
    """Build a *ReposyncConfig* from a merged raw YAML dict."""
    cfg = ReposyncConfig()

    if "github" in data:
        gh = data["github"] or {}
        cfg.github = GitHubCfg(
            api_url=str(gh.get("api_url", cfg.github.api_url)).rstrip("/"),
            timeout=float(gh.get("timeout", cfg.github.timeout)),
            per_page=int(gh.get("per_page", cfg.github.per_page)),
        )

    if "embedding" in data:
        e = data["embedding"] or {}
        cfg.embedding = EmbeddingCfg(
            model=str(e.get("model", cfg.embedding.model)),
            dimensions=int(e.get("dimensions", cfg.embedding.dimensions)),
        )

    if "generation" in data:
        g = data["generation"] or {}
        cfg.generation = GenerationCfg(
            model=str(g.get("model", cfg.generation.model)),
            summary_model=str(g.get("summary_model", cfg.generation.summary_model)),
            max_tokens=int(g.get("max_tokens", cfg.generation.max_tokens)),
            summary_max_tokens=int(
                g.get("summary_max_tokens", cfg.generation.summary_max_tokens)
            ),
        )

    if "ingest" in data:
        i = data["ingest"] or {}
        cfg.ingest = IngestCfg(
            max_workers=int(i.get("max_workers", cfg.ingest.max_workers)),
        )

    if "usage" in data:
        u = data["usage"] or {}
        cfg.usage = UsageCfg(
            request_limit=int(u.get("request_limit", cfg.usage.request_limit)),
            window_days=int(u.get("window_days", cfg.usage.window_days)),
        )

    return cfg


def _apply_env_overrides(cfg: ReposyncConfig) -> ReposyncConfig:
    """Apply REPOSYNC_* environment variable overrides."""
    if model := os.environ.get("REPOSYNC_GENERATION_MODEL"):
        cfg.generation.model = model
    if model := os.environ.get("REPOSYNC_SUMMARY_MODEL"):
        cfg.generation.summary_model = model
    if model := os.environ.get("REPOSYNC_EMBEDDING_MODEL"):
        cfg.embedding.model = model
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> ReposyncConfig:
    """Load and return a merged *ReposyncConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *reposync.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Returns:
        Fully merged *ReposyncConfig* with env var overrides applied.

    Raises:
        ConfigError: If global config contains credential-like fields or a
            value is out of range.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    if global_path.exists():
        raw_global = yaml.safe_load(global_path.read_text(encoding="utf-8")) or {}
        _check_no_api_keys(raw_global, global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = yaml.safe_load(project_cfg_path.read_text(encoding="utf-8")) or {}
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    cfg = _apply_env_overrides(_cfg_from_dict(merged))
    _validate(cfg)
    return cfg


def ensure_global_config(
    global_config_path: Path | None = None,
) -> Path:
    """Create ``~/.reposync/config.yaml`` with defaults if it does not exist.

    Creates the parent directory with mode 0o700 and the file with mode 0o600.
    """
    target = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    target.parent.mkdir(mode=0o700, parents=True, exist_ok=True)

    if not target.exists():
        content = (
            "# reposync global configuration — model defaults only.\n"
            "# NEVER store API keys or tokens here — use environment variables:\n"
            "#   export GITHUB_TOKEN=ghp_...\n"
            "#   export GEMINI_API_KEY=...\n"
            "\n"
            "embedding:\n"
            "  model: gemini/text-embedding-004\n"
            "  dimensions: 768\n"
            "\n"
            "generation:\n"
            "  model: gemini/gemini-1.5-flash\n"
            "  summary_model: gemini/gemini-1.5-flash\n"
        )
        target.write_text(content, encoding="utf-8")
        target.chmod(0o600)

    return target
