# === FILE: site_crawler/config.py ===
"""
Loading and validation of the SiteCrawler configuration.
The schema is described with Pydantic; files may be YAML or JSON.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Tuple, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from site_crawler.crawler.frontier import FullFrontierPolicy
from site_crawler.crawler.urls import DEFAULT_MEDIA_EXTENSIONS

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 6.3;; en-US) AppleWebKit/602.45 (KHTML, like Gecko) "
    "Chrome/52.0.3750.323 Safari/536.7 Edge/10.62018"
)


class CrawlerConfig(BaseModel):
    """Settings for one crawl session."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    workers: int = Field(50, ge=1, description="Number of concurrent workers.")
    frontier_capacity: int = Field(50000, ge=1, description="Maximum URLs waiting in the frontier.")
    timeout: float = Field(10.0, gt=0, description="Per-request timeout (seconds).")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="User-Agent header.")
    media_extensions: Tuple[str, ...] = Field(
        DEFAULT_MEDIA_EXTENSIONS, description="Path extensions that are never crawled."
    )
    block_static_assets: bool = Field(True, description="Also skip .css and .js URLs.")
    full_frontier_policy: FullFrontierPolicy = Field(
        FullFrontierPolicy.REVERT, description="Admission behaviour when the frontier is full."
    )
    abort_inflight_fetches: bool = Field(
        True, description="Cancellation also aborts requests that are already running."
    )

    @field_validator("media_extensions", mode="before")
    def _normalize_extensions(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = [v]
        if isinstance(v, (list, tuple, set)):
            out = []
            for ext in v:
                ext = str(ext).strip().lower()
                if not ext:
                    continue
                out.append(ext if ext.startswith(".") else f".{ext}")
            return tuple(out)
        return v

    @model_validator(mode="after")
    def _check_block_policy(self) -> "CrawlerConfig":
        # A worker waiting on a full frontier is not draining it; block needs
        # at least one more worker than the number allowed to wait.
        if self.full_frontier_policy is FullFrontierPolicy.BLOCK and self.workers < 2:
            raise ValueError("full_frontier_policy 'block' requires workers >= 2")
        return self


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> CrawlerConfig:
    """
    Read YAML or JSON and return a validated CrawlerConfig.

    With *path* None, ``configs/default.yaml`` is used when present and the
    built-in defaults otherwise. A missing explicit file raises FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return CrawlerConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return CrawlerConfig(**data)


__all__ = ["CrawlerConfig", "DEFAULT_USER_AGENT", "ValidationError", "load_config"]
