# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from site_crawler.config import DEFAULT_USER_AGENT, CrawlerConfig, load_config
from site_crawler.crawler.frontier import FullFrontierPolicy


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        ("workers: 8\nfrontier_capacity: 10", ".yaml", None),
        (json.dumps({"workers": 8, "frontier_capacity": 10}), ".json", None),
        ("workers: 0", ".yml", ValidationError),
        ("unknown_key: 1", ".yaml", ValidationError),
        ("::invalid yaml", ".yaml", TypeError),
        ("workers: [1\n", ".yaml", ValueError),
        ("[1, 2]", ".json", TypeError),
        ("{not json", ".json", ValueError),
        ("workers = 8", ".toml", ValueError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, CrawlerConfig)
        assert cfg.workers == 8
        assert cfg.frontier_capacity == 10


def test_defaults():
    cfg = CrawlerConfig()
    assert cfg.workers == 50
    assert cfg.frontier_capacity == 50000
    assert cfg.timeout == 10.0
    assert cfg.user_agent == DEFAULT_USER_AGENT
    assert cfg.full_frontier_policy is FullFrontierPolicy.REVERT
    assert cfg.block_static_assets
    assert cfg.abort_inflight_fetches
    assert ".png" in cfg.media_extensions


def test_media_extensions_are_normalized():
    cfg = CrawlerConfig(media_extensions=["PNG", ".Mp4", " ", "tar"])
    assert cfg.media_extensions == (".png", ".mp4", ".tar")


def test_policy_from_string():
    cfg = CrawlerConfig(full_frontier_policy="block")
    assert cfg.full_frontier_policy is FullFrontierPolicy.BLOCK
    with pytest.raises(ValidationError):
        CrawlerConfig(full_frontier_policy="drop")


def test_config_is_frozen():
    cfg = CrawlerConfig()
    with pytest.raises(ValidationError):
        cfg.workers = 3


def test_load_config_default_missing_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert load_config(None) == CrawlerConfig()


def test_load_config_default_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "default.yaml").write_text("workers: 3\n", encoding="utf-8")
    assert load_config(None).workers == 3


def test_load_config_explicit_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_block_policy_needs_a_consuming_worker():
    with pytest.raises(ValidationError, match="requires workers >= 2"):
        CrawlerConfig(workers=1, frontier_capacity=1, full_frontier_policy="block")
    # revert never waits, so one worker is fine
    assert CrawlerConfig(workers=1, frontier_capacity=1).workers == 1
    assert CrawlerConfig(workers=2, frontier_capacity=1, full_frontier_policy="block").workers == 2


def test_block_policy_rejected_in_config_file(tmp_path):
    cfg_path = write_file(tmp_path, "workers: 1\nfull_frontier_policy: block\n", ".yaml")
    with pytest.raises(ValidationError):
        load_config(cfg_path)
