"""Tests for models/config.py."""

import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from filters import COMMON_FILTERS, dist_filter, git_filter
from models.config import WatcherConfig


class TestDefaults:
    def test_defaults(self):
        config = WatcherConfig()
        assert config.filters is None
        assert config.poll_interval == 0.1
        assert config.batch_size == 50
        assert config.debounce_interval == 0.05
        assert config.file_cache_ttl == 5.0
        assert config.roots == []

    @pytest.mark.parametrize(
        "overrides",
        [
            {"poll_interval": 0},
            {"batch_size": 0},
            {"debounce_interval": -1},
            {"file_cache_ttl": -0.5},
        ],
    )
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(ValueError):
            WatcherConfig(**overrides)


class TestFromEnv:
    def test_empty_env_uses_defaults(self):
        config = WatcherConfig.from_env({})
        assert config.filters == COMMON_FILTERS
        assert config.poll_interval == 0.1
        assert config.roots == []

    def test_milliseconds_become_seconds(self):
        config = WatcherConfig.from_env(
            {
                "POLL_INTERVAL_MS": "250",
                "DEBOUNCE_INTERVAL_MS": "0",
                "FILE_CACHE_TTL_MS": "1500",
                "BATCH_SIZE": "8",
            }
        )
        assert config.poll_interval == 0.25
        assert config.debounce_interval == 0.0
        assert config.file_cache_ttl == 1.5
        assert config.batch_size == 8

    def test_filters_and_roots(self, tmp_path):
        a, b = tmp_path / "a", tmp_path / "b"
        config = WatcherConfig.from_env(
            {"WATCH_FILTERS": "git, dist", "WATCH_ROOTS": f"{a}{os.pathsep}{b}"}
        )
        assert config.filters == [git_filter, dist_filter]
        assert config.roots == [a, b]

    def test_empty_filter_list_disables_filtering(self):
        assert WatcherConfig.from_env({"WATCH_FILTERS": ""}).filters == []

    def test_unknown_filter(self):
        with pytest.raises(ValueError):
            WatcherConfig.from_env({"WATCH_FILTERS": "dist,nope"})

    def test_negative_interval(self):
        with pytest.raises(ValueError):
            WatcherConfig.from_env({"FILE_CACHE_TTL_MS": "-5"})

    def test_non_numeric_interval(self):
        with pytest.raises(ValueError):
            WatcherConfig.from_env({"POLL_INTERVAL_MS": "fast"})
