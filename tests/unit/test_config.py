"""Tests for configuration loading and environment overrides."""
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from modules.operations.config import get_config, load_config, reload_config
from modules.operations.models import Currency


class TestLoadConfig:

    def test_defaults_without_file(self, tmp_path):
        cfg = load_config(str(tmp_path / "missing.yml"))
        assert cfg.urgency.urgent_days == 7
        assert cfg.urgency.warning_days == 30
        assert cfg.timeline.pending_lead_months == 2
        assert cfg.storage.backend == "memory"
        assert cfg.default_land_currency is Currency.DZD
        assert cfg.visibility.pending_visible_roles == ["administrator", "travel_designer"]

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "ops.yml"
        path.write_text(
            "urgency:\n"
            "  warning_days: 21\n"
            "storage:\n"
            "  backend: json\n"
            "default_land_currency: EUR\n"
        )
        cfg = load_config(str(path))
        assert cfg.urgency.warning_days == 21
        assert cfg.urgency.urgent_days == 7
        assert cfg.storage.backend == "json"
        assert cfg.default_land_currency is Currency.EUR

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "ops.yml"
        path.write_text("urgency:\n  urgent_days: 5\n")
        monkeypatch.setenv("OPS__URGENCY__URGENT_DAYS", "3")
        monkeypatch.setenv("OPS__VISIBILITY__PENDING_VISIBLE_ROLES", "administrator,sales_agent")
        cfg = load_config(str(path))
        assert cfg.urgency.urgent_days == 3
        assert cfg.visibility.pending_visible_roles == ["administrator", "sales_agent"]

    def test_config_path_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "other.yml"
        path.write_text("timeline:\n  trailing_months: 2\n")
        monkeypatch.setenv("OPS_CONFIG_PATH", str(path))
        assert load_config().timeline.trailing_months == 2

    def test_invalid_backend(self, tmp_path):
        path = tmp_path / "ops.yml"
        path.write_text("storage:\n  backend: redis\n")
        with pytest.raises(ValidationError):
            load_config(str(path))


class TestSingleton:

    def test_get_config_cached(self):
        assert get_config() is get_config()

    def test_reload(self, tmp_path):
        path = tmp_path / "ops.yml"
        path.write_text("urgency:\n  urgent_days: 2\n")
        assert reload_config(str(path)).urgency.urgent_days == 2
        assert get_config().urgency.urgent_days == 2
