"""Tests for ConfigManager."""

import yaml
import pytest

from src.core.config_manager import ConfigManager, DEFAULT_CONFIG
from src.core.exceptions import ConfigError


def write_config(path, data):
    with open(path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(data, f)


class TestConfigManagerInit:
    """Test configuration loading and creation."""

    def test_creates_default_config_when_missing(self, tmp_dir):
        path = tmp_dir / "config" / "settings.yaml"
        cm = ConfigManager(path)

        assert path.exists()
        with open(path, 'r') as f:
            saved = yaml.safe_load(f)
        assert saved == DEFAULT_CONFIG
        assert cm.get("tree.strict_attach") is False

    def test_loads_existing_config(self, config_file):
        write_config(config_file, {"tree": {"strict_attach": True}, "app": {"log_level": "DEBUG"}})

        cm = ConfigManager(config_file)

        assert cm.get("tree.strict_attach") is True
        assert cm.get("app.log_level") == "DEBUG"

    def test_missing_keys_fall_back_to_defaults(self, config_file):
        write_config(config_file, {"reddit": {"max_retries": 5}})

        cm = ConfigManager(config_file)

        assert cm.get("reddit.max_retries") == 5
        assert cm.get("reddit.request_interval_sec") == 6
        assert cm.get("security.mask_logs") is True

    def test_uses_defaults_on_invalid_yaml(self, config_file):
        config_file.write_text("{{invalid yaml: [")

        cm = ConfigManager(config_file)

        assert cm.get("reddit.max_retries") == 3

    def test_uses_defaults_when_file_is_not_a_mapping(self, config_file):
        config_file.write_text("- just\n- a list\n")

        cm = ConfigManager(config_file)

        assert cm.get("app.log_level") == "INFO"

    def test_unwritable_location_raises_config_error(self, tmp_dir):
        # A file where the config directory should be
        (tmp_dir / "config").write_text("not a directory")
        with pytest.raises(ConfigError):
            ConfigManager(tmp_dir / "config" / "settings.yaml")

    def test_singleton(self, config_file):
        cm = ConfigManager(config_file)
        assert ConfigManager() is cm

    def test_reset_reloads(self, config_file):
        first = ConfigManager(config_file)
        ConfigManager.reset()
        write_config(config_file, {"reddit": {"mock_mode": True}})

        second = ConfigManager(config_file)

        assert second is not first
        assert second.get("reddit.mock_mode") is True


class TestConfigManagerGet:
    """Test dot-notation lookups."""

    def test_get_nested_key(self, config_file):
        cm = ConfigManager(config_file)
        assert cm.get("reddit.request_interval_sec") == 6
        assert cm.get("security.mask_logs") is True

    def test_get_missing_key_returns_default(self, config_file):
        cm = ConfigManager(config_file)
        assert cm.get("nonexistent.key") is None
        assert cm.get("nonexistent.key", "fallback") == "fallback"
        assert cm.get("reddit.max_retries.deeper", 1) == 1

    def test_unknown_sections_are_kept(self, config_file):
        write_config(config_file, {"extra": {"note": "hi"}})
        assert ConfigManager(config_file).get("extra.note") == "hi"

    def test_defaults_are_not_shared(self, config_file):
        write_config(config_file, {"tree": {"strict_attach": True}})
        ConfigManager(config_file)
        assert DEFAULT_CONFIG["tree"]["strict_attach"] is False


class TestConfigManagerValidation:
    """Test repair of out-of-range or mistyped values on load."""

    @pytest.mark.parametrize("key,section,value,expected", [
        ("reddit.request_interval_sec", "reddit", 1, 3),
        ("reddit.request_interval_sec", "reddit", "10", 10),
        ("reddit.request_interval_sec", "reddit", "soon", 6),
        ("reddit.max_retries", "reddit", -2, 0),
        ("reddit.max_retries", "reddit", True, 3),
        ("app.log_level", "app", "debug", "DEBUG"),
        ("app.log_level", "app", "LOUD", "INFO"),
        ("tree.strict_attach", "tree", "yes", False),
        ("reddit.mock_mode", "reddit", 1, False),
        ("security.mask_logs", "security", None, True),
    ])
    def test_invalid_values_are_repaired(self, config_file, key, section, value, expected):
        name = key.split(".")[1]
        write_config(config_file, {section: {name: value}})

        cm = ConfigManager(config_file)

        assert cm.get(key) == expected

    def test_valid_values_are_kept(self, config_file):
        write_config(config_file, {
            "reddit": {"request_interval_sec": 10, "max_retries": 0},
            "tree": {"strict_attach": True},
        })

        cm = ConfigManager(config_file)

        assert cm.get("reddit.request_interval_sec") == 10
        assert cm.get("reddit.max_retries") == 0
        assert cm.get("tree.strict_attach") is True
