"""
Tests for Parameters loading and reload_config().
"""

import pytest
import yaml

from mission_monitor.parameters import DEFAULT_CONFIG_FILE, Parameters


pytestmark = [pytest.mark.unit, pytest.mark.core_app]


@pytest.fixture
def config_file(tmp_path, raw_config):
    raw_config['Logging'] = {'LOG_LEVEL': 'DEBUG', 'SUMMARY_INTERVAL_S': 30.0}
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(raw_config), encoding='utf-8')
    return path


@pytest.fixture(autouse=True)
def restore_parameters():
    """Reload the repository config after each test."""
    yield
    Parameters.load_config(DEFAULT_CONFIG_FILE)


class TestParametersLoad:
    """Tests for load_config()."""

    def test_repository_config_loads(self):
        Parameters.load_config(DEFAULT_CONFIG_FILE)
        config = Parameters.mission_config()
        assert config.default_variant_id == 'lintasan1'
        assert config.tolerance_m == 1.5
        assert set(config.variants) == {'lintasan1', 'lintasan2'}

    def test_grouped_sections_kept_as_dicts(self, config_file):
        Parameters.load_config(str(config_file))
        assert Parameters.Mission['TOLERANCE_M'] == 1.5
        assert Parameters.get_section('Store')['STATUS_ROW_ID'] == 1

    def test_other_sections_flattened(self, config_file):
        Parameters.load_config(str(config_file))
        assert Parameters.LOG_LEVEL == 'DEBUG'
        assert Parameters.SUMMARY_INTERVAL_S == 30.0

    def test_get_section_missing(self):
        assert Parameters.get_section('Nope') == {}

    def test_non_mapping_file_rejected(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n", encoding='utf-8')
        with pytest.raises(ValueError):
            Parameters.load_config(str(path))


class TestParametersReloadConfig:
    """Tests for reload_config()."""

    def test_reload_returns_true(self, config_file):
        assert Parameters.reload_config(str(config_file)) is True
        assert Parameters.raw_config()['Mission']['DEFAULT_VARIANT'] == 'lintasan1'

    def test_reload_missing_file_returns_false(self, tmp_path):
        assert Parameters.reload_config(str(tmp_path / "missing.yaml")) is False

    def test_reload_invalid_yaml_returns_false(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("Mission: [unclosed\n", encoding='utf-8')
        assert Parameters.reload_config(str(path)) is False

    def test_reload_picks_up_changes(self, config_file, raw_config):
        Parameters.load_config(str(config_file))
        raw_config['Mission']['TOLERANCE_M'] = 3.0
        config_file.write_text(yaml.safe_dump(raw_config), encoding='utf-8')

        assert Parameters.reload_config() is True
        assert Parameters.mission_config().tolerance_m == 3.0
