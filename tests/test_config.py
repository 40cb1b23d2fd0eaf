import pytest

from yapmesh.config import (
    DEFAULT_SETTINGS,
    YAPMESH_SETTINGS,
    RefineSettings,
    load_settings,
    settings_from_mapping,
)
from yapmesh.errors import ConfigurationError


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    monkeypatch.delenv(YAPMESH_SETTINGS, raising=False)
    monkeypatch.setenv('HOME', str(tmp_path))


def test_defaults():
    s = RefineSettings()
    assert s.flatness_threshold == 1.03
    assert s.pin_boundary is True
    assert s.max_bezier_passes >= 1
    assert load_settings() == DEFAULT_SETTINGS


def test_mapping_overrides_subset():
    s = settings_from_mapping({'flatness_threshold': 1.01, 'max_level': 4})
    assert s.flatness_threshold == 1.01
    assert s.max_level == 4
    assert s.pin_boundary == DEFAULT_SETTINGS.pin_boundary


def test_with_overrides():
    s = DEFAULT_SETTINGS.with_overrides(pin_boundary=False)
    assert s.pin_boundary is False
    assert DEFAULT_SETTINGS.pin_boundary is True


def test_unknown_key_rejected():
    with pytest.raises(ConfigurationError, match='flatnes'):
        settings_from_mapping({'flatnes_threshold': 1.1})


@pytest.mark.parametrize('data', [
    {'flatness_threshold': 1.0},
    {'max_bezier_passes': 0},
    {'max_level': -1},
    {'max_level': 2.5},
    {'pin_boundary': 'yes'},
    {'degenerate_tol': 'tiny'},
    {'split_floor': -0.1},
    {'split_floor': 1.0},
])
def test_bad_values_rejected(data):
    with pytest.raises(ConfigurationError):
        settings_from_mapping(data)


def test_load_explicit_file(tmp_path):
    path = tmp_path / 'refine.yaml'
    path.write_text('flatness_threshold: 1.05\nmax_bezier_passes: 8\n')
    s = load_settings(path)
    assert s.flatness_threshold == 1.05
    assert s.max_bezier_passes == 8


def test_load_empty_file_gives_defaults(tmp_path):
    path = tmp_path / 'empty.yaml'
    path.write_text('')
    assert load_settings(path) == DEFAULT_SETTINGS


def test_environment_variable(tmp_path, monkeypatch):
    path = tmp_path / 'env.yaml'
    path.write_text('max_level: 3\n')
    monkeypatch.setenv(YAPMESH_SETTINGS, str(path))
    assert load_settings().max_level == 3


def test_environment_variable_missing_file(tmp_path, monkeypatch):
    monkeypatch.setenv(YAPMESH_SETTINGS, str(tmp_path / 'nope.yaml'))
    with pytest.raises(ConfigurationError):
        load_settings()


def test_user_config_file(tmp_path):
    cfg = tmp_path / '.config' / 'yapmesh'
    cfg.mkdir(parents=True)
    (cfg / 'settings.yaml').write_text('pin_boundary: false\n')
    assert load_settings().pin_boundary is False


def test_unparseable_file(tmp_path):
    path = tmp_path / 'bad.yaml'
    path.write_text('flatness_threshold: [1.0\n')
    with pytest.raises(ConfigurationError):
        load_settings(path)


def test_missing_explicit_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_settings(tmp_path / 'missing.yaml')
