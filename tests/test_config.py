from __future__ import annotations

import json

import pytest

import config
import language
import paths


def test_reads_bundled_defaults(tmp_config):
    cfg = config.ConfigLoader()
    assert cfg.path == tmp_config
    assert cfg['batch_size'] == 100
    assert cfg.get(('map', 'level_of_detail')) == 15
    assert cfg.get(('map', 'missing'), 'fallback') == 'fallback'
    assert cfg.get('nope') is None
    assert 'buffer_size' in cfg


def test_is_a_singleton(tmp_config):
    assert config.ConfigLoader() is config.ConfigLoader()


def test_set_writes_back(tmp_config):
    cfg = config.ConfigLoader()
    cfg.set('buffer_size', 0.75)
    cfg.set(('map', 'level_of_detail'), 12)

    on_disk = json.loads(tmp_config.read_text(encoding="utf-8"))
    assert on_disk['buffer_size'] == 0.75
    assert on_disk['map']['level_of_detail'] == 12
    assert cfg['buffer_size'] == 0.75


@pytest.mark.parametrize("key", ['not_a_key', ('map', 'not_a_key'), ('nothing', 'here')])
def test_set_rejects_unknown_keys(tmp_config, key):
    with pytest.raises(ValueError):
        config.ConfigLoader().set(key, 1)


def test_missing_override_is_created_from_defaults(tmp_path, monkeypatch):
    target = tmp_path / "nested" / "config.json"
    monkeypatch.setenv(config.CONFIG_ENV_VAR, str(target))
    config.ConfigLoader.reset()
    try:
        cfg = config.ConfigLoader()
        assert target.exists()
        assert cfg['language'] == 'en'
    finally:
        config.ConfigLoader.reset()


def test_language_follows_config(tmp_config):
    assert language.Language()['btn_add_graphics'] == "Add graphics"
    config.ConfigLoader().set('language', 'ru')
    language.Language().reload()
    assert language.Language().lang == 'ru'
    assert language.Language().format('inside_count', count=3).startswith("3")


def test_reset_builds_a_fresh_instance(tmp_config):
    first = config.ConfigLoader()
    config.ConfigLoader.reset()
    second = config.ConfigLoader()
    assert first is not second
    assert isinstance(second, config.ConfigLoader)


def test_frozen_build_copies_defaults_to_user_dir(tmp_path, monkeypatch):
    bundle = tmp_path / "bundle"
    bundle.mkdir()
    (bundle / "config.json").write_text((paths.resource_file("config.json")).read_text(encoding="utf-8"),
                                        encoding="utf-8")
    monkeypatch.delenv(config.CONFIG_ENV_VAR, raising=False)
    monkeypatch.setattr(paths.sys, "frozen", True, raising=False)
    monkeypatch.setattr(paths.sys, "_MEIPASS", str(bundle), raising=False)
    monkeypatch.setattr(paths.sys, "platform", "linux")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    config.ConfigLoader.reset()
    try:
        cfg = config.ConfigLoader()
        assert cfg.path == tmp_path / "xdg" / paths.APP_NAME / "config.json"
        assert cfg.path.exists()
        assert cfg['batch_size'] == 100
    finally:
        config.ConfigLoader.reset()


def test_source_checkout_reads_config_next_to_modules(monkeypatch):
    monkeypatch.delenv(config.CONFIG_ENV_VAR, raising=False)
    assert paths.bundle_dir() is None
    assert paths.config_path() == paths.resource_file("config.json")
