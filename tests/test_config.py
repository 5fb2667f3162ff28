import json
import os
from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from karmabot.config import (
    AppConfig,
    BotConfig,
    ConfigWatcher,
    build_app_config,
    build_bot_config,
    create_config_watcher,
    get_configuration,
    load_config,
)
from karmabot.config.repository import ConfigRepository
from karmabot.config.watcher import ConfigFileHandler
from karmabot.constants import DEFAULT_BUCKET_KEY, DEFAULT_KARMA_FILE
from karmabot.errors.internal import ConfigError


def write_config(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


class TestBotConfig:
    def test_defaults_and_normalization(self, bot_config):
        bot_config["channels"] = ["  #one ", "", "   ", "#two"]
        bot_config["nickname"] = " karmabot "
        cfg = BotConfig.from_dict(bot_config)
        assert cfg.channels == ["#one", "#two"]
        assert cfg.nickname == "karmabot"
        assert cfg.ssl is False
        assert cfg.bucket_key == DEFAULT_BUCKET_KEY

    def test_empty_channel_list_is_allowed(self, bot_config):
        bot_config["channels"] = []
        assert build_bot_config(bot_config).channels == []

    @pytest.mark.parametrize(
        "field,value",
        [("port", 0), ("port", 70000), ("server", ""), ("nickname", " "), ("channels", "#one")],
    )
    def test_invalid_values_raise_config_error(self, bot_config, field, value):
        bot_config[field] = value
        with pytest.raises(ConfigError):
            build_bot_config(bot_config)

    @pytest.mark.parametrize("field", ["server", "port", "nickname", "channels"])
    def test_missing_required_field(self, bot_config, field):
        del bot_config[field]
        with pytest.raises(ConfigError) as exc:
            build_bot_config(bot_config)
        assert field in str(exc.value)

    def test_existing_model_passes_through(self, bot_config):
        cfg = BotConfig.from_dict(bot_config)
        assert build_bot_config(cfg) is cfg


class TestAppConfig:
    def test_karma_file_default(self, bot_config):
        app = build_app_config({"bot": bot_config})
        assert app.karma_file == DEFAULT_KARMA_FILE
        assert app.to_dict()["bot"]["nickname"] == "karmabot"

    def test_empty_mapping_rejected(self):
        with pytest.raises(ConfigError):
            build_app_config({})

    def test_load_config_from_file(self, tmp_path, bot_config):
        path = write_config(
            tmp_path / "karmabot.conf", {"bot": bot_config, "karma_file": "scores.json"}
        )
        app = load_config(path)
        assert isinstance(app, AppConfig)
        assert app.karma_file == "scores.json"
        assert app.bot.channels == ["#one", "#two"]

    def test_load_config_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(str(tmp_path / "absent.conf"))

    def test_get_configuration_reads_env_path(self, tmp_path, bot_config, monkeypatch):
        path = write_config(tmp_path / "custom.conf", {"bot": bot_config})
        monkeypatch.setenv("KARMABOT_CONF_FILE", path)
        assert get_configuration().bot.server == "irc.example.org"

    def test_get_configuration_exits_on_invalid(self, tmp_path, monkeypatch):
        path = write_config(tmp_path / "bad.conf", {"bot": {"server": "x"}})
        monkeypatch.setenv("KARMABOT_CONF_FILE", path)
        with pytest.raises(SystemExit) as exc:
            get_configuration()
        assert exc.value.code == 1


class TestConfigRepository:
    def test_non_object_root_is_empty(self, tmp_path):
        path = tmp_path / "list.conf"
        path.write_text("[1, 2]", encoding="utf-8")
        assert ConfigRepository(path).load_raw() == {}

    def test_invalid_json_is_empty(self, tmp_path):
        path = tmp_path / "broken.conf"
        path.write_text("{", encoding="utf-8")
        assert ConfigRepository(path).load_raw() == {}

    def test_cached_until_file_changes(self, tmp_path):
        path = tmp_path / "c.conf"
        write_config(path, {"a": 1})
        repo = ConfigRepository(path)
        first = repo.load_raw()
        assert repo.load_raw() is first
        write_config(path, {"a": 1, "b": 22})
        assert repo.load_raw() == {"a": 1, "b": 22}

    def test_rejects_non_path(self):
        with pytest.raises(TypeError):
            ConfigRepository(42)


class TestConfigWatcher:
    def test_valid_change_invokes_callback(self, tmp_path, bot_config):
        path = write_config(tmp_path / "karmabot.conf", {"bot": bot_config})
        callback = Mock()
        ConfigWatcher(path, callback)._on_config_changed()
        callback.assert_called_once()
        assert callback.call_args[0][0].bot.nickname == "karmabot"

    def test_invalid_change_is_ignored(self, tmp_path):
        path = write_config(tmp_path / "karmabot.conf", {"bot": {"port": "nope"}})
        callback = Mock()
        ConfigWatcher(path, callback)._on_config_changed()
        callback.assert_not_called()

    def test_handler_filters_other_files_and_repeats(self, tmp_path, bot_config):
        path = write_config(tmp_path / "karmabot.conf", {"bot": bot_config})
        watcher = Mock()
        handler = ConfigFileHandler(path, watcher)
        handler.on_modified(SimpleNamespace(src_path=str(tmp_path / "other.conf")))
        watcher._on_config_changed.assert_not_called()
        handler.on_modified(SimpleNamespace(src_path=path))
        handler.on_modified(SimpleNamespace(src_path=path))
        watcher._on_config_changed.assert_called_once()

    def test_quick_successive_saves_all_reload(self, tmp_path, bot_config):
        path = write_config(tmp_path / "karmabot.conf", {"bot": bot_config})
        watcher = Mock()
        handler = ConfigFileHandler(path, watcher)
        mtime = os.path.getmtime(path)
        handler.on_modified(SimpleNamespace(src_path=path))
        write_config(tmp_path / "karmabot.conf", {"bot": dict(bot_config, nickname="second")})
        os.utime(path, (mtime + 0.5, mtime + 0.5))
        handler.on_modified(SimpleNamespace(src_path=path))
        assert watcher._on_config_changed.call_count == 2

    def test_moved_event_uses_destination(self, tmp_path, bot_config):
        path = write_config(tmp_path / "karmabot.conf", {"bot": bot_config})
        watcher = Mock()
        handler = ConfigFileHandler(path, watcher)
        handler.on_moved(SimpleNamespace(src_path=path + ".tmp", dest_path=path))
        watcher._on_config_changed.assert_called_once()

    def test_missing_directory_does_not_start(self, tmp_path):
        watcher = ConfigWatcher(os.path.join(str(tmp_path), "nope", "karmabot.conf"), Mock())
        watcher.start()
        assert watcher.running is False

    @pytest.mark.asyncio
    async def test_create_and_stop(self, tmp_path, bot_config):
        path = write_config(tmp_path / "karmabot.conf", {"bot": bot_config})
        watcher = await create_config_watcher(path, Mock())
        try:
            assert watcher.running is True
            watcher.start()
            assert watcher.running is True
        finally:
            watcher.stop()
        assert watcher.running is False
        assert watcher.observer is None
