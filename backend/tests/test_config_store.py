"""Config store precedence: overrides > file > env > defaults."""
from plantcare.config_store import ConfigStore, read_config_file
from plantcare.settings import Settings


def test_missing_file_gives_empty_mapping(tmp_path):
    assert read_config_file(tmp_path / "absent.yaml") == {}


def test_invalid_yaml_gives_empty_mapping(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("app_name: [unclosed")
    assert read_config_file(path) == {}


def test_file_wins_over_env(tmp_path, monkeypatch):
    monkeypatch.setenv("DAILY_DIGEST_HOUR", "7")
    monkeypatch.setenv("SCHEDULE_TIMEZONE", "Europe/Paris")
    path = tmp_path / "config.yaml"
    path.write_text("daily_digest_hour: 8\n")

    store = ConfigStore(Settings, str(path))
    store.load_initial()
    settings = store.get_settings()
    assert settings.daily_digest_hour == 8
    assert settings.schedule_timezone == "Europe/Paris"


def test_json_file_supported(tmp_path):
    path = tmp_path / "config.json"
    path.write_text('{"upcoming_window_days": 3}')
    store = ConfigStore(Settings, str(path))
    assert store.get_settings().upcoming_window_days == 3


def test_overrides_win_and_invalid_update_is_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("daily_digest_hour: 8\n")
    store = ConfigStore(Settings, str(path))
    store.load_initial()

    store.update({"daily_digest_hour": 21})
    assert store.get_settings().daily_digest_hour == 21

    store.update({"daily_digest_hour": 99})
    assert store.get_settings().daily_digest_hour == 21

    store.clear_overrides()
    assert store.get_settings().daily_digest_hour == 8


def test_reload_picks_up_file_changes(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("history_default_days: 10\n")
    store = ConfigStore(Settings, str(path))
    store.load_initial()
    path.write_text("history_default_days: 14\n")
    store.reload_from_file()
    assert store.get_settings().history_default_days == 14


def test_push_enabled_needs_both_keys():
    assert not Settings(vapid_public_key="pub").push_enabled
    assert Settings(vapid_public_key="pub", vapid_private_key="priv").push_enabled
