from karmabot import constants
from karmabot.constants import _get_env_float, _get_env_int


def test_get_env_int_valid(monkeypatch):
    monkeypatch.setenv("KB_TEST_INT", "42")
    assert _get_env_int("KB_TEST_INT", 7) == 42


def test_get_env_int_invalid_falls_back(monkeypatch, capsys):
    monkeypatch.setenv("KB_TEST_INT", "4.2")
    assert _get_env_int("KB_TEST_INT", 7) == 7
    assert "Invalid integer value for KB_TEST_INT" in capsys.readouterr().out


def test_get_env_int_unset(monkeypatch):
    monkeypatch.delenv("KB_TEST_INT", raising=False)
    assert _get_env_int("KB_TEST_INT", 7) == 7


def test_get_env_float_valid(monkeypatch):
    monkeypatch.setenv("KB_TEST_FLOAT", "0.25")
    assert _get_env_float("KB_TEST_FLOAT", 1.0) == 0.25


def test_get_env_float_invalid_falls_back(monkeypatch):
    monkeypatch.setenv("KB_TEST_FLOAT", "soon")
    assert _get_env_float("KB_TEST_FLOAT", 1.0) == 1.0


def test_reference_timings():
    assert constants.RECONNECT_DELAY == 5.0
    assert constants.KEEPALIVE_INTERVAL == 60.0
    assert constants.PACING_INTERVAL == 0.1
    assert constants.RATE_LIMIT_WINDOW == 1.0
    assert constants.RATE_LIMIT_PERMITS == 1
