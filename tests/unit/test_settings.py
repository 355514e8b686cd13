from pathlib import Path

import pytest
from pydantic import ValidationError

from dronelog.config.settings import Settings


class TestSettingsDefaults:
    def test_default_app_env(self) -> None:
        assert Settings().app_env == "dev"

    def test_default_db_port(self) -> None:
        assert Settings().db_port == 5432

    def test_default_max_event_attempts(self) -> None:
        assert Settings().max_event_attempts == 3

    def test_default_watched_prefix(self) -> None:
        assert Settings().watched_prefix == "logs/"

    def test_default_provenance_table(self) -> None:
        assert Settings().provenance_table == "file_hashes"

    def test_default_ledger_mode_is_mock(self) -> None:
        s = Settings()
        assert s.ledger_mode == "mock"
        assert s.validator_private_key == ""
        assert s.ledger_rpc_url == ""


class TestSettingsFromEnv:
    def test_loads_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        assert Settings().log_level == "DEBUG"

    def test_loads_storage_root(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STORAGE_ROOT", "/srv/buckets")
        assert Settings().storage_root == Path("/srv/buckets")

    def test_loads_watched_bucket(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WATCHED_BUCKET", "drone-logs")
        assert Settings().watched_bucket == "drone-logs"

    def test_loads_ledger_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LEDGER_MODE", "signed")
        monkeypatch.setenv("VALIDATOR_PRIVATE_KEY", "00" * 32)
        s = Settings()
        assert s.ledger_mode == "signed"
        assert s.validator_private_key == "00" * 32


class TestSettingsValidation:
    def test_invalid_db_port_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_PORT", "not_a_number")
        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_max_attempts_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_EVENT_ATTEMPTS", "abc")
        with pytest.raises(ValidationError):
            Settings()

    def test_provenance_table_must_be_identifier(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROVENANCE_TABLE", "file_hashes; DROP TABLE tasks")
        with pytest.raises(ValidationError, match="plain identifier"):
            Settings()
