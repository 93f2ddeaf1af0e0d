"""Tests for chronos.config — Settings parsing."""

import pytest
from pydantic import ValidationError

from chronos.config import Settings, settings


class TestSettings:
    def test_loaded_from_env(self):
        assert settings.TELEGRAM_BOT_TOKEN == "fake-token-for-tests"
        assert settings.ALLOWED_USER_IDS == [12345]

    def test_defaults(self):
        s = Settings(TELEGRAM_BOT_TOKEN="t")
        assert s.STORAGE_KEY == "chronos_v2_data"
        assert s.SCHEMA_VERSION == "2.1.0"
        assert s.USER_NAME == "User"
        assert s.TIMEZONE == "UTC"
        assert s.advice_enabled is False

    def test_parse_user_ids(self):
        s = Settings(TELEGRAM_BOT_TOKEN="t", ALLOWED_USER_IDS=" 1, 2,,3 ")
        assert s.ALLOWED_USER_IDS == [1, 2, 3]

    def test_empty_user_ids(self):
        assert Settings(TELEGRAM_BOT_TOKEN="t", ALLOWED_USER_IDS="").ALLOWED_USER_IDS == []

    def test_numeric_fields_from_strings(self):
        s = Settings(TELEGRAM_BOT_TOKEN="t", ADVICE_MAX_TOKENS="512", ADVICE_TEMPERATURE="0.3")
        assert s.ADVICE_MAX_TOKENS == 512
        assert s.ADVICE_TEMPERATURE == 0.3

    def test_placeholder_key_disables_advice(self):
        assert Settings(TELEGRAM_BOT_TOKEN="t", LLM_API_KEY="your-key").advice_enabled is False
        assert Settings(TELEGRAM_BOT_TOKEN="t", LLM_API_KEY="real").advice_enabled is True

    def test_named_timezone_accepted(self):
        assert Settings(TELEGRAM_BOT_TOKEN="t", TIMEZONE="Asia/Tokyo").TIMEZONE == "Asia/Tokyo"

    def test_unknown_timezone_rejected(self):
        with pytest.raises(ValidationError, match="Unknown TIMEZONE"):
            Settings(TELEGRAM_BOT_TOKEN="t", TIMEZONE="Mars/Olympus_Mons")
