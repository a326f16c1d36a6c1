"""Tests for credential lookup and settings resolution."""

import pytest

from autorename.config import EnvironmentCredentialStore, MappingCredentialStore, load_api_key, resolve_settings
from autorename.models.provider import ProviderKind, ProviderSettings


class TestEnvironmentCredentialStore:
    """Tests for EnvironmentCredentialStore."""

    def test_reads_upper_cased_variable(self):
        store = EnvironmentCredentialStore({"OPENAI_API_KEY": "sk-test"})

        assert store.load("openai_api_key") == "sk-test"

    def test_missing_variable(self):
        assert EnvironmentCredentialStore({}).load("anthropic_api_key") is None

    def test_defaults_to_process_environment(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_MODEL", "claude-test")

        assert EnvironmentCredentialStore().load("anthropic_model") == "claude-test"


class TestMappingCredentialStore:
    """Tests for MappingCredentialStore."""

    def test_explicit_value_wins(self):
        fallback = EnvironmentCredentialStore({"OPENAI_API_KEY": "from-env"})
        store = MappingCredentialStore({"openai_api_key": "explicit"}, fallback=fallback)

        assert store.load("openai_api_key") == "explicit"

    @pytest.mark.parametrize("explicit", [None, ""])
    def test_falls_back_when_unset(self, explicit):
        fallback = EnvironmentCredentialStore({"OPENAI_API_KEY": "from-env"})
        store = MappingCredentialStore({"openai_api_key": explicit}, fallback=fallback)

        assert store.load("openai_api_key") == "from-env"

    def test_no_fallback(self):
        assert MappingCredentialStore({}).load("openai_api_key") is None


class TestLoadApiKey:
    """Tests for load_api_key."""

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_absent_or_empty_is_not_configured(self, value):
        store = MappingCredentialStore({"openai_api_key": value})

        assert load_api_key(store, ProviderKind.OPENAI) is None

    def test_returns_stripped_key(self):
        store = MappingCredentialStore({"anthropic_api_key": " sk-ant \n"})

        assert load_api_key(store, ProviderKind.ANTHROPIC) == "sk-ant"


class TestResolveSettings:
    """Tests for resolve_settings."""

    def test_explicit_model_kept(self):
        settings = ProviderSettings(kind=ProviderKind.OPENAI, model="gpt-4o-mini")
        store = MappingCredentialStore({"openai_model": "gpt-4.1"})

        assert resolve_settings(settings, store).model_name == "gpt-4o-mini"

    def test_stored_model_used(self):
        settings = ProviderSettings(kind=ProviderKind.ANTHROPIC)
        store = MappingCredentialStore({"anthropic_model": "claude-haiku"})

        resolved = resolve_settings(settings, store)

        assert resolved.model_name == "claude-haiku"
        assert settings.model is None

    def test_default_model_when_nothing_stored(self):
        resolved = resolve_settings(ProviderSettings(kind=ProviderKind.OPENAI), MappingCredentialStore({}))

        assert resolved.model_name == "gpt-4o"
