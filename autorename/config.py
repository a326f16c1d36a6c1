"""Credential and model-name lookup."""

import os
from collections.abc import Mapping
from typing import Protocol

from autorename.models.provider import ProviderKind, ProviderSettings


class CredentialStore(Protocol):
    """Read-only lookup of stored credentials and model names."""

    def load(self, key: str) -> str | None: ...


class EnvironmentCredentialStore:
    """Reads values from environment variables named after the upper-cased key.

    ``openai_api_key`` is read from ``OPENAI_API_KEY``, ``anthropic_model`` from
    ``ANTHROPIC_MODEL`` and so on.
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self.environ = os.environ if environ is None else environ

    def load(self, key: str) -> str | None:
        return self.environ.get(key.upper())


class MappingCredentialStore:
    """Explicit values, optionally layered over a fallback store."""

    def __init__(self, values: Mapping[str, str | None], fallback: CredentialStore | None = None) -> None:
        self.values = dict(values)
        self.fallback = fallback

    def load(self, key: str) -> str | None:
        value = self.values.get(key)
        if value:
            return value
        if self.fallback is not None:
            return self.fallback.load(key)
        return None


def load_api_key(store: CredentialStore, kind: ProviderKind) -> str | None:
    """Return the API key for ``kind``, treating empty values as absent."""
    value = store.load(kind.credential_key)
    if not value or not value.strip():
        return None
    return value.strip()


def resolve_settings(settings: ProviderSettings, store: CredentialStore) -> ProviderSettings:
    """Fill the model from the store when the settings leave it unset."""
    if settings.model:
        return settings
    stored_model = store.load(settings.kind.model_key)
    if stored_model and stored_model.strip():
        return settings.model_copy(update={"model": stored_model.strip()})
    return settings
