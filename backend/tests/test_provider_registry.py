"""
Meeting Summarizer — Provider Registry Tests
=============================================
"""

import pytest

from meeting_summarizer.config import Settings
from meeting_summarizer.services.provider_registry import ProviderRegistry


class TestProviderRegistry:

    def test_build_preserves_configured_order(self, provider_config):
        registry = ProviderRegistry.build(
            [provider_config("OpenAI"), provider_config("Groq")]
        )
        assert [a.name for a in registry.all()] == ["OpenAI", "Groq"]
        assert len(registry) == 2

    def test_unconfigured_provider_stays_registered(self, provider_config):
        registry = ProviderRegistry.build(
            [provider_config("Groq"), provider_config("OpenAI", credential="")]
        )
        assert [a.name for a in registry.all()] == ["Groq", "OpenAI"]
        assert [a.name for a in registry.configured()] == ["Groq"]

    def test_duplicate_names_rejected(self, fake_provider):
        with pytest.raises(ValueError, match="Duplicate"):
            ProviderRegistry([fake_provider("Groq"), fake_provider("Groq")])

    def test_get_by_name(self, fake_provider):
        groq = fake_provider("Groq")
        registry = ProviderRegistry([groq, fake_provider("OpenAI")])

        assert registry.get("Groq") is groq
        assert registry.get("Missing") is None

    def test_last_successful_hint(self, fake_provider):
        registry = ProviderRegistry([fake_provider("Groq"), fake_provider("OpenAI")])
        assert registry.last_successful is None

        registry.record_success(1)
        assert registry.last_successful.name == "OpenAI"

    def test_registry_from_settings_order(self):
        cfg = Settings(
            groq_api_key="g",
            openai_api_key="",
            ai_provider_order="openai,groq",
            _env_file=None,
        )
        registry = ProviderRegistry.build(cfg.provider_configs())

        assert [a.name for a in registry] == ["OpenAI", "Groq"]
        assert [a.name for a in registry.configured()] == ["Groq"]
