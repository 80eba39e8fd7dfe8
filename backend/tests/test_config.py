"""
Meeting Summarizer — Configuration Tests
=========================================

What we test:
    ✅ Provider configs follow AI_PROVIDER_ORDER, configured or not
    ✅ Unknown / duplicate provider names rejected
    ✅ Log level validation
    ✅ Startup refuses to run without any provider credential
"""

from unittest.mock import patch

import pytest
from pydantic import ValidationError as PydanticValidationError

from meeting_summarizer import main
from meeting_summarizer.config import Settings


def make_settings(**overrides) -> Settings:
    values = {"groq_api_key": "", "openai_api_key": "", "_env_file": None}
    values.update(overrides)
    return Settings(**values)


class TestProviderConfigs:

    def test_default_order_keeps_unconfigured_providers(self):
        configs = make_settings(groq_api_key="gk").provider_configs()

        assert [c.name for c in configs] == ["Groq", "OpenAI"]
        assert configs[0].configured is True
        assert configs[1].configured is False

    def test_custom_order_and_shared_limits(self):
        configs = make_settings(
            ai_provider_order=" OpenAI , groq ",
            openai_base_url="https://proxy.example.test/v1/",
            ai_timeout_ms=12_000,
        ).provider_configs()

        assert [c.name for c in configs] == ["OpenAI", "Groq"]
        assert configs[0].base_url == "https://proxy.example.test/v1"
        assert all(c.timeout_ms == 12_000 for c in configs)

    def test_whitespace_credential_is_not_configured(self):
        configs = make_settings(groq_api_key="   ").provider_configs()
        assert configs[0].configured is False

    @pytest.mark.parametrize("order", ["groq,anthropic", "groq,groq", " , "])
    def test_invalid_order_rejected(self, order):
        with pytest.raises(PydanticValidationError):
            make_settings(ai_provider_order=order)


class TestSettings:

    def test_log_level_normalized(self):
        assert make_settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(PydanticValidationError):
            make_settings(log_level="verbose")

    def test_email_configured_requires_every_field(self):
        partial = make_settings(smtp_host="smtp.example.test", smtp_user="u", smtp_pass="p")
        full = make_settings(
            smtp_host="smtp.example.test", smtp_user="u", smtp_pass="p", email_from="a@b.co"
        )

        assert partial.email_configured is False
        assert full.email_configured is True

    def test_cors_origins_list(self):
        s = make_settings(cors_origins="http://a.test, http://b.test")
        assert s.cors_origins_list == ["http://a.test", "http://b.test"]


class TestStartupValidation:

    def test_no_credentials_is_an_error(self):
        with pytest.raises(ValueError, match="No AI provider is configured"):
            make_settings().validate_required_for_production()

    def test_one_credential_is_enough(self):
        make_settings(openai_api_key="ok").validate_required_for_production()

    @pytest.mark.asyncio
    async def test_lifespan_refuses_to_start(self):
        with patch.object(main, "settings", make_settings()), patch.object(main, "setup_logging"):
            with pytest.raises(ValueError):
                async with main.lifespan(main.app):
                    pass

    @pytest.mark.asyncio
    async def test_lifespan_starts_with_a_provider(self):
        entered = False
        with patch.object(main, "settings", make_settings(groq_api_key="gk")), patch.object(
            main, "setup_logging"
        ):
            async with main.lifespan(main.app):
                entered = True
        assert entered
