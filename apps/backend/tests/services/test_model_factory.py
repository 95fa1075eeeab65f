"""Tests for the blueprint model factory."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from pydantic_ai import models


# Block any real model requests in tests
models.ALLOW_MODEL_REQUESTS = False


class TestIsAzureProvider:
    @patch("services.ai.model_factory.get_settings")
    def test_returns_true_when_azure_openai(self, mock_settings: MagicMock) -> None:
        mock_settings.return_value.LLM_PROVIDER = "azure_openai"

        from services.ai.model_factory import _is_azure_provider

        assert _is_azure_provider() is True

    @patch("services.ai.model_factory.get_settings")
    def test_returns_false_when_gemini(self, mock_settings: MagicMock) -> None:
        mock_settings.return_value.LLM_PROVIDER = "gemini"

        from services.ai.model_factory import _is_azure_provider

        assert _is_azure_provider() is False


class TestValidateAzureCredentials:
    """Tests for _validate_azure_credentials function."""

    @patch("services.ai.model_factory.get_settings")
    def test_returns_true_with_valid_credentials(
        self, mock_settings: MagicMock
    ) -> None:
        mock_settings.return_value.AZURE_OPENAI_ENDPOINT = (
            "https://test.openai.azure.com"
        )
        mock_settings.return_value.AZURE_OPENAI_API_KEY = "test-key"
        mock_settings.return_value.AZURE_OPENAI_API_VERSION = "2024-10-21"

        from services.ai.model_factory import _validate_azure_credentials

        assert _validate_azure_credentials() is True

    @pytest.mark.parametrize(
        "missing",
        ["AZURE_OPENAI_ENDPOINT", "AZURE_OPENAI_API_KEY", "AZURE_OPENAI_API_VERSION"],
    )
    @patch("services.ai.model_factory.get_settings")
    def test_returns_false_when_any_setting_missing(
        self,
        mock_settings: MagicMock,
        missing: str,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        mock_settings.return_value.AZURE_OPENAI_ENDPOINT = (
            "https://test.openai.azure.com"
        )
        mock_settings.return_value.AZURE_OPENAI_API_KEY = "test-key"
        mock_settings.return_value.AZURE_OPENAI_API_VERSION = "2024-10-21"
        setattr(mock_settings.return_value, missing, None)

        from services.ai.model_factory import _validate_azure_credentials

        assert _validate_azure_credentials() is False
        assert "credentials missing" in caplog.text.lower()


class TestValidateGeminiCredentials:
    @patch("services.ai.model_factory.get_settings")
    def test_returns_true_with_api_key(self, mock_settings: MagicMock) -> None:
        mock_settings.return_value.GEMINI_API_KEY = "test-gemini-key"

        from services.ai.model_factory import _validate_gemini_credentials

        assert _validate_gemini_credentials() is True

    @patch("services.ai.model_factory.get_settings")
    def test_logs_warning_on_missing_key(
        self, mock_settings: MagicMock, caplog: pytest.LogCaptureFixture
    ) -> None:
        mock_settings.return_value.GEMINI_API_KEY = None

        from services.ai.model_factory import _validate_gemini_credentials

        assert _validate_gemini_credentials() is False
        assert "not configured" in caplog.text.lower()


class TestNormalizeAzureEndpoint:
    def test_strips_trailing_slashes(self) -> None:
        from services.ai.model_factory import _normalize_azure_endpoint

        assert (
            _normalize_azure_endpoint("https://x.openai.azure.com//")
            == "https://x.openai.azure.com"
        )


class TestGetChatModel:
    """Tests for get_chat_model function."""

    @patch("services.ai.model_factory._validate_azure_credentials")
    @patch("services.ai.model_factory._is_azure_provider")
    @patch("services.ai.model_factory.get_settings")
    def test_returns_azure_model_when_configured(
        self,
        mock_settings: MagicMock,
        mock_is_azure: MagicMock,
        mock_validate: MagicMock,
    ) -> None:
        mock_is_azure.return_value = True
        mock_validate.return_value = True
        mock_settings.return_value.CHAT_MODEL = "gpt-4o"
        mock_settings.return_value.AZURE_OPENAI_ENDPOINT = (
            "https://test.openai.azure.com/"
        )
        mock_settings.return_value.AZURE_OPENAI_API_KEY = "test-key"
        mock_settings.return_value.AZURE_OPENAI_API_VERSION = "2024-10-21"

        from services.ai.model_factory import get_chat_model

        model = get_chat_model()
        # Azure model is OpenAIChatModel type
        assert "OpenAI" in type(model).__name__

    @patch("services.ai.model_factory._validate_azure_credentials")
    @patch("services.ai.model_factory._is_azure_provider")
    @patch("services.ai.model_factory.get_settings")
    def test_returns_gemini_model_when_not_azure(
        self,
        mock_settings: MagicMock,
        mock_is_azure: MagicMock,
        mock_validate: MagicMock,
    ) -> None:
        mock_is_azure.return_value = False
        mock_settings.return_value.CHAT_MODEL = "gemini-2.5-flash"
        mock_settings.return_value.GEMINI_API_KEY = "test-gemini-key"

        from services.ai.model_factory import get_chat_model

        model = get_chat_model()
        assert "Google" in type(model).__name__
        mock_validate.assert_not_called()

    @patch("services.ai.model_factory._validate_azure_credentials")
    @patch("services.ai.model_factory._is_azure_provider")
    @patch("services.ai.model_factory.get_settings")
    def test_falls_back_to_gemini_on_invalid_azure_credentials(
        self,
        mock_settings: MagicMock,
        mock_is_azure: MagicMock,
        mock_validate: MagicMock,
    ) -> None:
        mock_is_azure.return_value = True
        mock_validate.return_value = False
        mock_settings.return_value.CHAT_MODEL = "gemini-2.5-flash"
        mock_settings.return_value.GEMINI_API_KEY = "test-gemini-key"

        from services.ai.model_factory import get_chat_model

        model = get_chat_model()
        assert "Google" in type(model).__name__

    @patch("services.ai.model_factory._is_azure_provider")
    @patch("services.ai.model_factory.get_settings")
    def test_raises_without_any_credentials(
        self, mock_settings: MagicMock, mock_is_azure: MagicMock
    ) -> None:
        mock_is_azure.return_value = False
        mock_settings.return_value.GEMINI_API_KEY = None

        from services.ai.model_factory import get_chat_model

        with pytest.raises(ValueError, match="No valid LLM provider"):
            get_chat_model()
