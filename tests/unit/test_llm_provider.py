"""Tests for the Gemini completion provider and the retried model call (no network)."""

import time
from unittest.mock import MagicMock, patch

import pytest
from google.api_core.exceptions import InvalidArgument, ServiceUnavailable
from tenacity import stop_after_attempt, wait_none

from mailmind.llm import gemini
from mailmind.llm.gemini import GeminiInitializationError
from mailmind.llm.prompts import PromptLoader
from mailmind.llm.provider import ChatMessage, CompletionProvider, GeminiCompletionProvider
from mailmind.llm.retry import call_llm
from mailmind.observability.telemetry import get_counter


def _response(text):
    response = MagicMock()
    response.text = text
    return response


class TestGeminiCompletionProvider:
    def test_system_messages_become_instruction(self):
        """System turns are folded into the system instruction."""
        system, contents = GeminiCompletionProvider.to_gemini(
            [
                ChatMessage(role="system", content="Be precise."),
                ChatMessage(role="user", content="Read this CV."),
                ChatMessage(role="assistant", content="{}"),
            ]
        )
        assert system == "Be precise."
        assert [turn["role"] for turn in contents] == ["user", "model"]
        assert contents[0]["parts"] == [{"text": "Read this CV."}]

    def test_complete_delegates_to_call_llm(self):
        provider = GeminiCompletionProvider(counter_prefix="cv.extractor")
        with patch("mailmind.llm.provider.call_llm", return_value='{"ok": true}') as mock_call:
            text = provider.complete([ChatMessage(role="user", content="hi")])
        assert text == '{"ok": true}'
        kwargs = mock_call.call_args.kwargs
        assert kwargs["counter_prefix"] == "cv.extractor"
        assert kwargs["json_output"] is True
        assert kwargs["system_instruction"] is None

    def test_system_only_rejected(self):
        with pytest.raises(ValueError):
            GeminiCompletionProvider().complete([ChatMessage(role="system", content="x")])

    def test_satisfies_protocol(self):
        assert isinstance(GeminiCompletionProvider(), CompletionProvider)

    def test_invalid_role(self):
        with pytest.raises(ValueError):
            ChatMessage(role="tool", content="x")


class TestCallLLM:
    @pytest.fixture
    def model(self):
        model = MagicMock()
        with patch("mailmind.llm.retry.get_gemini_model_with_options", return_value=model):
            yield model

    def test_returns_text(self, model):
        model.generate_content.return_value = _response("hello")
        assert call_llm("prompt", counter_prefix="test") == "hello"
        assert get_counter("test.call") == 1

    def test_json_output_config(self, model):
        model.generate_content.return_value = _response("{}")
        call_llm("prompt", json_output=True)
        config = model.generate_content.call_args.kwargs["generation_config"]
        assert config["response_mime_type"] == "application/json"

    def test_transient_error_retried(self, model):
        """Service unavailability is converted and retried."""
        model.generate_content.side_effect = [ServiceUnavailable("down"), _response("ok")]
        text = call_llm.retry_with(wait=wait_none())("prompt", counter_prefix="test")
        assert text == "ok"
        assert model.generate_content.call_count == 2
        assert get_counter("test.service_unavailable") == 1

    def test_permanent_error_not_retried(self, model):
        """Client errors surface immediately."""
        model.generate_content.side_effect = InvalidArgument("bad request")
        with pytest.raises(InvalidArgument):
            call_llm.retry_with(wait=wait_none())("prompt")
        assert model.generate_content.call_count == 1

    def test_call_timeout(self, model, monkeypatch):
        """A hung call is abandoned after the configured timeout."""
        monkeypatch.setattr("mailmind.llm.retry.LLM_TIMEOUT_SECONDS", 0.05)
        model.generate_content.side_effect = lambda *args, **kwargs: time.sleep(0.5)
        with pytest.raises(TimeoutError):
            call_llm.retry_with(wait=wait_none(), stop=stop_after_attempt(1))("prompt", counter_prefix="test")
        assert get_counter("test.timeout") == 1


class TestGeminiFactory:
    def test_no_credentials(self, monkeypatch):
        """Without a project or API key no backend can be built."""
        monkeypatch.delenv("GOOGLE_CLOUD_PROJECT", raising=False)
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.setattr(gemini, "GOOGLE_CLOUD_PROJECT", "")
        gemini.clear_model_cache()
        try:
            with pytest.raises(GeminiInitializationError):
                gemini.get_gemini_model()
        finally:
            gemini.clear_model_cache()


class TestPrompts:
    def test_extraction_prompt_renders(self):
        prompt = PromptLoader().get_cv_extraction_prompt(
            file_name="cv.pdf", subject="Application", email_body="Hello", cv_text="Jane Doe"
        )
        assert "Attachment: cv.pdf" in prompt
        assert '"first_name"' in prompt

    def test_system_prompt_loads(self):
        assert PromptLoader().get_cv_extraction_system_prompt().strip()

    def test_missing_prompt(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PromptLoader(prompts_dir=tmp_path).load_prompt("nope")
