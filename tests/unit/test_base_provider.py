"""Unit tests for the BaseProvider contract shared by every adapter."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest

from msg_ai.providers.base import BaseProvider, normalize_usage
from msg_ai.providers.cache import ModelCache
from msg_ai.providers.errors import (
    APIError,
    AuthenticationError,
    ContextLengthError,
    CredentialMissingError,
    ModelNotFoundError,
    NetworkError,
    ProviderError,
    RateLimitError,
)
from msg_ai.providers.types import (
    ChatMessage,
    ChatOptions,
    ChatResponse,
    MessageRole,
    ModelHandle,
    ModelInfo,
    ProviderConfig,
    Usage,
)

STUB_CONFIG = ProviderConfig(
    name="stub",
    display_name="Stub AI",
    env_key="STUB_API_KEY",
    alternative_env_keys=("STUB_ALT_KEY",),
    base_url="https://stub.example/v1",
    default_model="stub-small",
    models=(
        ModelInfo("stub-small", "Stub Small", 1024),
        ModelInfo("stub-large", "Stub Large", 8192),
    ),
)


# ---------------------------------------------------------------------------
# Concrete subclass for testing BaseProvider's non-abstract behavior
# ---------------------------------------------------------------------------


class StubProvider(BaseProvider):
    """Minimal concrete provider recording what the base class hands it."""

    CONFIG = STUB_CONFIG

    def __init__(self, *args, fragments=("Hel", "lo"), live_models=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.fragments = list(fragments)
        self.live_models = live_models if live_models is not None else ["live-1", "live-2"]
        self.fetch_calls = 0
        self.fetch_error = None
        self.calls = []

    def _create_client(self):
        return MagicMock(name="stub-client")

    def _complete(self, handle, messages, options):
        self.calls.append((handle, messages, options))
        return "".join(self.fragments), {"prompt_tokens": 3, "completion_tokens": 4}

    def _stream(self, handle, messages, options):
        self.calls.append((handle, messages, options))
        for fragment in self.fragments:
            if isinstance(fragment, Exception):
                raise fragment
            yield fragment

    def _fetch_models(self):
        self.fetch_calls += 1
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.live_models)


class _Clock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class FakeStatusError(Exception):
    """Shape shared by the openai/anthropic SDK status errors."""

    def __init__(self, message, status_code, body=None, headers=None):
        super().__init__(message)
        self.status_code = status_code
        self.response = SimpleNamespace(text=body, headers=headers or {})


class APIConnectionError(Exception):
    pass


class APITimeoutError(Exception):
    pass


def _provider(**kwargs):
    kwargs.setdefault("api_key", "stub-key")
    return StubProvider(**kwargs)


# ---------------------------------------------------------------------------
# Abstract method enforcement / configuration
# ---------------------------------------------------------------------------


class TestBaseProviderAbstract:
    def test_cannot_instantiate_abstract_class(self):
        with pytest.raises(TypeError, match="abstract"):
            BaseProvider(config=STUB_CONFIG)

    def test_default_model_must_be_in_catalog(self):
        with pytest.raises(ValueError, match="not in the"):
            ProviderConfig(
                name="bad",
                display_name="Bad",
                env_key="BAD_API_KEY",
                default_model="missing",
                models=(ModelInfo("present", "Present"),),
            )

    def test_base_url_env_key_derived_from_env_key(self):
        assert STUB_CONFIG.base_url_env_key == "STUB_BASE_URL"

    def test_identity_properties(self):
        p = _provider()
        assert p.name == "stub"
        assert p.display_name == "Stub AI"
        assert p.env_key == "STUB_API_KEY"

    def test_repr(self):
        assert repr(_provider()) == "StubProvider(name='stub', available=True)"


# ---------------------------------------------------------------------------
# Credential resolution
# ---------------------------------------------------------------------------


class TestAvailability:
    def test_unavailable_without_credential(self):
        p = StubProvider(environ={})
        assert p.is_available() is False
        assert p.api_key is None

    def test_primary_env_key(self):
        p = StubProvider(environ={"STUB_API_KEY": "primary"})
        assert p.is_available() is True
        assert p.api_key == "primary"

    def test_alternative_env_key(self):
        p = StubProvider(environ={"STUB_ALT_KEY": "alt"})
        assert p.is_available() is True
        assert p.api_key == "alt"

    def test_explicit_api_key_overrides_env(self):
        p = StubProvider(api_key="explicit", environ={"STUB_API_KEY": "env"})
        assert p.api_key == "explicit"

    def test_reads_process_environment_by_default(self, monkeypatch):
        monkeypatch.setenv("STUB_API_KEY", "from-os")
        assert StubProvider().api_key == "from-os"

    def test_credential_not_reread_after_construction(self, monkeypatch):
        p = StubProvider()
        monkeypatch.setenv("STUB_API_KEY", "late")
        assert p.is_available() is False

    def test_base_url_override_from_env(self):
        p = StubProvider(environ={"STUB_BASE_URL": "https://proxy.local"})
        assert p.base_url == "https://proxy.local"

    def test_base_url_default(self):
        assert StubProvider(environ={}).base_url == "https://stub.example/v1"

    def test_assert_available_raises(self):
        p = StubProvider(environ={})
        with pytest.raises(CredentialMissingError) as exc_info:
            p.assert_available()
        assert exc_info.value.env_key == "STUB_API_KEY"
        assert exc_info.value.display_name == "Stub AI"

    def test_assert_available_passes(self):
        _provider().assert_available()


# ---------------------------------------------------------------------------
# Model catalog
# ---------------------------------------------------------------------------


class TestStaticCatalog:
    def test_get_available_models(self):
        assert _provider().get_available_models() == ["stub-small", "stub-large"]

    def test_get_available_models_without_credential(self):
        assert StubProvider(environ={}).get_available_models() == ["stub-small", "stub-large"]

    def test_resolve_model_default(self):
        assert _provider().resolve_model() == "stub-small"

    def test_resolve_model_explicit(self):
        assert _provider().resolve_model("anything") == "anything"

    def test_get_model_info(self):
        assert _provider().get_model_info("stub-large").max_tokens == 8192

    def test_get_model_info_unknown(self):
        with pytest.raises(ModelNotFoundError) as exc_info:
            _provider().get_model_info("nope")
        assert exc_info.value.available == ["stub-small", "stub-large"]


class TestFetchAvailableModels:
    def test_unavailable_returns_static_without_fetch(self):
        p = StubProvider(environ={})
        assert p.fetch_available_models() == ["stub-small", "stub-large"]
        assert p.fetch_calls == 0

    def test_live_fetch(self):
        p = _provider()
        assert p.fetch_available_models() == ["live-1", "live-2"]
        assert p.fetch_calls == 1

    def test_second_call_within_window_is_cached(self):
        p = _provider()
        clock = _Clock()
        p._model_cache = ModelCache(clock=clock)
        p.fetch_available_models()
        clock.now += 1800
        assert p.fetch_available_models() == ["live-1", "live-2"]
        assert p.fetch_calls == 1

    def test_call_after_window_refetches(self):
        p = _provider()
        clock = _Clock()
        p._model_cache = ModelCache(clock=clock)
        p.fetch_available_models()
        clock.now += 3600
        p.live_models = ["live-3"]
        assert p.fetch_available_models() == ["live-3"]
        assert p.fetch_calls == 2

    @pytest.mark.parametrize(
        "error",
        [
            httpx.ConnectError("refused"),
            ValueError("bad json"),
            KeyError("data"),
            AttributeError("'NoneType' object has no attribute 'replace'"),
            APIError("boom", status_code=500),
        ],
    )
    def test_failure_falls_back_to_static(self, error):
        p = _provider()
        p.fetch_error = error
        assert p.fetch_available_models() == p.get_available_models()

    def test_failure_is_logged(self, caplog):
        p = _provider()
        p.fetch_error = httpx.ConnectError("refused")
        with caplog.at_level("WARNING", logger="msg_ai.providers"):
            p.fetch_available_models()
        assert "Stub AI" in caplog.text

    def test_failed_refresh_keeps_existing_cache(self):
        p = _provider()
        clock = _Clock()
        p._model_cache = ModelCache(clock=clock)
        p.fetch_available_models()
        stamped = p._model_cache.fetched_at

        clock.now += 4000
        p.fetch_error = httpx.ConnectError("refused")
        assert p.fetch_available_models() == ["stub-small", "stub-large"]
        assert p._model_cache.fetched_at == stamped
        assert p._model_cache._models == ["live-1", "live-2"]

    def test_empty_live_list_uses_static(self):
        p = _provider(live_models=[])
        assert p.fetch_available_models() == ["stub-small", "stub-large"]

    def test_returned_list_is_a_copy(self):
        p = _provider()
        p.fetch_available_models().append("mutated")
        assert p.fetch_available_models() == ["live-1", "live-2"]


# ---------------------------------------------------------------------------
# Client / model handle
# ---------------------------------------------------------------------------


class TestCreateModel:
    def test_handle_uses_default_model(self):
        handle = _provider().create_model()
        assert isinstance(handle, ModelHandle)
        assert handle.model_id == "stub-small"
        assert handle.provider == "stub"

    def test_handle_uses_explicit_model(self):
        assert _provider().create_model("stub-large").model_id == "stub-large"

    def test_client_created_once(self):
        p = _provider()
        assert p.create_model().client is p.create_model().client

    def test_client_requires_credential(self):
        with pytest.raises(CredentialMissingError):
            StubProvider(environ={}).create_model()


# ---------------------------------------------------------------------------
# chat() / stream_chat()
# ---------------------------------------------------------------------------


class TestChat:
    def test_returns_chat_response(self, user_message):
        response = _provider().chat([user_message])
        assert isinstance(response, ChatResponse)
        assert response.content == "Hello"
        assert response.provider == "stub"
        assert response.model == "stub-small"
        assert response.elapsed is not None and response.elapsed >= 0

    def test_total_tokens_computed(self, user_message):
        response = _provider().chat([user_message])
        assert response.usage == Usage(prompt_tokens=3, completion_tokens=4, total_tokens=7)

    def test_options_default(self, user_message):
        p = _provider()
        p.chat([user_message])
        _, _, options = p.calls[0]
        assert options == ChatOptions()

    def test_explicit_model(self, user_message):
        response = _provider().chat([user_message], ChatOptions(model="stub-large"))
        assert response.model == "stub-large"

    def test_system_prompt_prepended(self, user_message):
        p = _provider()
        p.chat([user_message], ChatOptions(system_prompt="Be brief."))
        _, messages, _ = p.calls[0]
        assert messages[0] == ChatMessage(role=MessageRole.SYSTEM, content="Be brief.")
        assert messages[1] == user_message

    def test_credential_missing_before_client(self, user_message):
        p = StubProvider(environ={})
        p._create_client = MagicMock()
        with pytest.raises(CredentialMissingError):
            p.chat([user_message])
        p._create_client.assert_not_called()
        assert p.calls == []

    def test_vendor_error_translated_and_chained(self, user_message):
        p = _provider()
        original = FakeStatusError("server exploded", 500, body='{"error": {"message": "boom"}}')
        p._complete = MagicMock(side_effect=original)
        with pytest.raises(APIError) as exc_info:
            p.chat([user_message])
        assert exc_info.value.__cause__ is original
        assert exc_info.value.status_code == 500
        assert exc_info.value.api_message == "boom"

    def test_provider_error_not_rewrapped(self, user_message):
        p = _provider()
        err = ProviderError("already translated", provider="stub")
        p._complete = MagicMock(side_effect=err)
        with pytest.raises(ProviderError) as exc_info:
            p.chat([user_message])
        assert exc_info.value is err

    def test_reasoning_effort_ignored_when_unsupported(self, user_message, caplog):
        from msg_ai.providers.types import ReasoningEffort

        p = _provider()
        with caplog.at_level("DEBUG", logger="msg_ai.providers"):
            p.chat([user_message], ChatOptions(reasoning_effort=ReasoningEffort.HIGH))
        assert "does not support reasoning effort" in caplog.text


class TestStreamChat:
    def test_yields_fragments_in_order(self, user_message):
        p = _provider(fragments=["a", "b", "c"])
        assert list(p.stream_chat([user_message])) == ["a", "b", "c"]

    def test_concatenation_matches_chat(self, user_message):
        p = _provider(fragments=["The ", "quick ", "fox"])
        assert "".join(p.stream_chat([user_message])) == p.chat([user_message]).content

    def test_empty_fragments_dropped(self, user_message):
        p = _provider(fragments=["a", "", "b"])
        assert list(p.stream_chat([user_message])) == ["a", "b"]

    def test_credential_checked_eagerly(self, user_message):
        p = StubProvider(environ={})
        with pytest.raises(CredentialMissingError):
            p.stream_chat([user_message])
        assert p.calls == []

    def test_is_lazy(self, user_message):
        p = _provider()
        stream = p.stream_chat([user_message])
        assert p.calls == []
        next(stream)
        assert len(p.calls) == 1

    def test_mid_stream_failure_raises_after_partial_output(self, user_message):
        p = _provider(fragments=["par", "tial", APIConnectionError("connection reset")])
        received = []
        with pytest.raises(NetworkError):
            for fragment in p.stream_chat([user_message]):
                received.append(fragment)
        assert received == ["par", "tial"]

    def test_system_prompt_prepended(self, user_message):
        p = _provider()
        list(p.stream_chat([user_message], ChatOptions(system_prompt="sys")))
        _, messages, _ = p.calls[0]
        assert messages[0].role == MessageRole.SYSTEM


# ---------------------------------------------------------------------------
# normalize_usage()
# ---------------------------------------------------------------------------


class TestNormalizeUsage:
    def test_openai_names(self):
        raw = SimpleNamespace(prompt_tokens=10, completion_tokens=5, total_tokens=16)
        assert normalize_usage(raw) == Usage(10, 5, 16)

    def test_anthropic_names(self):
        raw = SimpleNamespace(input_tokens=7, output_tokens=3)
        assert normalize_usage(raw) == Usage(7, 3, 10)

    def test_gemini_names(self):
        raw = SimpleNamespace(prompt_token_count=4, candidates_token_count=6, total_token_count=10)
        assert normalize_usage(raw) == Usage(4, 6, 10)

    def test_dict_input(self):
        assert normalize_usage({"promptTokens": 1, "completionTokens": 2}) == Usage(1, 2, 3)

    def test_total_computed_when_missing(self):
        raw = SimpleNamespace(prompt_tokens=10, completion_tokens=5, total_tokens=None)
        assert normalize_usage(raw).total_tokens == 15

    def test_missing_completion_counts_as_zero(self):
        raw = SimpleNamespace(prompt_token_count=4, candidates_token_count=None)
        assert normalize_usage(raw) == Usage(4, 0, 4)

    def test_none(self):
        assert normalize_usage(None) is None

    def test_no_counters(self):
        assert normalize_usage(SimpleNamespace(foo=1)) is None

    def test_ignores_non_int_values(self):
        raw = MagicMock()
        raw.prompt_tokens = 2
        raw.completion_tokens = 3
        assert normalize_usage(raw) == Usage(2, 3, 5)


# ---------------------------------------------------------------------------
# _translate_error()
# ---------------------------------------------------------------------------


class TestTranslateError:
    def test_authentication(self):
        err = _provider()._translate_error(FakeStatusError("bad key", 401, body="{}"))
        assert isinstance(err, AuthenticationError)
        assert err.provider == "stub"
        assert err.status_code == 401
        assert err.response_body == "{}"

    def test_forbidden_is_authentication(self):
        assert isinstance(_provider()._translate_error(FakeStatusError("no", 403)), AuthenticationError)

    def test_rate_limit_with_retry_after(self):
        err = _provider()._translate_error(FakeStatusError("slow", 429, headers={"retry-after": "12"}))
        assert isinstance(err, RateLimitError)
        assert err.retry_after == 12.0

    def test_rate_limit_bad_retry_after(self):
        err = _provider()._translate_error(FakeStatusError("slow", 429, headers={"retry-after": "soon"}))
        assert err.retry_after is None

    def test_context_length(self):
        err = _provider()._translate_error(
            FakeStatusError("This model's maximum context length is 8192 tokens", 400)
        )
        assert isinstance(err, ContextLengthError)

    def test_plain_400_is_api_error(self):
        err = _provider()._translate_error(FakeStatusError("bad request", 400))
        assert type(err) is APIError

    def test_vendor_404_is_api_error_not_model_not_found(self):
        err = _provider()._translate_error(FakeStatusError("The model `x` does not exist", 404))
        assert type(err) is APIError
        assert not isinstance(err, ModelNotFoundError)

    def test_connection_error(self):
        original = APIConnectionError("Connection error.")
        err = _provider()._translate_error(original)
        assert isinstance(err, NetworkError)
        assert err.original_error is original

    def test_timeout_error(self):
        assert isinstance(_provider()._translate_error(APITimeoutError("timed out")), NetworkError)

    def test_httpx_transport_error(self):
        assert isinstance(_provider()._translate_error(httpx.ReadTimeout("slow")), NetworkError)

    def test_generic_error(self):
        err = _provider()._translate_error(RuntimeError("weird"))
        assert type(err) is ProviderError
        assert err.provider == "stub"

    def test_integer_code_attribute(self):
        class GenaiStyleError(Exception):
            def __init__(self):
                super().__init__("quota")
                self.code = 429
                self.response_json = {"error": {"message": "Quota exceeded"}}

        err = _provider()._translate_error(GenaiStyleError())
        assert isinstance(err, RateLimitError)
        assert err.api_message == "Quota exceeded"

    def test_string_code_attribute_ignored(self):
        class CodedError(Exception):
            code = "invalid_api_key"

        assert type(_provider()._translate_error(CodedError("x"))) is ProviderError

    def test_provider_error_passthrough(self):
        err = NetworkError("down")
        assert _provider()._translate_error(err) is err
