import dataclasses
import unittest
from types import SimpleNamespace

from support import make_settings

from aix.access import (
    AnthropicAccess,
    EgregoreAccess,
    OllamaAccess,
    OpenAIAccess,
    anthropic_access,
    fixup_host,
    openai_access,
)
from aix.dispatch import create_chat_generate_dispatch
from aix.dispatch.parsers import (
    AnthropicMessageParser,
    AnthropicMessageParserNS,
    OpenAIChatCompletionsChunkParser,
    OpenAIChatCompletionsParserNS,
    OpenAIResponseParserNS,
    OpenAIResponsesEventParser,
)
from aix.errors import ConfigurationError, UnsupportedDialectError
from aix.types import AixModel, ChatGenerateRequest, ChatMessage

MODEL = AixModel(id="m-1")
RESPONSES_MODEL = AixModel(id="m-r", vnd_oai_responses_api=True)
REQUEST = ChatGenerateRequest(messages=[ChatMessage(role="user", parts="hi")])


class DispatchResolutionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = make_settings()

    def _dispatch(self, access, model=MODEL, streaming=True):
        return create_chat_generate_dispatch(access, model, REQUEST, streaming, settings=self.settings)

    def test_every_dialect_resolves(self) -> None:
        cases = [
            (OpenAIAccess(dialect="openai"), "https://api.openai.com/v1/chat/completions"),
            (OpenAIAccess(dialect="deepseek"), "https://api.deepseek.com/v1/chat/completions"),
            (OpenAIAccess(dialect="lmstudio"), "http://localhost:1234/v1/chat/completions"),
            (OpenAIAccess(dialect="localai"), "http://127.0.0.1:8080/v1/chat/completions"),
            (OpenAIAccess(dialect="openrouter"), "https://openrouter.ai/api/v1/chat/completions"),
            (OllamaAccess(), "http://127.0.0.1:11434/v1/chat/completions"),
            (EgregoreAccess(egregore_host="gpu-box:8000"), "http://gpu-box:8000/v1/chat/completions"),
        ]
        for access, url in cases:
            with self.subTest(dialect=access.dialect):
                dispatch = self._dispatch(access)
                self.assertEqual(dispatch.request.url, url)
                self.assertEqual(dispatch.demuxer_format, "fast-sse")
                self.assertIsInstance(dispatch.chat_generate_parse, OpenAIChatCompletionsChunkParser)
                self.assertIs(dispatch.request.body["stream"], True)

    def test_anthropic(self) -> None:
        streaming = self._dispatch(AnthropicAccess())
        self.assertEqual(streaming.request.url, "https://api.anthropic.com/v1/messages")
        self.assertIsInstance(streaming.chat_generate_parse, AnthropicMessageParser)

        whole = self._dispatch(AnthropicAccess(), streaming=False)
        self.assertIsNone(whole.demuxer_format)
        self.assertIsInstance(whole.chat_generate_parse, AnthropicMessageParserNS)
        self.assertIs(whole.request.body["stream"], False)

    def test_non_streaming_chat_completions(self) -> None:
        dispatch = self._dispatch(OpenAIAccess(dialect="openai"), streaming=False)
        self.assertIsNone(dispatch.demuxer_format)
        self.assertIsInstance(dispatch.chat_generate_parse, OpenAIChatCompletionsParserNS)

    def test_responses_api_switch(self) -> None:
        for dialect in ("openai", "openrouter"):
            with self.subTest(dialect=dialect):
                dispatch = self._dispatch(OpenAIAccess(dialect=dialect), RESPONSES_MODEL)
                self.assertTrue(dispatch.request.url.endswith("/v1/responses"))
                self.assertIn("input", dispatch.request.body)
                self.assertIsInstance(dispatch.chat_generate_parse, OpenAIResponsesEventParser)

        whole = self._dispatch(OpenAIAccess(dialect="openai"), RESPONSES_MODEL, streaming=False)
        self.assertIsInstance(whole.chat_generate_parse, OpenAIResponseParserNS)

    def test_responses_flag_ignored_outside_openai_family(self) -> None:
        dispatch = self._dispatch(OllamaAccess(), RESPONSES_MODEL)
        self.assertTrue(dispatch.request.url.endswith("/v1/chat/completions"))

    def test_local_servers_get_max_tokens(self) -> None:
        capped = AixModel(id="m-1", max_completion_tokens=100)
        for access in (OllamaAccess(), EgregoreAccess(egregore_host="gpu-box:8000")):
            with self.subTest(dialect=access.dialect):
                body = self._dispatch(access, capped).request.body
                self.assertEqual(body["max_tokens"], 100)
                self.assertNotIn("max_completion_tokens", body)

        openai_body = self._dispatch(OpenAIAccess(dialect="openai"), capped).request.body
        self.assertEqual(openai_body["max_completion_tokens"], 100)

    def test_unknown_dialect(self) -> None:
        access = SimpleNamespace(dialect="gemini")
        with self.assertRaises(UnsupportedDialectError) as ctx:
            self._dispatch(access)
        self.assertEqual(ctx.exception.dialect, "gemini")

    def test_missing_key(self) -> None:
        settings = make_settings(openai_api_key="")
        with self.assertRaises(ConfigurationError):
            create_chat_generate_dispatch(OpenAIAccess(dialect="openai"), MODEL, REQUEST, True, settings=settings)

    def test_each_dispatch_gets_fresh_parser(self) -> None:
        first = self._dispatch(AnthropicAccess())
        second = self._dispatch(AnthropicAccess())
        self.assertIsNot(first.chat_generate_parse, second.chat_generate_parse)

    def test_wire_request_is_frozen(self) -> None:
        dispatch = self._dispatch(OllamaAccess())
        with self.assertRaises(dataclasses.FrozenInstanceError):
            dispatch.request.url = "http://elsewhere"


class AccessTests(unittest.TestCase):
    def test_fixup_host(self) -> None:
        self.assertEqual(fixup_host("localhost:1234", "/v1/models"), "http://localhost:1234")
        self.assertEqual(fixup_host("https://proxy.local/v1/", "/v1/chat/completions"), "https://proxy.local")
        self.assertEqual(fixup_host("https://proxy.local/v1", "/api/tags"), "https://proxy.local/v1")

    def test_openai_headers(self) -> None:
        settings = make_settings(openai_api_org="org-1")
        transport = openai_access(OpenAIAccess(dialect="openai", oai_key="sk-own"), "/v1/models", settings)
        self.assertEqual(transport.headers["Authorization"], "Bearer sk-own")
        self.assertEqual(transport.headers["OpenAI-Organization"], "org-1")

    def test_openrouter_headers(self) -> None:
        settings = make_settings(aix_app_url="https://app.example", aix_app_title="demo")
        transport = openai_access(OpenAIAccess(dialect="openrouter"), "/v1/chat/completions", settings)
        self.assertEqual(transport.headers["Authorization"], "Bearer or-test")
        self.assertEqual(transport.headers["HTTP-Referer"], "https://app.example")
        self.assertEqual(transport.headers["X-Title"], "demo")

    def test_local_vendor_without_key(self) -> None:
        transport = openai_access(OpenAIAccess(dialect="lmstudio"), "/v1/models", make_settings())
        self.assertNotIn("Authorization", transport.headers)

    def test_custom_host_without_key(self) -> None:
        settings = make_settings(openai_api_key="")
        transport = openai_access(OpenAIAccess(dialect="openai", oai_host="proxy:9000"), "/v1/models", settings)
        self.assertEqual(transport.url, "http://proxy:9000/v1/models")

    def test_anthropic_headers(self) -> None:
        transport = anthropic_access(AnthropicAccess(), "/v1/messages", make_settings())
        self.assertEqual(transport.headers["x-api-key"], "ak-test")
        self.assertEqual(transport.headers["anthropic-version"], "2023-06-01")

    def test_anthropic_missing_key(self) -> None:
        with self.assertRaises(ConfigurationError):
            anthropic_access(AnthropicAccess(), "/v1/messages", make_settings(anthropic_api_key=""))


if __name__ == "__main__":
    unittest.main()
