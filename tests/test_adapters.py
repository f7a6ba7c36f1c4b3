import unittest

from aix.dispatch.adapters import (
    aix_to_anthropic_message_create,
    aix_to_openai_chat_completions,
    aix_to_openai_responses,
)
from aix.errors import ToolNotAvailableError, UnsupportedFeatureError
from aix.types import (
    AixModel,
    ChatGenerateRequest,
    ChatMessage,
    ImagePart,
    TextPart,
    ToolCallPart,
    ToolDef,
    ToolResultPart,
)

TOOL_MODEL = AixModel(id="tool-model", supports_tools=True, supports_vision=True)
PLAIN_MODEL = AixModel(id="plain-model")


def _conversation() -> ChatGenerateRequest:
    return ChatGenerateRequest(
        messages=[
            ChatMessage(role="system", parts="Be brief."),
            ChatMessage(role="user", parts="What is the weather?"),
            ChatMessage(
                role="assistant",
                parts=[TextPart(text="Checking."), ToolCallPart(id="call_1", name="weather", arguments='{"city":"Oslo"}')],
            ),
            ChatMessage(role="tool", parts=[ToolResultPart(id="call_1", content="cold")]),
            ChatMessage(role="user", parts="Thanks, and tomorrow?"),
        ],
        tools=[ToolDef(name="weather", description="Forecast", json_schema={"type": "object"})],
        tool_mode="auto",
        temperature=0.2,
    )


class OpenAIChatCompletionsAdapterTests(unittest.TestCase):
    def test_turn_order_is_preserved(self) -> None:
        body = aix_to_openai_chat_completions("openai", TOOL_MODEL, _conversation(), False, False)
        self.assertEqual([m["role"] for m in body["messages"]], ["system", "user", "assistant", "tool", "user"])
        self.assertEqual(body["messages"][0]["content"], "Be brief.")
        self.assertEqual(body["messages"][2]["tool_calls"][0]["function"]["arguments"], '{"city":"Oslo"}')
        self.assertEqual(body["messages"][3], {"role": "tool", "tool_call_id": "call_1", "content": "cold"})
        self.assertEqual(body["messages"][4]["content"], "Thanks, and tomorrow?")

    def test_tools_and_parameters(self) -> None:
        body = aix_to_openai_chat_completions("openai", TOOL_MODEL, _conversation(), False, True)
        self.assertEqual(body["tools"][0]["function"]["name"], "weather")
        self.assertEqual(body["tool_choice"], "auto")
        self.assertEqual(body["temperature"], 0.2)
        self.assertIs(body["stream"], True)
        self.assertEqual(body["stream_options"], {"include_usage": True})
        self.assertNotIn("response_format", body)

    def test_dialect_differences(self) -> None:
        model = AixModel(id="m", max_completion_tokens=1000)
        req = ChatGenerateRequest(messages=[ChatMessage(role="user", parts="hi")], max_tokens=4000)

        openai = aix_to_openai_chat_completions("openai", model, req, False, True)
        self.assertEqual(openai["max_completion_tokens"], 1000)
        self.assertNotIn("max_tokens", openai)

        lmstudio = aix_to_openai_chat_completions("lmstudio", model, req, False, True)
        self.assertEqual(lmstudio["max_tokens"], 1000)
        self.assertNotIn("stream_options", lmstudio)

        ollama = aix_to_openai_chat_completions("ollama", model, req, True, False)
        self.assertEqual(ollama["response_format"], {"type": "json_object"})
        self.assertIs(ollama["stream"], False)
        self.assertNotIn("stream_options", ollama)

    def test_images_become_content_parts(self) -> None:
        req = ChatGenerateRequest(
            messages=[
                ChatMessage(role="user", parts=[TextPart(text="What is this?"), ImagePart(url="https://x/cat.png", detail="low")])
            ]
        )
        body = aix_to_openai_chat_completions("openai", TOOL_MODEL, req, False, False)
        self.assertEqual(
            body["messages"][0]["content"],
            [
                {"type": "text", "text": "What is this?"},
                {"type": "image_url", "image_url": {"url": "https://x/cat.png", "detail": "low"}},
            ],
        )

    def test_tools_on_model_without_tools_are_rejected(self) -> None:
        with self.assertRaises(ToolNotAvailableError):
            aix_to_openai_chat_completions("openai", PLAIN_MODEL, _conversation(), False, False)

    def test_tools_off_are_not_sent(self) -> None:
        req = _conversation().model_copy(update={"tool_mode": "off"})
        body = aix_to_openai_chat_completions("openai", TOOL_MODEL, req, False, False)
        self.assertNotIn("tools", body)


class OpenAIResponsesAdapterTests(unittest.TestCase):
    def test_turn_order_is_preserved(self) -> None:
        body = aix_to_openai_responses(TOOL_MODEL, _conversation(), False, True)
        shape = [item.get("role") or item["type"] for item in body["input"]]
        self.assertEqual(shape, ["system", "user", "assistant", "function_call", "function_call_output", "user"])
        self.assertEqual(body["input"][2]["content"], [{"type": "output_text", "text": "Checking."}])
        self.assertEqual(body["input"][4], {"type": "function_call_output", "call_id": "call_1", "output": "cold"})
        self.assertIs(body["stream"], True)
        self.assertEqual(body["tools"][0]["name"], "weather")

    def test_json_output(self) -> None:
        req = ChatGenerateRequest(messages=[ChatMessage(role="user", parts="hi")], max_tokens=50)
        body = aix_to_openai_responses(PLAIN_MODEL, req, True, False)
        self.assertEqual(body["text"], {"format": {"type": "json_object"}})
        self.assertEqual(body["max_output_tokens"], 50)
        self.assertIs(body["stream"], False)


class AnthropicAdapterTests(unittest.TestCase):
    def test_system_is_hoisted_and_order_kept(self) -> None:
        body = aix_to_anthropic_message_create(TOOL_MODEL, _conversation(), True)
        self.assertEqual(body["system"], "Be brief.")
        self.assertEqual([m["role"] for m in body["messages"]], ["user", "assistant", "user", "user"])
        self.assertEqual(
            body["messages"][1]["content"],
            [
                {"type": "text", "text": "Checking."},
                {"type": "tool_use", "id": "call_1", "name": "weather", "input": {"city": "Oslo"}},
            ],
        )
        self.assertEqual(
            body["messages"][2]["content"],
            [{"type": "tool_result", "tool_use_id": "call_1", "content": "cold"}],
        )
        self.assertEqual(body["messages"][3]["content"][0]["text"], "Thanks, and tomorrow?")
        self.assertEqual(body["tool_choice"], {"type": "auto"})
        self.assertEqual(body["max_tokens"], 4096)
        self.assertIs(body["stream"], True)

    def test_inline_image_source(self) -> None:
        req = ChatGenerateRequest(
            messages=[ChatMessage(role="user", parts=[ImagePart(url="data:image/png;base64,iVBORw0KGgo=")])]
        )
        body = aix_to_anthropic_message_create(TOOL_MODEL, req, False)
        self.assertEqual(
            body["messages"][0]["content"][0],
            {"type": "image", "source": {"type": "base64", "media_type": "image/png", "data": "iVBORw0KGgo="}},
        )

    def test_image_on_text_only_model_is_rejected(self) -> None:
        req = ChatGenerateRequest(messages=[ChatMessage(role="user", parts=[ImagePart(url="https://x/cat.png")])])
        with self.assertRaises(UnsupportedFeatureError):
            aix_to_anthropic_message_create(PLAIN_MODEL, req, False)

    def test_required_tool_mode(self) -> None:
        req = _conversation().model_copy(update={"tool_mode": "required"})
        body = aix_to_anthropic_message_create(TOOL_MODEL, req, False)
        self.assertEqual(body["tool_choice"], {"type": "any"})


def _single_turn(role: str, *parts) -> ChatGenerateRequest:
    return ChatGenerateRequest(messages=[ChatMessage(role=role, parts=list(parts))])


CALL = ToolCallPart(id="c1", name="calc", arguments="{}")
RESULT = ToolResultPart(id="c1", content="42")
IMAGE = ImagePart(url="https://x/cat.png")


class MixedPartTurnTests(unittest.TestCase):
    def test_chat_completions_rejects_parts_a_turn_cannot_carry(self) -> None:
        cases = {
            "tool call from user": _single_turn("user", TextPart(text="hi"), CALL),
            "text next to result": _single_turn("tool", RESULT, TextPart(text="note")),
            "image from assistant": _single_turn("assistant", TextPart(text="see"), IMAGE),
            "image in system": _single_turn("system", TextPart(text="s"), IMAGE),
        }
        for label, req in cases.items():
            with self.subTest(label):
                with self.assertRaises(UnsupportedFeatureError):
                    aix_to_openai_chat_completions("openai", TOOL_MODEL, req, False, False)

    def test_anthropic_rejects_parts_a_turn_cannot_carry(self) -> None:
        cases = {
            "image in system": _single_turn("system", TextPart(text="s"), IMAGE),
            "image from assistant": _single_turn("assistant", TextPart(text="see"), IMAGE),
            "tool call from user": _single_turn("user", TextPart(text="hi"), CALL),
            "result from assistant": _single_turn("assistant", RESULT),
        }
        for label, req in cases.items():
            with self.subTest(label):
                with self.assertRaises(UnsupportedFeatureError):
                    aix_to_anthropic_message_create(TOOL_MODEL, req, False)

    def test_responses_rejects_parts_a_turn_cannot_carry(self) -> None:
        cases = {
            "tool call from user": _single_turn("user", TextPart(text="hi"), CALL),
            "image from assistant": _single_turn("assistant", TextPart(text="see"), IMAGE),
            "result from assistant": _single_turn("assistant", RESULT),
        }
        for label, req in cases.items():
            with self.subTest(label):
                with self.assertRaises(UnsupportedFeatureError):
                    aix_to_openai_responses(TOOL_MODEL, req, False, False)

    def test_error_names_the_part_and_turn(self) -> None:
        with self.assertRaises(UnsupportedFeatureError) as ctx:
            aix_to_openai_chat_completions("openai", TOOL_MODEL, _single_turn("user", CALL), False, False)
        self.assertIn("tool_call part in a user turn", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
