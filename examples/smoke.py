import asyncio

from aix import AixClient, AixModel, AnthropicAccess, ChatGenerateRequest, ChatMessage, OpenAIAccess, ToolDef
from aix.config import AixSettings
from aix.dispatch import create_chat_generate_dispatch
from aix.errors import AixError


async def main() -> None:
    settings = AixSettings(_env_file=None, openai_api_key="DUMMY", anthropic_api_key="DUMMY")
    client = AixClient(settings=settings)

    req = ChatGenerateRequest(
        messages=[ChatMessage(role="system", parts="Be brief."), ChatMessage(role="user", parts="hi")],
        tools=[ToolDef(name="demo_tool")],
        tool_mode="auto",
    )

    # Show what would be sent, without sending it
    model = AixModel(id="claude-demo", supports_tools=True)
    dispatch = create_chat_generate_dispatch(AnthropicAccess(), model, req, True, settings=settings)
    print("POST", dispatch.request.url, dispatch.demuxer_format, type(dispatch.chat_generate_parse).__name__)

    # Demonstrate capability gating (this model doesn't support tools)
    try:
        client.stream(OpenAIAccess(dialect="openai"), AixModel(id="any"), req)
    except AixError as e:
        print("Expected error:", type(e).__name__, e)
    finally:
        await client.aclose()


if __name__ == "__main__":
    asyncio.run(main())
