#!/usr/bin/env python3
"""
Chat Demo Script

Sends one question (or the first suggestion) to the configured provider and
prints the answer as it streams in. Requires OPENROUTER_API_KEY in the
environment or a .env file.
"""

from __future__ import annotations

import asyncio
import logging
import sys

from bookchat.chat_service import ChatSession
from bookchat.config import Configuration
from bookchat.llm.client import ChatCompletionsClient


class ConsoleSink:
    """Prints fragments as they arrive."""

    def on_fragment(self, fragment: str) -> None:
        print(fragment, end="", flush=True)

    def on_complete(self, text: str) -> None:
        print(f"\n\n✓ {len(text)} characters received")

    def on_error(self, message: str) -> None:
        print(f"\n{message}")


async def main() -> None:
    """Run one streamed send against the configured provider."""
    config = Configuration()
    level = config.get_logging_config().get("level", "INFO")
    logging.basicConfig(
        level=level, format="%(asctime)s - %(levelname)s - %(message)s"
    )

    provider = config.get_provider_config()
    print("📚 Bookstore Chat Demo")
    print("=" * 50)
    print(f"Powered by {provider.provider}, model: {provider.model}\n")

    async with ChatCompletionsClient(provider) as client:
        session = ChatSession.from_configuration(config, client, ConsoleSink())
        question = " ".join(sys.argv[1:]) or session.suggestions[0]

        print(f"assistant: {session.messages[0].content}\n")
        print(f"user: {question}\n")
        print("assistant: ", end="", flush=True)
        await session.send(question)


if __name__ == "__main__":
    asyncio.run(main())
