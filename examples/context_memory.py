#!/usr/bin/env python3
"""
GovernsAI SDK - Context Memory Example

Prechecks a chat message, saves context when the precheck suggests it and
searches earlier context for the same agent.

Usage:
    export GOVERNS_API_KEY=your-api-key
    export GOVERNS_BASE_URL=https://api.governs.ai
    export GOVERNS_ORG_ID=org-123
    python context_memory.py
"""

import asyncio

from governsai import GovernsAIClient

AGENT_ID = "travel-assistant"


async def main():
    async with GovernsAIClient.from_env() as client:
        conversation = await client.context.get_or_create_conversation(
            AGENT_ID, "Travel Assistant", title="Summer trip"
        )
        print(f"Conversation {conversation.id} ({conversation.message_count} messages)")

        message = "I always prefer aisle seats and vegetarian meals."
        response = await client.precheck_client.check_chat_message(
            [{"role": "user", "content": message}]
        )
        print(f"Precheck decision: {response.decision.value}")

        context_id = await client.context.maybe_save_from_precheck(
            response,
            AGENT_ID,
            fallback_content=message,
            agent_name="Travel Assistant",
            conversation_id=conversation.id,
        )
        print(f"Saved context: {context_id or 'nothing to save'}")

        for hit in await client.search_context("seat preference", agent_id=AGENT_ID, limit=5):
            print(f"  {hit.similarity:.2f}  {hit.content}")


if __name__ == "__main__":
    asyncio.run(main())
