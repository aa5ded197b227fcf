#!/usr/bin/env python3
"""
GovernsAI SDK - Basic Usage Example

Prechecks a tool call, reports usage and prints the budget afterwards.

Prerequisites:
    pip install governsai

Usage:
    export GOVERNS_API_KEY=your-api-key
    export GOVERNS_BASE_URL=https://api.governs.ai
    export GOVERNS_ORG_ID=org-123
    python basic_usage.py
"""

import asyncio
import logging

from governsai import Decision, GovernsAIClient, GovernsAIError


async def main():
    logging.basicConfig(level=logging.INFO)

    async with GovernsAIClient.from_env() as client:
        # 1. Check connectivity
        print("1. Testing connection...")
        if not await client.test_connection():
            print("   Platform not reachable, aborting")
            return

        # 2. Precheck a tool call
        print("\n2. Prechecking tool call...")
        args = {"location": "Berlin", "units": "metric"}
        response = await client.precheck_client.check_tool_call("weather_current", args)
        print(f"   Decision: {response.decision.value}")
        if response.reasons:
            print(f"   Reasons: {', '.join(response.reasons)}")

        if client.precheck_client.is_blocked(response.decision):
            print(f"   Blocked: {client.precheck_client.user_friendly_error(response)}")
            return

        if response.decision == Decision.REDACT:
            print(f"   Redacted content: {response.content}")

        # 3. Report usage
        print("\n3. Recording usage...")
        record = client.budget_client.create_usage_record(
            user_id="user-123",
            org_id=client.config.org_id,
            provider="openai",
            model="gpt-4o",
            input_tokens=420,
            output_tokens=180,
            tool="weather_current",
        )
        try:
            await client.record_usage(record)
            print(f"   Recorded ${record.cost:.4f}")
        except GovernsAIError as e:
            print(f"   Usage not recorded: {e}")

        # 4. Budget
        print("\n4. Budget context...")
        budget = await client.get_budget_context()
        print(f"   Spent {budget.current_spend:.2f} of {budget.monthly_limit:.2f}")
        print(f"   Used {budget.percent_used:.1f}%")

        # 5. Health
        health = await client.get_health_status()
        print(f"\nPlatform status: {health['status']}")


if __name__ == "__main__":
    asyncio.run(main())
