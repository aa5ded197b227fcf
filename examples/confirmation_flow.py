#!/usr/bin/env python3
"""
GovernsAI SDK - Human Confirmation Example

When a precheck returns ``confirm`` the agent asks a human for approval and
waits for the decision before running the tool.

Usage:
    export GOVERNS_API_KEY=your-api-key
    export GOVERNS_BASE_URL=https://api.governs.ai
    export GOVERNS_ORG_ID=org-123
    python confirmation_flow.py
"""

import asyncio

from governsai import (
    ConfirmationRejectedError,
    GovernsAIClient,
    PollTimeoutError,
    generate_correlation_id,
)


async def main():
    async with GovernsAIClient.from_env() as client:
        tool = "payment_process"
        args = {"amount": 250.0, "currency": "EUR", "recipient": "ACME GmbH"}
        correlation_id = generate_correlation_id()

        response = await client.precheck_client.check_tool_call(
            tool, args, correlation_id=correlation_id
        )
        print(f"Precheck decision: {response.decision.value}")

        if not client.precheck_client.requires_confirmation(response.decision):
            print("No confirmation needed")
            return

        confirmations = client.confirmation_client
        request = confirmations.tool_call_confirmation(
            correlation_id, tool, args, reasons=response.reasons or None
        )
        await confirmations.create_confirmation(request)
        print(f"Approve at: {confirmations.confirmation_url(correlation_id)}")

        try:
            record = await confirmations.wait_for_approval(
                correlation_id,
                interval_ms=2000,
                timeout_ms=120000,
                on_status_change=lambda status: print(f"  status: {status}"),
            )
        except ConfirmationRejectedError as e:
            print(f"Not approved: {e.status}")
            return
        except PollTimeoutError:
            print("Nobody answered in time, cancelling")
            await confirmations.cancel_confirmation(correlation_id)
            return

        print(f"Approved at {record.approved_at}, executing {tool}")
        result = await client.tools_client.execute_tool(tool, args)
        print(f"Result: {result.data if result.success else result.error}")


if __name__ == "__main__":
    asyncio.run(main())
