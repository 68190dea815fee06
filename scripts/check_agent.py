#!/usr/bin/env python3
"""
Send a two-item test case to the configured agent endpoint.

Checks that GRADIENT_AGENT_ENDPOINT and GRADIENT_ACCESS_KEY (env or .env)
point at a working agent and that its reply contains a JSON object.

Usage:
    uv run python scripts/check_agent.py

Exit code 1 when the endpoint is not configured or nothing usable came back.
"""

import asyncio
import logging
import sys

from crimeboard.agents.prompts import DESK_SERGEANT
from crimeboard.services.llm import AgentConfig, GradientAgentClient
from crimeboard.services.parser import parse_agent_json

TEST_PROMPT = """Analyze the following case and evidence:

CASE TITLE: Test Case
CASE ID: test-123

EVIDENCE ITEMS:
EVID-01: photo - "crime_scene.jpg"
EVID-02: statement - "witness_statement.txt"

Build the evidence board JSON."""


async def check_agent() -> int:
    config = AgentConfig.from_settings()
    key = config.access_key[:8] + "..." if config.access_key else "NOT SET"

    print("=== Agent Check ===")
    print(f"URL: {config.completions_url}")
    print(f"Key: {key}")
    print()

    if not config.is_configured:
        print("Missing GRADIENT_AGENT_ENDPOINT or GRADIENT_ACCESS_KEY")
        return 1

    print("Sending test request...")
    content = await GradientAgentClient(config).call(DESK_SERGEANT, TEST_PROMPT)

    print("Response (first 500 chars):")
    print(content[:500])
    print()

    parsed = parse_agent_json(content)
    if not parsed:
        print("No JSON object in the response (see log output above)")
        return 1

    print(f"Valid JSON response, top-level keys: {', '.join(sorted(parsed))}")
    if "error" in parsed:
        print(f"Agent returned error: {parsed['error']}")
    nodes = parsed.get("evidence_nodes")
    if isinstance(nodes, list):
        connections = parsed.get("connections") or []
        print(f"Nodes: {len(nodes)}")
        print(f"Connections: {len(connections)}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(asyncio.run(check_agent()))
