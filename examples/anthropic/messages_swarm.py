"""
Example: Anthropic messages swarm
Description: Sample the same prompt several times with temperature for variety
Provider: Anthropic
"""

import asyncio
from collections import Counter

from aiohttp import ClientSession
from dotenv import load_dotenv

from callswarm import Ok, read_log_entries, run_swarm
from callswarm.providers import AnthropicProvider

load_dotenv()

OUTPUT_FILE = "data/anthropic_responses.jsonl"


async def main() -> None:
    provider = AnthropicProvider(model="claude-3-5-sonnet-20240620", max_tokens=64)
    task = provider.as_callable(
        "Answer with a single word.",
        "Name a colour.",
        temperature=1.0,
        top_k=50,
    )

    async with ClientSession() as session:
        results = await run_swarm(task, 8, session, OUTPUT_FILE, create_parents=True)

    answers = Counter(
        provider.extract_text(result.value).strip().lower()
        for result in results
        if isinstance(result, Ok)
    )
    print(f"Answers: {dict(answers)}")

    # The log file identifies which task produced each line
    for entry in read_log_entries(OUTPUT_FILE):
        print(entry["task"], entry["status"])


if __name__ == "__main__":
    asyncio.run(main())
