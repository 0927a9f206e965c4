"""
Example: OpenAI chat completions swarm
Description: Ask the same question 4 times concurrently and log every answer
Provider: OpenAI

This example demonstrates:
- Sharing one aiohttp session across all tasks
- Binding a prompt into a swarm callable
- Reading successes and failures from the returned outcomes
"""

import asyncio

from aiohttp import ClientSession
from dotenv import load_dotenv
from loguru import logger

from callswarm import Ok, run_swarm
from callswarm.providers import OpenAIProvider

load_dotenv()

N_TASKS = 4


async def main() -> None:
    # Reads OPENAI_API_KEY from the environment at call time
    provider = OpenAIProvider(model="gpt-4o-mini")
    task = provider.as_callable(
        system_prompt="You are a helpful assistant.",
        user_task="Who won the world series in 2020?",
    )

    async with ClientSession() as session:
        results = await run_swarm(
            task, N_TASKS, session, "data/openai_responses.jsonl", create_parents=True
        )

    # Results arrive in completion order, not launch order
    for i, result in enumerate(results, start=1):
        if isinstance(result, Ok):
            logger.info(f"Result {i}: Success - {provider.extract_text(result.value)}")
        else:
            logger.error(f"Result {i}: Failed - {result.error}")


if __name__ == "__main__":
    asyncio.run(main())
