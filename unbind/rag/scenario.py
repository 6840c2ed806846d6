from __future__ import annotations
from typing import Any, List, Sequence
from unbind.llm.gemini import ChatMessage
from unbind.llm.prompts import load_prompt
from unbind.utils.exception import FailurePolicy, SimulationError
from unbind.utils.logger import logger

FAILURE_POLICY = FailurePolicy.STRICT

EMPTY_SCENARIO_MESSAGE = "Please enter a scenario to simulate."
NO_CONTEXT_MESSAGE = (
    "Could not find any information in the document relevant to your scenario. "
    "Please try rephrasing your question or check if the topic is covered in the contract."
)
CONTEXT_SEPARATOR = "\n\n---\n\n"
SCENARIO_TEMPERATURE = 0.2


def build_scenario_messages(context_chunks: Sequence[str], scenario: str) -> List[ChatMessage]:
    context = CONTEXT_SEPARATOR.join(context_chunks)
    return [
        {"role": "system", "content": load_prompt("scenario")},
        {"role": "user", "content": f"Scenario: {scenario}\n\nContract Excerpts:\n{context}"},
    ]


async def answer_scenario(llm: Any, context_chunks: Sequence[str], scenario: str) -> str:
    if not scenario.strip():
        return EMPTY_SCENARIO_MESSAGE
    try:
        output = await llm.complete(build_scenario_messages(context_chunks, scenario), temperature=SCENARIO_TEMPERATURE)
    except Exception as e:
        logger.exception("Scenario simulation failed")
        raise SimulationError() from e
    return (output or "").strip()
