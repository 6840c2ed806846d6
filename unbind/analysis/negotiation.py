from __future__ import annotations
import re
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Tuple
from unbind.llm.prompts import load_prompt
from unbind.utils.exception import FailurePolicy
from unbind.utils.logger import logger
from unbind.utils.types import ClauseAnalysis, RiskLevel

FAILURE_POLICY = FailurePolicy.TOLERANT
REPHRASE_TEMPERATURE = 0.3


class ResolutionChoice(str, Enum):
    AI = "ai"
    USER = "user"
    ORIGINAL = "original"


def risky_clauses(clauses: Sequence[ClauseAnalysis]) -> List[Tuple[int, ClauseAnalysis]]:
    """Clauses worth negotiating, paired with their index in the report."""
    return [(i, c) for i, c in enumerate(clauses) if c.risk_level != RiskLevel.NEGLIGIBLE]


def is_fair_as_is(clause: ClauseAnalysis) -> bool:
    return "fair as is" in clause.negotiation_suggestion.lower()


def final_clause_text(clause: ClauseAnalysis, choice: ResolutionChoice, user_text: Optional[str] = None) -> str:
    if choice == ResolutionChoice.AI:
        return clause.suggested_rewrite or clause.clause_text
    if choice == ResolutionChoice.USER:
        return user_text or clause.clause_text
    return clause.clause_text


async def rephrase_user_text(llm: Any, user_text: str, original_text: str) -> str:
    """Blend a user's rewrite into the document's style; on any failure the user's text is kept."""
    messages = [
        {"role": "system", "content": load_prompt("rephrase")},
        {
            "role": "user",
            "content": (
                f'Original clause: "{original_text}"\n\nUser\'s custom rewrite: "{user_text}"\n\n'
                "Rephrase the user's text to blend better with the document style while keeping their meaning."
            ),
        },
    ]
    try:
        out = await llm.complete(messages, temperature=REPHRASE_TEMPERATURE)
    except Exception as e:
        logger.warning("Rephrasing failed, keeping user text: %r", e)
        return user_text
    return (out or "").strip() or user_text


def normalize_spaces(text: str) -> str:
    return " ".join(text.split())


def _replace_first(document_text: str, original: str, rewrite: str) -> Optional[str]:
    """Swap the first occurrence of ``original``, matching any run of whitespace between its words."""
    pattern = r"\s+".join(re.escape(word) for word in original.split(" "))
    match = re.search(pattern, document_text)
    if match is None:
        return None
    return document_text[: match.start()] + rewrite + document_text[match.end():]


async def apply_resolutions(
    llm: Any,
    document_text: str,
    clauses: Sequence[ClauseAnalysis],
    resolutions: Mapping[int, Tuple[ResolutionChoice, Optional[str]]],
) -> str:
    """Rewrite the document with each resolved clause's chosen text.

    ``resolutions`` maps a clause index to ``(choice, user_text)``; clauses without an
    entry are left as they are. User rewrites are rephrased first. Only the first
    occurrence of each clause is replaced.
    """
    updated = document_text
    for index in sorted(resolutions):
        if not 0 <= index < len(clauses):
            logger.warning("Resolution for unknown clause index %s ignored", index)
            continue
        clause = clauses[index]
        choice, user_text = resolutions[index]
        if choice == ResolutionChoice.USER and user_text:
            rewrite = await rephrase_user_text(llm, user_text, clause.clause_text)
        else:
            rewrite = final_clause_text(clause, choice, user_text)
        original = normalize_spaces(clause.clause_text)
        rewrite = normalize_spaces(rewrite)
        if not original or original == rewrite:
            continue
        replaced = _replace_first(updated, original, rewrite)
        if replaced is None:
            logger.info("Clause %s not found verbatim in document; left unchanged", index)
            continue
        updated = replaced
    return updated
