from __future__ import annotations
from typing import Any, List, Optional
from unbind.llm.gemini import ChatMessage
from unbind.llm.parsing import try_parse_json_object
from unbind.llm.prompts import load_prompt
from unbind.utils.exception import FailurePolicy
from unbind.utils.logger import logger
from unbind.utils.types import ClauseAnalysis

FAILURE_POLICY = FailurePolicy.TOLERANT


def build_clause_messages(chunk: str, role: str) -> List[ChatMessage]:
    role_instruction = f"The user's role is: {role}. Analyze all clauses from their perspective."
    return [
        {"role": "system", "content": load_prompt("clauses")},
        {"role": "user", "content": f"{role_instruction}\n\nTEXT:\n{chunk}\n\nReturn only valid JSON."},
    ]


def parse_clauses(raw: Optional[str]) -> List[ClauseAnalysis]:
    """Parse a ``{"clauses": [...]}`` reply; malformed records are dropped, bad JSON yields []."""
    parsed = try_parse_json_object(raw)
    if parsed is None:
        return []
    records = parsed.get("clauses")
    if not isinstance(records, list):
        logger.warning("Clause reply has no 'clauses' array")
        return []
    clauses: List[ClauseAnalysis] = []
    for rec in records:
        clause = ClauseAnalysis.from_dict(rec)
        if clause is not None:
            clauses.append(clause)
    return clauses


async def extract_clauses(llm: Any, chunk: str, role: str) -> List[ClauseAnalysis]:
    """Extract risk-classified clauses from one chunk. Never raises: failures yield []."""
    if not chunk.strip():
        return []
    try:
        raw = await llm.complete(build_clause_messages(chunk, role), json_output=True)
    except Exception as e:
        logger.warning("Clause extraction failed for chunk (%s chars): %r", len(chunk), e)
        return []
    clauses = parse_clauses(raw)
    logger.debug("Extracted %s clause(s) from chunk", len(clauses))
    return clauses
