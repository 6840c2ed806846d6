from __future__ import annotations
from typing import Any, Dict, List, Sequence
from unbind.llm.gemini import ChatMessage
from unbind.llm.parsing import try_parse_json_object
from unbind.llm.prompts import load_prompt
from unbind.utils.exception import FailurePolicy, SynthesisError
from unbind.utils.logger import logger
from unbind.utils.types import ClauseAnalysis, KeyDate, KeyTerm, MissingClause, SynthesisResult

FAILURE_POLICY = FailurePolicy.STRICT


def format_clause_context(clauses: Sequence[ClauseAnalysis]) -> str:
    return "\n".join(
        f'Clause {i + 1}:\n- Text: "{c.clause_text}"\n- Explanation: "{c.simplified_explanation}"\n- Risk: {c.risk_level.value}\n'
        for i, c in enumerate(clauses)
    )


def build_synthesis_messages(clauses: Sequence[ClauseAnalysis], role: str) -> List[ChatMessage]:
    role_instruction = (
        f"The user's role is: {role}. Generate the summary and extract terms/dates from their perspective."
    )
    return [
        {"role": "system", "content": load_prompt("synthesis")},
        {
            "role": "user",
            "content": f"{role_instruction}\n\nANALYZED CLAUSES:\n{format_clause_context(clauses)}\n\nReturn only valid JSON.",
        },
    ]


def _records(parsed: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    value = parsed.get(key) or []
    if not isinstance(value, list):
        raise SynthesisError(f"Synthesis reply field '{key}' is not a list")
    return [v for v in value if isinstance(v, dict)]


def parse_synthesis(raw: str) -> SynthesisResult:
    parsed = try_parse_json_object(raw)
    if parsed is None:
        raise SynthesisError("Failed to parse synthesis JSON")
    summary = parsed.get("summary")
    if not isinstance(summary, str):
        raise SynthesisError("Synthesis reply has no summary")
    return SynthesisResult(
        summary=summary.strip(),
        key_terms=tuple(KeyTerm(str(t.get("term", "")), str(t.get("definition", ""))) for t in _records(parsed, "keyTerms")),
        key_dates=tuple(KeyDate(str(d.get("date", "")), str(d.get("description", ""))) for d in _records(parsed, "keyDates")),
        missing_clauses=tuple(
            MissingClause(str(m.get("clauseName", "")), str(m.get("reason", "")))
            for m in _records(parsed, "missingClauses")
        ),
    )


async def synthesize_report(llm: Any, clauses: Sequence[ClauseAnalysis], role: str) -> SynthesisResult:
    """Aggregate every extracted clause into one report.

    No fallback report exists, so transport and parse failures raise SynthesisError.
    """
    try:
        raw = await llm.complete(build_synthesis_messages(clauses, role), json_output=True)
    except Exception as e:
        logger.exception("Synthesis call failed")
        raise SynthesisError() from e
    return parse_synthesis(raw)
