from __future__ import annotations
from typing import List, Sequence, Union
from unbind.utils.types import ClauseAnalysis, ClauseSpan

Segment = Union[str, ClauseSpan]


def locate_clauses(document_text: str, clauses: Sequence[ClauseAnalysis]) -> List[ClauseSpan]:
    """Find each clause's first verbatim occurrence; paraphrased clauses are skipped."""
    spans = []
    for i, clause in enumerate(clauses):
        start = document_text.find(clause.clause_text)
        if start == -1:
            continue
        spans.append(ClauseSpan(clause_index=i, start=start, end=start + len(clause.clause_text), clause=clause))
    return sorted(spans, key=lambda s: s.start)


def split_for_highlight(document_text: str, clauses: Sequence[ClauseAnalysis]) -> List[Segment]:
    """Interleave plain text and clause spans in document order for rendering."""
    if not clauses:
        return [document_text]
    segments: List[Segment] = []
    last = 0
    for span in locate_clauses(document_text, clauses):
        if span.start > last:
            segments.append(document_text[last:span.start])
        segments.append(span)
        last = span.end
    if last < len(document_text):
        segments.append(document_text[last:])
    return segments
