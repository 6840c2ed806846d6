from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class RiskLevel(str, Enum):
    NEGLIGIBLE = "Negligible"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @classmethod
    def parse(cls, value: Any) -> "RiskLevel":
        """Map a model-supplied label onto the closed enum; unknown labels fall back to Negligible."""
        if isinstance(value, RiskLevel):
            return value
        label = str(value or "").strip().lower()
        for level in cls:
            if level.value.lower() == label:
                return level
        return cls.NEGLIGIBLE


@dataclass(frozen=True)
class Chunk:
    index: int
    start: int
    content: str


@dataclass(frozen=True)
class ClauseAnalysis:
    clause_text: str
    simplified_explanation: str
    risk_level: RiskLevel
    risk_reason: str
    negotiation_suggestion: str
    suggested_rewrite: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["ClauseAnalysis"]:
        """Build from a camelCase model record; returns None when there is no clause text."""
        if not isinstance(data, dict):
            return None
        text = str(data.get("clauseText") or "").strip()
        if not text:
            return None
        rewrite = data.get("suggestedRewrite")
        return cls(
            clause_text=text,
            simplified_explanation=str(data.get("simplifiedExplanation") or ""),
            risk_level=RiskLevel.parse(data.get("riskLevel")),
            risk_reason=str(data.get("riskReason") or ""),
            negotiation_suggestion=str(data.get("negotiationSuggestion") or ""),
            suggested_rewrite=str(rewrite) if rewrite else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "clauseText": self.clause_text,
            "simplifiedExplanation": self.simplified_explanation,
            "riskLevel": self.risk_level.value,
            "riskReason": self.risk_reason,
            "negotiationSuggestion": self.negotiation_suggestion,
        }
        if self.suggested_rewrite:
            out["suggestedRewrite"] = self.suggested_rewrite
        return out


@dataclass(frozen=True)
class KeyTerm:
    term: str
    definition: str


@dataclass(frozen=True)
class KeyDate:
    date: str
    description: str


@dataclass(frozen=True)
class MissingClause:
    clause_name: str
    reason: str


@dataclass(frozen=True)
class SynthesisResult:
    summary: str
    key_terms: Tuple[KeyTerm, ...] = ()
    key_dates: Tuple[KeyDate, ...] = ()
    missing_clauses: Tuple[MissingClause, ...] = ()


@dataclass(frozen=True)
class AnalysisResponse:
    summary: str
    clauses: Tuple[ClauseAnalysis, ...]
    key_terms: Tuple[KeyTerm, ...] = ()
    key_dates: Tuple[KeyDate, ...] = ()
    missing_clauses: Tuple[MissingClause, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary,
            "clauses": [c.to_dict() for c in self.clauses],
            "keyTerms": [{"term": t.term, "definition": t.definition} for t in self.key_terms],
            "keyDates": [{"date": d.date, "description": d.description} for d in self.key_dates],
            "missingClauses": [{"clauseName": m.clause_name, "reason": m.reason} for m in self.missing_clauses],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisResponse":
        clauses = [ClauseAnalysis.from_dict(c) for c in data.get("clauses", [])]
        return cls(
            summary=data.get("summary", ""),
            clauses=tuple(c for c in clauses if c is not None),
            key_terms=tuple(KeyTerm(t.get("term", ""), t.get("definition", "")) for t in data.get("keyTerms", [])),
            key_dates=tuple(KeyDate(d.get("date", ""), d.get("description", "")) for d in data.get("keyDates", [])),
            missing_clauses=tuple(
                MissingClause(m.get("clauseName", ""), m.get("reason", "")) for m in data.get("missingClauses", [])
            ),
        )


@dataclass(frozen=True)
class ScoredChunk:
    index: int
    content: str
    score: float


@dataclass(frozen=True)
class ClauseSpan:
    clause_index: int
    start: int
    end: int
    clause: ClauseAnalysis


@dataclass(frozen=True)
class User:
    id: str
    username: str
    email: str
    picture: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "username": self.username, "email": self.email, "picture": self.picture}


@dataclass
class StoredAnalysis:
    id: str
    user_id: str
    file_name: str
    analysis_date: str
    analysis_result: AnalysisResponse
    document_text: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "fileName": self.file_name,
            "analysisDate": self.analysis_date,
            "analysisResult": self.analysis_result.to_dict(),
            "documentText": self.document_text,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoredAnalysis":
        return cls(
            id=data["id"],
            user_id=data["userId"],
            file_name=data.get("fileName", ""),
            analysis_date=data.get("analysisDate", ""),
            analysis_result=AnalysisResponse.from_dict(data.get("analysisResult", {})),
            document_text=data.get("documentText", ""),
        )
