from __future__ import annotations
import json
from typing import Any, Dict
from unbind.utils.types import AnalysisResponse


def build_analysis_json(analysis: AnalysisResponse, meta: Dict[str, Any]) -> str:
    """Return a structured JSON snapshot of an analysis.

    meta can include build/version timestamps, model info, source file name, etc.
    """
    payload = {"meta": meta}
    payload.update(analysis.to_dict())
    return json.dumps(payload, ensure_ascii=False, indent=2)
