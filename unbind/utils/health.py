"""Offline readiness check: imports the third-party stack and ranks two chunks with hashing embeddings.

No HuggingFace model is loaded and Gemini is never called.
"""
from __future__ import annotations
import importlib
from typing import Any, Callable, Dict, List

CORE_IMPORTS = [
    "google.generativeai",
    "langchain_core.embeddings",
    "numpy",
    "pypdf",
    "dotenv",
]


def _component(name: str, check: Callable[[], str]) -> Dict[str, Any]:
    try:
        return {"component": name, "ok": True, "detail": check()}
    except Exception as e:
        return {"component": name, "ok": False, "detail": f"{type(e).__name__}: {e}"}


def _import_check(module: str) -> Callable[[], str]:
    def check() -> str:
        importlib.import_module(module)
        return "import ok"

    return check


def _ranking_check() -> str:
    from unbind.embeddings.embeddings import HashingEmbedding
    from unbind.rag.retriever import rank_chunks

    emb = HashingEmbedding()
    chunks = ["rent is due monthly", "termination requires notice"]
    ranked = rank_chunks(chunks, emb.embed_documents(chunks), emb.embed_query("termination notice"))
    if ranked[0].index != 1:
        raise AssertionError("unexpected ranking")
    return "ranking ok"


def run_health_check() -> Dict[str, Any]:
    components: List[Dict[str, Any]] = [_component(m, _import_check(m)) for m in CORE_IMPORTS]
    components.append(_component("retrieval-mini", _ranking_check))
    return {"ok": all(c["ok"] for c in components), "components": components}
