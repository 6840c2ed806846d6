from __future__ import annotations
import asyncio
from typing import Any, Callable, List, Optional
from langchain_core.embeddings import Embeddings
from unbind.analysis.clauses import extract_clauses
from unbind.embeddings.embeddings import get_embedding_model
from unbind.ingest.chunker import chunk_text
from unbind.llm.gemini import GeminiClient
from unbind.rag.retriever import retrieve_top_k
from unbind.rag.scenario import EMPTY_SCENARIO_MESSAGE, NO_CONTEXT_MESSAGE, answer_scenario
from unbind.summarize.synthesizer import synthesize_report
from unbind.utils.config import AppConfig
from unbind.utils.exception import NoClausesFoundError
from unbind.utils.logger import logger
from unbind.utils.types import AnalysisResponse, ClauseAnalysis

ProgressCallback = Callable[[str], None]


def _noop_progress(message: str) -> None:
    return None


class ContractAnalyzer:
    def __init__(self, config: AppConfig, llm: Any = None, embedder: Optional[Embeddings] = None):
        """Sequences chunking, clause extraction, synthesis and scenario retrieval.

        ``llm`` and ``embedder`` may be injected (tests, alternative providers);
        otherwise the Gemini client and configured embedding model are built on first use.
        """
        self.config = config.validate()
        self._llm = llm
        self._embedder = embedder

    @property
    def llm(self) -> Any:
        if self._llm is None:
            self._llm = GeminiClient(self.config)
        return self._llm

    @property
    def embedder(self) -> Embeddings:
        if self._embedder is None:
            self._embedder = get_embedding_model(self.config)
        return self._embedder

    async def _extract_all(self, chunks: List[str], role: str) -> List[List[ClauseAnalysis]]:
        semaphore = asyncio.Semaphore(self.config.max_concurrency)

        async def run(chunk: str) -> List[ClauseAnalysis]:
            async with semaphore:
                return await extract_clauses(self.llm, chunk, role)

        # gather keeps results in chunk order regardless of completion order
        return await asyncio.gather(*(run(c) for c in chunks))

    async def analyze_contract(self, document_text: str, role: str, on_progress: Optional[ProgressCallback] = None) -> AnalysisResponse:
        progress = on_progress or _noop_progress

        progress("Chunking document...")
        chunks = chunk_text(document_text, self.config.extraction_chunk_size, self.config.extraction_chunk_overlap)

        progress(f"Analyzing {len(chunks)} document section(s)...")
        logger.info("Analyzing %s chunk(s) for role %r", len(chunks), role)
        chunk_results = await self._extract_all(chunks, role)
        all_clauses = [clause for result in chunk_results for clause in result]

        if not all_clauses:
            logger.error("No clauses extracted from %s chunk(s)", len(chunks))
            raise NoClausesFoundError()

        progress("Synthesizing final report...")
        report = await synthesize_report(self.llm, all_clauses, role)
        logger.info("Analysis complete: %s clause(s)", len(all_clauses))
        return AnalysisResponse(
            summary=report.summary,
            clauses=tuple(all_clauses),
            key_terms=report.key_terms,
            key_dates=report.key_dates,
            missing_clauses=report.missing_clauses,
        )

    async def simulate_impact(self, document_text: str, scenario: str) -> str:
        if not scenario.strip():
            return EMPTY_SCENARIO_MESSAGE
        chunks = [
            c for c in chunk_text(document_text, self.config.retrieval_chunk_size, self.config.retrieval_chunk_overlap)
            if c.strip()
        ]
        if not chunks:
            return NO_CONTEXT_MESSAGE
        try:
            embedder = self.embedder
        except Exception as e:
            logger.warning("Embedding model unavailable, using all chunks unranked: %r", e)
            relevant = chunks
        else:
            relevant = await retrieve_top_k(embedder, chunks, scenario, self.config.retrieval_top_k)
        if not relevant:
            return NO_CONTEXT_MESSAGE
        logger.info("Simulating scenario against %s excerpt(s)", len(relevant))
        return await answer_scenario(self.llm, relevant, scenario)


async def analyze_contract(
    document_text: str,
    role: str,
    on_progress: Optional[ProgressCallback] = None,
    config: Optional[AppConfig] = None,
) -> AnalysisResponse:
    analyzer = ContractAnalyzer(config or AppConfig.from_env())
    return await analyzer.analyze_contract(document_text, role, on_progress)


async def simulate_impact(document_text: str, scenario: str, config: Optional[AppConfig] = None) -> str:
    if not scenario.strip():
        return EMPTY_SCENARIO_MESSAGE
    analyzer = ContractAnalyzer(config or AppConfig.from_env())
    return await analyzer.simulate_impact(document_text, scenario)
