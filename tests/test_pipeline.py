import asyncio
import json
import pytest
from langchain_core.embeddings import Embeddings
from unbind.analysis.highlight import split_for_highlight
from unbind.pipeline import ContractAnalyzer, analyze_contract, simulate_impact
from unbind.rag.scenario import EMPTY_SCENARIO_MESSAGE, NO_CONTEXT_MESSAGE
from unbind.utils.config import AppConfig
from unbind.utils.exception import ChunkingConfigError, NoClausesFoundError, SimulationError, SynthesisError
from unbind.utils.types import ClauseSpan

REPORT = {
    "summary": "Overall risk appears low and typical.",
    "keyTerms": [{"term": "Term", "definition": "Length of the lease."}],
    "keyDates": [],
    "missingClauses": [{"clauseName": "Force Majeure", "reason": "Protects you from events outside your control."}],
}


def chunk_of(messages):
    return messages[1]["content"].split("TEXT:\n", 1)[1].rsplit("\n\nReturn only valid JSON.", 1)[0]


class StubLLM:
    """Clause calls echo the first 12 chars of the chunk as a clause; synthesis returns REPORT."""

    def __init__(self, fail_on=None, empty=False, synthesis_reply=None, delays=None):
        self.fail_on = fail_on or set()
        self.empty = empty
        self.synthesis_reply = synthesis_reply if synthesis_reply is not None else json.dumps(REPORT)
        self.delays = delays or {}
        self.clause_calls = []
        self.synthesis_calls = 0
        self.other_calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def complete(self, messages, model=None, temperature=None, json_output=False):
        user = messages[1]["content"]
        if "TEXT:\n" in user:
            chunk = chunk_of(messages)
            self.clause_calls.append(chunk)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            try:
                await asyncio.sleep(self.delays.get(chunk[0], 0))
            finally:
                self.in_flight -= 1
            if chunk[0] in self.fail_on:
                raise RuntimeError("model unavailable")
            if self.empty:
                return json.dumps({"clauses": []})
            return json.dumps({"clauses": [{
                "clauseText": chunk[:12],
                "simplifiedExplanation": "e",
                "riskLevel": "Low",
                "riskReason": "r",
                "negotiationSuggestion": "fair as is",
            }]})
        if "ANALYZED CLAUSES" in user:
            self.synthesis_calls += 1
            return self.synthesis_reply
        self.other_calls.append(messages)
        return "You would lose your deposit."


class KeywordEmb(Embeddings):
    def embed_documents(self, texts):
        return [[1.0 if "deposit" in t.lower() else 0.0, 1.0 if "pets" in t.lower() else 0.0] for t in texts]

    def embed_query(self, text):
        return self.embed_documents([text])[0]


class ExplodingEmb(Embeddings):
    def embed_documents(self, texts):  # pragma: no cover - must never run
        raise AssertionError("embedding called")

    def embed_query(self, text):  # pragma: no cover
        raise AssertionError("embedding called")


def lettered(*parts):
    """Text whose 3600-char blocks are filled with a distinct letter each."""
    return "".join(letter * n for letter, n in parts)


def run(coro):
    return asyncio.run(coro)


def test_short_document_single_extractor_call():
    llm = StubLLM()
    analyzer = ContractAnalyzer(AppConfig(), llm=llm)
    result = run(analyzer.analyze_contract("A" * 3000, "tenant"))
    assert len(llm.clause_calls) == 1
    assert llm.synthesis_calls == 1
    assert result.summary == REPORT["summary"]
    assert result.missing_clauses[0].clause_name == "Force Majeure"


def test_9000_chars_three_extractor_calls():
    llm = StubLLM()
    analyzer = ContractAnalyzer(AppConfig(), llm=llm)
    result = run(analyzer.analyze_contract(lettered(("A", 3600), ("B", 3600), ("C", 1800)), "tenant"))
    assert len(llm.clause_calls) == 3
    assert [len(c) for c in sorted(llm.clause_calls, key=lambda c: c[0])] == [4000, 4000, 1800]
    assert len(result.clauses) == 3


def test_clause_order_follows_chunk_order_not_completion():
    llm = StubLLM(delays={"A": 0.05, "B": 0.02, "C": 0.0})
    analyzer = ContractAnalyzer(AppConfig(), llm=llm)
    result = run(analyzer.analyze_contract(lettered(("A", 3600), ("B", 3600), ("C", 1800)), "tenant"))
    assert [c.clause_text[0] for c in result.clauses] == ["A", "B", "C"]


def test_failed_chunk_does_not_block_others():
    llm = StubLLM(fail_on={"B"})
    analyzer = ContractAnalyzer(AppConfig(), llm=llm)
    result = run(analyzer.analyze_contract(lettered(("A", 3600), ("B", 3600), ("C", 1800)), "tenant"))
    assert [c.clause_text[0] for c in result.clauses] == ["A", "C"]


def test_zero_clauses_is_distinct_failure():
    llm = StubLLM(empty=True)
    analyzer = ContractAnalyzer(AppConfig(), llm=llm)
    with pytest.raises(NoClausesFoundError) as exc:
        run(analyzer.analyze_contract("A" * 5000, "tenant"))
    assert not isinstance(exc.value, SynthesisError)
    assert llm.synthesis_calls == 0


def test_every_chunk_failing_is_zero_clauses():
    llm = StubLLM(fail_on={"A"})
    analyzer = ContractAnalyzer(AppConfig(), llm=llm)
    with pytest.raises(NoClausesFoundError):
        run(analyzer.analyze_contract("A" * 9000, "tenant"))


def test_unparseable_synthesis_propagates():
    llm = StubLLM(synthesis_reply="I could not do that")
    analyzer = ContractAnalyzer(AppConfig(), llm=llm)
    with pytest.raises(SynthesisError):
        run(analyzer.analyze_contract("A" * 100, "tenant"))


def test_clause_in_overlap_is_reported_twice():
    # The last window (7200..7600) sits inside the previous one; no dedup, so its clause appears twice.
    text = "A" * 3600 + "B" * 4000
    llm = StubLLM()
    analyzer = ContractAnalyzer(AppConfig(), llm=llm)
    result = run(analyzer.analyze_contract(text, "tenant"))
    texts = [c.clause_text for c in result.clauses]
    assert texts.count("B" * 12) == 2


def test_overlap_duplicate_highlights_same_span_twice():
    text = "A" * 3600 + "B" * 4000
    analyzer = ContractAnalyzer(AppConfig(), llm=StubLLM())
    result = run(analyzer.analyze_contract(text, "tenant"))
    spans = [s for s in split_for_highlight(text, result.clauses) if isinstance(s, ClauseSpan)]
    assert [(s.start, s.end) for s in spans] == [(0, 12), (3600, 3612), (3600, 3612)]
    assert spans[1].clause_index != spans[2].clause_index


def test_fan_out_respects_concurrency_limit():
    llm = StubLLM(delays={"A": 0.01})
    analyzer = ContractAnalyzer(AppConfig(max_concurrency=2), llm=llm)
    run(analyzer.analyze_contract("A" * 30000, "tenant"))
    assert len(llm.clause_calls) > 2
    assert llm.max_in_flight <= 2


def test_progress_reported_per_phase():
    messages = []
    analyzer = ContractAnalyzer(AppConfig(), llm=StubLLM())
    run(analyzer.analyze_contract("A" * 9000, "tenant", on_progress=messages.append))
    assert messages == [
        "Chunking document...",
        "Analyzing 3 document section(s)...",
        "Synthesizing final report...",
    ]


def test_invalid_config_rejected_up_front():
    from unbind.utils.exception import ChunkingConfigError

    with pytest.raises(ChunkingConfigError):
        ContractAnalyzer(AppConfig(extraction_chunk_size=400, extraction_chunk_overlap=400), llm=StubLLM())


def test_simulate_empty_scenario_makes_no_calls():
    llm = StubLLM()
    analyzer = ContractAnalyzer(AppConfig(), llm=llm, embedder=ExplodingEmb())
    assert run(analyzer.simulate_impact("Some contract text.", "")) == EMPTY_SCENARIO_MESSAGE
    assert llm.other_calls == [] and llm.clause_calls == []


def test_simulate_empty_document_explains():
    llm = StubLLM()
    analyzer = ContractAnalyzer(AppConfig(), llm=llm, embedder=ExplodingEmb())
    assert run(analyzer.simulate_impact("   ", "Can I keep a dog?")) == NO_CONTEXT_MESSAGE
    assert llm.other_calls == []


def test_simulate_feeds_top_chunks_to_answerer():
    text = ("Pets are not allowed. " * 80) + ("The deposit is returned in 30 days. " * 80)
    llm = StubLLM()
    analyzer = ContractAnalyzer(AppConfig(retrieval_top_k=1), llm=llm, embedder=KeywordEmb())
    answer = run(analyzer.simulate_impact(text, "When do I get my deposit back?"))
    assert answer == "You would lose your deposit."
    context = llm.other_calls[0][1]["content"].split("Contract Excerpts:\n", 1)[1]
    assert "deposit" in context
    assert "---" not in context


def test_simulate_answer_failure_is_terminal():
    class FailingAnswerLLM(StubLLM):
        async def complete(self, messages, model=None, temperature=None, json_output=False):
            raise ConnectionError("down")

    analyzer = ContractAnalyzer(AppConfig(), llm=FailingAnswerLLM(), embedder=KeywordEmb())
    with pytest.raises(SimulationError):
        run(analyzer.simulate_impact("The deposit is refundable.", "deposit?"))


def test_module_level_wrappers_short_circuit_without_model(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.setenv("EMBED_BACKEND", "hashing")
    # No API key: any attempt to build the model client would raise ValueError.
    assert run(simulate_impact("Rent is due monthly.", "  ")) == EMPTY_SCENARIO_MESSAGE
    assert run(simulate_impact("   ", "Can I sublet?", config=AppConfig(embed_backend="hashing"))) == NO_CONTEXT_MESSAGE
    with pytest.raises(ChunkingConfigError):
        run(analyze_contract("Rent is due.", "tenant", config=AppConfig(extraction_chunk_size=10, extraction_chunk_overlap=10)))
