from __future__ import annotations
import os
from dataclasses import dataclass
from dotenv import load_dotenv
from unbind.utils.exception import ChunkingConfigError

@dataclass(frozen=True)
class AppConfig:
    chat_model: str = "gemini-1.5-flash"
    temperature: float = 0.2
    max_tokens: int = 8192
    llm_timeout: float = 120.0
    embed_backend: str = "huggingface"
    embed_model: str = "intfloat/e5-small-v2"
    extraction_chunk_size: int = 4000
    extraction_chunk_overlap: int = 400
    retrieval_chunk_size: int = 1500
    retrieval_chunk_overlap: int = 200
    retrieval_top_k: int = 6
    max_concurrency: int = 4
    workspace_dir: str = "workspace_tmp"

    @classmethod
    def from_env(cls) -> "AppConfig":
        load_dotenv()
        return cls(
            chat_model=os.getenv("CHAT_MODEL", "gemini-1.5-flash"),
            temperature=float(os.getenv("TEMPERATURE", "0.2")),
            max_tokens=int(os.getenv("MAX_TOKENS", "8192")),
            llm_timeout=float(os.getenv("LLM_TIMEOUT", "120")),
            embed_backend=os.getenv("EMBED_BACKEND", "huggingface").lower(),
            embed_model=os.getenv("EMBED_MODEL", "intfloat/e5-small-v2"),
            extraction_chunk_size=int(os.getenv("EXTRACTION_CHUNK_SIZE", "4000")),
            extraction_chunk_overlap=int(os.getenv("EXTRACTION_CHUNK_OVERLAP", "400")),
            retrieval_chunk_size=int(os.getenv("RETRIEVAL_CHUNK_SIZE", "1500")),
            retrieval_chunk_overlap=int(os.getenv("RETRIEVAL_CHUNK_OVERLAP", "200")),
            retrieval_top_k=int(os.getenv("RETRIEVAL_TOP_K", "6")),
            max_concurrency=int(os.getenv("MAX_CONCURRENCY", "4")),
            workspace_dir=os.getenv("WORKSPACE_DIR", "workspace_tmp"),
        )

    def validate(self) -> "AppConfig":
        """Reject window and pool settings that would hang or starve the pipeline."""
        for name, size, overlap in (
            ("extraction", self.extraction_chunk_size, self.extraction_chunk_overlap),
            ("retrieval", self.retrieval_chunk_size, self.retrieval_chunk_overlap),
        ):
            if size <= 0 or overlap < 0 or overlap >= size:
                raise ChunkingConfigError(f"Invalid {name} window: size={size}, overlap={overlap}")
        if self.retrieval_top_k < 0:
            raise ValueError("retrieval_top_k must be >= 0")
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        return self
