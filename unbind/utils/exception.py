"""Error taxonomy for the analysis core.

Components either absorb a failure (``FailurePolicy.TOLERANT``) or let a
``CustomException`` reach the caller (``FailurePolicy.STRICT``). Each component
module states its policy in a ``FAILURE_POLICY`` constant.
"""
from __future__ import annotations
from enum import Enum


class FailurePolicy(str, Enum):
    TOLERANT = "tolerant"
    STRICT = "strict"


class CustomException(Exception):
    default_message = "An unexpected error occurred."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ChunkingConfigError(CustomException):
    default_message = "Chunk overlap must be smaller than chunk size."


class NoClausesFoundError(CustomException):
    default_message = (
        "No legal clauses were identified in the document. "
        "It might be too short or in an unsupported format."
    )


class SynthesisError(CustomException):
    default_message = "Failed to synthesize the final report from the analyzed clauses."


class SimulationError(CustomException):
    default_message = (
        "Failed to simulate the impact. The AI model may be overloaded. Please try again later."
    )


class NoExtractableTextError(CustomException):
    default_message = (
        "No machine-readable text was found in the document. "
        "It may be a scanned image; please upload a text-based PDF."
    )


class AuthError(CustomException):
    default_message = "Authentication failed."
