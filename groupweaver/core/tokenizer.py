import math
from enum import Enum
from typing import Dict, List, Optional, Protocol, Tuple, runtime_checkable

from .models import File


class LLMProvider(Enum):
    CLAUDE = "claude"
    GPT = "gpt"
    GEMINI = "gemini"
    LLAMA = "llama"


# Context limits for different models (in tokens)
CONTEXT_LIMITS: Dict[LLMProvider, Dict[str, int]] = {
    LLMProvider.CLAUDE: {
        "claude-3-haiku": 200000,
        "claude-3-sonnet": 200000,
        "claude-3-opus": 200000,
        "claude-3.5-sonnet": 200000,
    },
    LLMProvider.GPT: {
        "gpt-4": 128000,
        "gpt-4-turbo": 128000,
        "gpt-4o": 128000,
        "gpt-3.5-turbo": 16385,
    },
    LLMProvider.GEMINI: {
        "gemini-pro": 32768,
        "gemini-1.5-pro": 2000000,
        "gemini-2.5-flash": 1000000,
    },
    LLMProvider.LLAMA: {
        "llama-2-70b": 4096,
        "llama-3-70b": 8192,
        "codellama-34b": 16384,
    }
}


@runtime_checkable
class TokenEstimator(Protocol):
    """Estimates how many tokens a set of files costs once packed into a prompt."""

    def estimate_files(self, files: List[File]) -> int:
        ...


class HeuristicTokenEstimator:
    """
    Character-count approximation of a file group's prompt cost.

    Each file contributes its path, name and a fixed metadata overhead, its
    summary, a capped content preview and a flat amount per import/export.
    The total is divided by the chars-per-token ratio and rounded up.
    """

    def __init__(self, chars_per_token: int = 4, metadata_overhead: int = 50,
                 content_preview_chars: int = 1000, chars_per_import: int = 50,
                 chars_per_export: int = 30):
        self.chars_per_token = chars_per_token
        self.metadata_overhead = metadata_overhead
        self.content_preview_chars = content_preview_chars
        self.chars_per_import = chars_per_import
        self.chars_per_export = chars_per_export

    def file_chars(self, file: File) -> int:
        chars = len(file.path) + len(file.name) + self.metadata_overhead
        if file.summary:
            chars += len(file.summary)
        if file.content:
            chars += min(len(file.content), self.content_preview_chars)
        if file.imports:
            chars += len(file.imports) * self.chars_per_import
        if file.exports:
            chars += len(file.exports) * self.chars_per_export
        return chars

    def estimate_files(self, files: List[File]) -> int:
        total_chars = sum(self.file_chars(f) for f in files)
        return math.ceil(total_chars / self.chars_per_token)


def find_model(model: str) -> Optional[Tuple[LLMProvider, int]]:
    """Look up a model name across providers."""
    for provider, limits in CONTEXT_LIMITS.items():
        if model in limits:
            return provider, limits[model]
    return None


def suggest_token_limit(model: str, reserve_ratio: float = 0.2) -> int:
    """
    Token limit for one group when packing context for `model`.

    Args:
        model: Model name from CONTEXT_LIMITS
        reserve_ratio: Share of the context window kept free for the response

    Raises:
        KeyError: if the model is unknown
    """
    found = find_model(model)
    if found is None:
        raise KeyError(model)
    _, max_context = found
    return int(max_context * (1 - reserve_ratio))
