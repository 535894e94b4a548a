from __future__ import annotations

from functools import lru_cache
from typing import Callable, List, Optional

try:  # pragma: no cover - optional dependency guards
    import tiktoken
except ImportError:  # pragma: no cover
    tiktoken = None

TokenCounter = Callable[[str], int]
_TOKEN_COUNTER: Optional[TokenCounter] = None


def build_token_counter(model_hint: Optional[str]) -> TokenCounter:
    """
    Return a callable that counts transcript tokens with tiktoken when available.
    Falls back to a character heuristic if no encoding can be resolved.
    """

    if tiktoken is None:
        return _fallback_counter

    encoding = _resolve_encoding(model_hint)
    if encoding is None:
        return _fallback_counter

    def _count(text: str) -> int:
        if not text:
            return 0
        try:
            return len(encoding.encode_ordinary(text))
        except Exception:
            return _fallback_counter(text)

    return _count


def configure_token_counter(counter: Optional[TokenCounter]) -> None:
    global _TOKEN_COUNTER
    _TOKEN_COUNTER = counter


def estimate_tokens(text: str) -> int:
    """Return the configured token count or a heuristic fallback."""
    if _TOKEN_COUNTER:
        try:
            return max(0, _TOKEN_COUNTER(text))
        except Exception:
            pass
    return _fallback_counter(text)


@lru_cache(maxsize=8)
def _resolve_encoding(model_hint: Optional[str]):
    if tiktoken is None:
        return None
    for candidate in _model_hint_candidates(model_hint):
        try:
            return tiktoken.encoding_for_model(candidate)
        except KeyError:
            continue
    try:
        return tiktoken.get_encoding("cl100k_base")
    except Exception:
        return None


def _fallback_counter(text: str) -> int:
    # Roughly four ASCII characters per token; other scripts closer to one each.
    if not text:
        return 0
    ascii_chars = sum(1 for char in text if char.isascii())
    other_chars = len(text) - ascii_chars
    return (ascii_chars + 3) // 4 + other_chars


def _model_hint_candidates(model_hint: Optional[str]) -> List[str]:
    # OpenRouter ids look like "vendor/model:variant"; tiktoken only knows the bare model name.
    raw = (model_hint or "").strip().lower()
    if not raw:
        return []
    candidates = [raw]
    bare = raw.split(":", 1)[0]
    if bare not in candidates:
        candidates.append(bare)
    if "/" in bare:
        suffix = bare.rsplit("/", 1)[-1]
        if suffix not in candidates:
            candidates.append(suffix)
    return candidates
