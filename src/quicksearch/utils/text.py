"""Text normalization shared by ranking and nickname lookup."""

import unicodedata
from collections.abc import Sequence


def normalize_for_search(text: str | None) -> str:
    """Lowercase and strip diacritics so 'Café' and 'cafe' compare equal."""
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower()


def tokenize(normalized: str) -> list[str]:
    """Whitespace split with blanks removed."""
    return normalized.split()


def all_tokens_prefix(query_tokens: Sequence[str], words: Sequence[str]) -> bool:
    """Every query token starts some word."""
    return all(any(word.startswith(token) for word in words) for token in query_tokens)


def nickname_matches(query: str, query_tokens: Sequence[str], nickname: str) -> bool:
    """Nickname tier rule: substring, or every token a prefix of a nickname word.

    All arguments are already normalized.
    """
    if not query or not nickname:
        return False
    if query in nickname:
        return True
    return bool(query_tokens) and all_tokens_prefix(query_tokens, nickname.split())
