"""Rule-based query classifier built on ordered phrase tables."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from rag_router.routing.vocabulary import (
    PHRASE_TABLES,
    QUESTION_WORDS,
    SHORT_QUERY_MAX_TOKENS,
)
from rag_router.types import RouteKind

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Classification:
    """Result of keyword classification.

    `category` names the phrase table that matched, or is None when the
    decision came from the length/interrogative heuristics.
    """

    kind: RouteKind
    category: str | None
    matched: str | None
    reason: str


class KeywordClassifier:
    """Maps free text to GENERAL or KNOWLEDGE using static phrase tables.

    Tables are scanned in declaration order and the first phrase contained in
    the normalized query wins, so social phrases shadow domain keywords that
    appear later in the same query. When nothing matches, short queries are
    treated as general chat and everything else goes to the knowledge base.
    """

    def __init__(
        self,
        tables: Sequence[tuple[str, RouteKind, Sequence[str]]] = PHRASE_TABLES,
        question_words: Sequence[str] = QUESTION_WORDS,
        short_query_max_tokens: int = SHORT_QUERY_MAX_TOKENS,
    ) -> None:
        self._tables = [
            (category, kind, tuple(phrase.lower() for phrase in phrases))
            for category, kind, phrases in tables
        ]
        self._question_words = tuple(question_words)
        self._short_query_max_tokens = short_query_max_tokens

    def classify(self, query: str) -> Classification:
        normalized = query.lower().strip()

        for category, kind, phrases in self._tables:
            for phrase in phrases:
                if phrase in normalized:
                    logger.debug("Phrase %r matched table %s -> %s", phrase, category, kind.value)
                    return Classification(
                        kind=kind,
                        category=category,
                        matched=phrase,
                        reason=f"matched {category} phrase '{phrase}'",
                    )

        token_count = len(normalized.split())
        if token_count <= self._short_query_max_tokens:
            return Classification(
                kind=RouteKind.GENERAL,
                category=None,
                matched=None,
                reason=f"short query ({token_count} tokens)",
            )

        for word in self._question_words:
            if word in normalized:
                return Classification(
                    kind=RouteKind.KNOWLEDGE,
                    category=None,
                    matched=word,
                    reason=f"interrogative word '{word}'",
                )

        return Classification(
            kind=RouteKind.KNOWLEDGE,
            category=None,
            matched=None,
            reason=f"medium-length query ({token_count} tokens), retrieving by default",
        )
