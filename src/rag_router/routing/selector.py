"""Tool gate and keyword-scored tool selection."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from rag_router.routing.vocabulary import (
    ARITHMETIC_PATTERN,
    ARITHMETIC_SCORE,
    CATEGORY_KEYWORD_SCORE,
    DESCRIPTION_TOKEN_SCORE,
    DOMAIN_ANCHOR_SCORE,
    DOMAIN_ANCHORS,
    NAME_HIT_SCORE,
    TOOL_GATE_PATTERNS,
    TOOL_KEYWORDS,
)
from rag_router.tools.registry import ToolRegistry, ToolSpec
from rag_router.types import ToolCategory

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ToolMatch:
    spec: ToolSpec
    score: int


class ToolSelector:
    """Scores registered tools against a query and picks the best one.

    `should_use_tool` is the cheap gate that keeps clearly non-tool queries
    away from tool logic; `select` is a deterministic argmax over integer
    scores where ties go to the earliest-registered tool.
    """

    def __init__(self, registry: ToolRegistry) -> None:
        self.registry = registry
        self._gate_keywords = tuple(
            dict.fromkeys(keyword for keywords in TOOL_KEYWORDS.values() for keyword in keywords)
        )

    def should_use_tool(self, query: str) -> bool:
        normalized = query.lower().strip()

        for keyword in self._gate_keywords:
            if keyword in normalized:
                logger.debug("Tool gate keyword hit: %r", keyword)
                return True

        for pattern in TOOL_GATE_PATTERNS:
            if pattern.search(normalized):
                logger.debug("Tool gate pattern hit: %s", pattern.pattern)
                return True

        return False

    def score(self, query: str, spec: ToolSpec) -> int:
        normalized = query.lower().strip()
        total = 0

        if spec.name.lower().replace("_", " ") in normalized:
            total += NAME_HIT_SCORE

        description = spec.description.lower()
        for token in normalized.split():
            if len(token) > 2 and token in description:
                total += DESCRIPTION_TOKEN_SCORE

        for keyword in TOOL_KEYWORDS.get(spec.category, ()):
            if keyword in normalized:
                total += CATEGORY_KEYWORD_SCORE

        for anchor, name_fragment in DOMAIN_ANCHORS:
            if anchor in normalized and name_fragment in spec.name:
                total += DOMAIN_ANCHOR_SCORE

        if spec.category is ToolCategory.CALCULATION and ARITHMETIC_PATTERN.search(normalized):
            total += ARITHMETIC_SCORE

        return total

    def rank(self, query: str) -> list[ToolMatch]:
        matches: list[ToolMatch] = []
        for spec in self.registry.specs():
            score = self.score(query, spec)
            if score > 0:
                matches.append(ToolMatch(spec=spec, score=score))
        # sorted() is stable, so equal scores keep registration order.
        return sorted(matches, key=lambda match: match.score, reverse=True)

    def select(self, query: str) -> ToolSpec | None:
        """Return the best tool for `query`, or None when nothing scores.

        A query containing an arithmetic expression always goes to the first
        calculation tool, whatever the keyword scores of other tools.
        """
        if ARITHMETIC_PATTERN.search(query.lower()):
            for spec in self.registry.specs():
                if spec.category is ToolCategory.CALCULATION:
                    logger.debug("Arithmetic expression routed to %s", spec.name)
                    return spec

        ranked = self.rank(query)
        if not ranked:
            return None
        if len(ranked) > 1:
            logger.debug(
                "Top tool candidates: %s",
                ", ".join(f"{m.spec.name}={m.score}" for m in ranked[:3]),
            )
        return ranked[0].spec
