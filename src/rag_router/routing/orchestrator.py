"""Intent orchestration: tool check first, then knowledge check."""

from __future__ import annotations

import logging

from rag_router.errors import ClassificationError, ParameterExtractionError, ToolSelectionError
from rag_router.routing.classifier import KeywordClassifier
from rag_router.routing.llm_intent import LLMIntentClassifier
from rag_router.routing.params import ParameterExtractor
from rag_router.routing.selector import ToolSelector
from rag_router.types import LLM_CONFIDENCE, IntentMode, RouteDecision, RouteKind

logger = logging.getLogger(__name__)


class IntentOrchestrator:
    """Produces one `RouteDecision` per query.

    Tool-call precedence is absolute: the tool gate always runs first and a
    successfully selected tool with extractable required parameters ends the
    decision. A gated query whose selection or extraction fails falls through
    to the knowledge check exactly once. The knowledge check uses the keyword
    classifier, or the LLM classifier in `IntentMode.LLM`; LLM failures fall
    back to the keyword classifier and never reach the caller.

    The orchestrator keeps no per-query state, so deciding the same query
    twice in the same mode yields equal decisions.
    """

    def __init__(
        self,
        *,
        selector: ToolSelector,
        extractor: ParameterExtractor | None = None,
        classifier: KeywordClassifier | None = None,
        llm_classifier: LLMIntentClassifier | None = None,
    ) -> None:
        self.selector = selector
        self.extractor = extractor or ParameterExtractor()
        self.classifier = classifier or KeywordClassifier()
        self.llm_classifier = llm_classifier

    def decide(self, query: str, mode: IntentMode = IntentMode.RULE) -> RouteDecision:
        if self.selector.should_use_tool(query):
            try:
                return self._tool_decision(query)
            except (ToolSelectionError, ParameterExtractionError) as exc:
                logger.info("Tool route abandoned, checking knowledge instead: %s", exc)

        if mode is IntentMode.LLM:
            return self._llm_decision(query)
        return self._rule_decision(query)

    def _tool_decision(self, query: str) -> RouteDecision:
        spec = self.selector.select(query)
        if spec is None:
            raise ToolSelectionError(f"No tool scored above zero for query: {query!r}")

        params = self.extractor.extract_required(query, spec)
        logger.info("Selected tool %s with params %s", spec.name, params)
        return RouteDecision.tool_call(
            spec,
            params,
            reason=f"tool gate passed and {spec.name} scored highest",
        )

    def _rule_decision(self, query: str) -> RouteDecision:
        result = self.classifier.classify(query)
        logger.info("Rule classification: %s (%s)", result.kind.value, result.reason)
        if result.kind is RouteKind.KNOWLEDGE:
            return RouteDecision.knowledge(result.reason)
        return RouteDecision.general(result.reason)

    def _llm_decision(self, query: str) -> RouteDecision:
        if self.llm_classifier is None:
            logger.warning("LLM mode requested but no intent model is configured; using rules")
            return self._rule_decision(query)

        try:
            verdict = self.llm_classifier.classify(query)
        except ClassificationError as exc:
            logger.warning("LLM intent analysis failed, falling back to rules: %s", exc)
            return self._rule_decision(query)

        confidence = verdict.confidence if verdict.confidence is not None else LLM_CONFIDENCE
        reason = f"llm: {verdict.reason}"
        logger.info("LLM classification: needs_retrieval=%s (%s)", verdict.needs_retrieval, verdict.reason)
        if verdict.needs_retrieval:
            return RouteDecision.knowledge(reason, confidence=confidence, mode=IntentMode.LLM)
        return RouteDecision.general(reason, confidence=confidence, mode=IntentMode.LLM)
