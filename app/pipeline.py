"""Investor research pipeline: classify, persist, deep-research, extract."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from app.config import settings
from app.connectors import ClassificationClient, DeepResearchClient
from app.enrich import ExtractionClient, IdentifierNormalizer, build_extraction_schema, build_profile_update
from app.errors import ExtractionError, InputError
from app.models import CanonicalIdentifier, ClassificationSummary, OutcomeStatus, ResearchOutcome
from app.store import DedupGate, InvestorStore

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    START = "start"
    NORMALIZED = "normalized"
    DEDUP_CHECKED = "dedup_checked"
    SKIPPED = "skipped"
    CLASSIFIED = "classified"
    BASE_WRITTEN = "base_written"
    NON_INVESTOR_DONE = "non_investor_done"
    DEEP_RESEARCHED = "deep_researched"
    SCHEMA_BUILT = "schema_built"
    EXTRACTED = "extracted"
    FINALLY_WRITTEN = "finally_written"


@dataclass
class PipelineRun:
    """Per-run state; never shared between runs."""

    raw_input: Any
    state: PipelineState = PipelineState.START
    identifier: Optional[CanonicalIdentifier] = None

    def advance(self, state: PipelineState):
        self.state = state
        key = self.identifier.value if self.identifier else self.raw_input
        logger.info(f"[{key}] -> {state.value}")


class InvestorResearchPipeline:
    """Run one identifier through the enrichment stages, in order.

    Stages already written to the store stay written if a later stage
    fails; a re-run starts over from the duplicate check.
    """

    def __init__(
        self,
        store: InvestorStore,
        classifier: ClassificationClient,
        deep_research: DeepResearchClient,
        extractor: ExtractionClient,
        skip_existing_default: Optional[bool] = None,
        normalizer: Optional[IdentifierNormalizer] = None,
    ):
        self.store = store
        self.dedup_gate = DedupGate(store)
        self.classifier = classifier
        self.deep_research = deep_research
        self.extractor = extractor
        self.normalizer = normalizer or IdentifierNormalizer()
        self.skip_existing_default = (
            settings.skip_existing_values if skip_existing_default is None else skip_existing_default
        )

    async def run(self, raw_input: Any, skip_existing: Optional[bool] = None) -> ResearchOutcome:
        """Research one identifier and return its terminal outcome."""
        run = PipelineRun(raw_input=raw_input)
        skip = self.skip_existing_default if skip_existing is None else bool(skip_existing)

        if not isinstance(raw_input, str) or not raw_input.strip():
            raise InputError("Input (domain or LinkedIn URL) is required")

        identifier = self.normalizer.normalize(raw_input)
        if identifier.is_empty:
            raise InputError("Could not parse domain or LinkedIn URL")
        run.identifier = identifier
        run.advance(PipelineState.NORMALIZED)

        match = self.dedup_gate.check(identifier, skip)
        run.advance(PipelineState.DEDUP_CHECKED)
        if match:
            run.advance(PipelineState.SKIPPED)
            return ResearchOutcome(
                status=OutcomeStatus.SKIPPED,
                identifier=identifier,
                record_id=match.record_id,
                reason=match.reason,
            )

        classification = await self.classifier.classify(identifier)
        summary = classification.summary
        run.advance(PipelineState.CLASSIFIED)

        base_fields = self._base_fields(summary, classification.links)
        if not summary.is_investor:
            base_fields["research_status"] = "to_do"
        record_id = self.store.upsert_base(identifier, base_fields)
        run.advance(PipelineState.BASE_WRITTEN)

        if not summary.is_investor:
            run.advance(PipelineState.NON_INVESTOR_DONE)
            return ResearchOutcome(
                status=OutcomeStatus.NON_INVESTOR,
                identifier=identifier,
                record_id=record_id,
                summary=summary,
                links=classification.links,
            )

        research_text = await self.deep_research.research(summary.clean_name, summary.investor_types)
        run.advance(PipelineState.DEEP_RESEARCHED)

        schema = build_extraction_schema(is_person=summary.is_person)
        run.advance(PipelineState.SCHEMA_BUILT)

        extracted = await self.extractor.extract(schema, research_text)
        if extracted.get("error"):
            logger.error(f"[{identifier.value}] Extraction error: {extracted['error']}")
            raise ExtractionError("Structured extraction failed", details=extracted["error"])
        run.advance(PipelineState.EXTRACTED)

        update = build_profile_update(extracted, schema, summary, research_text)
        self.store.update(record_id, update)
        run.advance(PipelineState.FINALLY_WRITTEN)

        return ResearchOutcome(
            status=OutcomeStatus.ENRICHED,
            identifier=identifier,
            record_id=record_id,
            summary=summary,
            links=classification.links,
        )

    @staticmethod
    def _base_fields(summary: ClassificationSummary, links: list[str]) -> dict[str, Any]:
        return {
            "type": summary.record_type,
            "name": summary.clean_name,
            "investor_type": summary.investor_types,
            "links": links or None,
        }


def build_pipeline(store: Optional[InvestorStore] = None) -> InvestorResearchPipeline:
    """Wire a pipeline from process settings."""
    return InvestorResearchPipeline(
        store=store or InvestorStore(),
        classifier=ClassificationClient.from_settings(),
        deep_research=DeepResearchClient(),
        extractor=ExtractionClient(),
        skip_existing_default=settings.skip_existing_values,
    )
