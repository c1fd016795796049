"""
Relationship resolver.

Materializes the vehicle -> parts graph from the two independently stored
collections and attaches the enrichment text.
"""

import asyncio
import time
from typing import Iterable, List, Mapping, Any, Optional

import structlog

from garage_api.src.mapping import part_reference_ids, to_part_view, to_vehicle_view
from garage_api.src.models.views import VehicleView
from garage_api.src.repositories.part_repo import PartRepository
from garage_api.src.services.enrichment import EnrichmentProvider
from shared.metrics import GarageMetrics, get_metrics

logger = structlog.get_logger(__name__)


class RelationshipResolver:
    """Builds composed vehicles from stored vehicle documents."""

    def __init__(
        self,
        part_repo: PartRepository,
        enrichment: EnrichmentProvider,
        fallback: str = "No joke available",
        enrichment_timeout: float = 3.0,
        metrics: Optional[GarageMetrics] = None,
    ):
        self.part_repo = part_repo
        self.enrichment = enrichment
        self.fallback = fallback
        self.enrichment_timeout = enrichment_timeout
        self.metrics = metrics or get_metrics()

    async def enrichment_text(self) -> str:
        """
        One enrichment call, bounded by the timeout.

        Never raises: timeouts, provider errors and empty answers all yield
        the fallback text.
        """
        started = time.perf_counter()
        try:
            text = await asyncio.wait_for(self.enrichment.fetch(), self.enrichment_timeout)
        except Exception as e:
            self.metrics.enrichment_requests.labels(outcome="fallback").inc()
            logger.warning(
                "enrichment_fallback_used",
                error=str(e) or type(e).__name__,
                error_type=type(e).__name__,
            )
            return self.fallback
        finally:
            self.metrics.enrichment_duration.observe(time.perf_counter() - started)

        if not isinstance(text, str) or not text.strip():
            self.metrics.enrichment_requests.labels(outcome="fallback").inc()
            logger.warning("enrichment_fallback_used", error="empty enrichment text")
            return self.fallback

        self.metrics.enrichment_requests.labels(outcome="success").inc()
        return text

    async def resolve_vehicle(self, document: Mapping[str, Any]) -> VehicleView:
        """
        Compose a vehicle with its parts and enrichment text.

        Issues one ``$in`` scan over the parts collection for the ids in the
        vehicle's reference list, concurrently with the enrichment call.
        """
        part_ids = part_reference_ids(document)
        part_documents, joke = await asyncio.gather(
            self.part_repo.find_by_ids(part_ids),
            self.enrichment_text(),
        )

        if len(part_documents) != len(part_ids):
            logger.warning(
                "vehicle_reference_mismatch",
                vehicle_id=str(document.get("_id")),
                referenced=len(part_ids),
                found=len(part_documents),
            )

        self.metrics.parts_per_vehicle.observe(len(part_documents))
        return to_vehicle_view(document, [to_part_view(p) for p in part_documents], joke)

    async def resolve_many(self, documents: Iterable[Mapping[str, Any]]) -> List[VehicleView]:
        """Compose several vehicles concurrently, preserving input order."""
        return list(await asyncio.gather(*(self.resolve_vehicle(d) for d in documents)))
