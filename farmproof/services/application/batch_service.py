"""
Application service: Orchestration layer for batch and certification operations.
"""
from typing import List, Optional
import logging

from farmproof.domain.models import (
    Batch,
    CertificatePreview,
    CertificateWindow,
    ProcessStatus,
    ReadinessResult,
    TreeMonthlyStatus,
)
from farmproof.infrastructure.storage_client import StorageClient
from farmproof.services.domain.certificate_metadata import CertificateMetadataBuilder
from farmproof.services.domain.certificate_window import CertificateWindowDeriver
from farmproof.services.domain.monthly_completion_tracker import MonthlyCompletionTracker
from farmproof.services.domain.process_step_aggregator import ProcessStepAggregator
from farmproof.services.domain.readiness_evaluator import ReadinessEvaluator

logger = logging.getLogger(__name__)


class BatchService:
    """
    Application service for batch-related operations.

    Fetches records from storage and hands them to the pure domain
    services. Every call recomputes from source records.
    """

    def __init__(
        self,
        storage_client: StorageClient,
        aggregator: ProcessStepAggregator,
        tracker: MonthlyCompletionTracker,
        evaluator: ReadinessEvaluator,
        window_deriver: CertificateWindowDeriver,
        metadata_builder: CertificateMetadataBuilder,
    ):
        self.storage_client = storage_client
        self.aggregator = aggregator
        self.tracker = tracker
        self.evaluator = evaluator
        self.window_deriver = window_deriver
        self.metadata_builder = metadata_builder

    async def list_batches(self, farm_id: str) -> List[Batch]:
        """All batches of a farm, most recent first."""
        steps = await self.storage_client.get_process_steps(farm_id)
        return self.aggregator.group_by_batch(steps)

    async def tree_monthly_status(
        self,
        farm_id: str,
        batch_id: Optional[str] = None,
    ) -> List[TreeMonthlyStatus]:
        """
        Monthly coverage per tree, optionally scoped to one batch.

        Args:
            farm_id: Farm ID
            batch_id: Optional batch ID

        Returns:
            One status per tree of the farm
        """
        trees = await self.storage_client.get_trees_by_farm(farm_id)
        steps = await self.storage_client.get_process_steps(farm_id, batch_id)
        return self.tracker.status(trees, steps)

    async def process_status(
        self,
        farm_id: str,
        batch_id: Optional[str] = None,
    ) -> ProcessStatus:
        """Advisory process status with per-tree coverage attached."""
        trees = await self.storage_client.get_trees_by_farm(farm_id)
        steps = await self.storage_client.get_process_steps(farm_id, batch_id)
        return self.aggregator.process_status(steps, self.tracker.status(trees, steps))

    async def readiness(self, farm_id: str, batch_id: str) -> ReadinessResult:
        """
        Whether a batch may be certified.

        Args:
            farm_id: Farm ID
            batch_id: Batch ID

        Returns:
            ReadinessResult
        """
        farm = await self.storage_client.get_farm(farm_id)
        steps = await self.storage_client.get_process_steps(farm_id, batch_id)
        return self.evaluator.evaluate(farm, steps)

    async def certificate_window(self, farm_id: str, batch_id: str) -> Optional[CertificateWindow]:
        """
        Work period covered by the photos of a batch.

        Returns:
            CertificateWindow, or None when no photo has a usable timestamp
        """
        steps = await self.storage_client.get_process_steps(farm_id, batch_id)
        photos = await self.storage_client.get_photos(self.aggregator.photo_ids(steps))
        return self.window_deriver.window(photos)

    async def certificate_preview(self, farm_id: str, batch_id: str) -> CertificatePreview:
        """
        Readiness gate, window and metadata in one pass.

        Metadata is only built when the batch is ready and has a window.

        Args:
            farm_id: Farm ID
            batch_id: Batch ID

        Returns:
            CertificatePreview
        """
        farm = await self.storage_client.get_farm(farm_id)
        steps = await self.storage_client.get_process_steps(farm_id, batch_id)

        readiness = self.evaluator.evaluate(farm, steps)
        if not readiness.ready:
            return CertificatePreview(readiness=readiness)

        photos = await self.storage_client.get_photos(self.aggregator.photo_ids(steps))
        window = self.window_deriver.window(photos)
        if window is None:
            logger.warning(f"Batch {batch_id} is ready but has no dated photos")
            return CertificatePreview(readiness=readiness)

        batch = self.aggregator.group_by_batch(steps)[0]
        contributors = [farm.farmer_id] if farm.farmer_id else []
        metadata = self.metadata_builder.build(farm, batch, window, contributors)

        return CertificatePreview(readiness=readiness, window=window, metadata=metadata)
