"""
Domain service: Grouping of process steps into batches.

A batch is not stored; it is the set of steps sharing a batch id, created
at the earliest step's creation time and ordered by step kind then month.
"""
from datetime import datetime, timezone
from typing import Optional
import logging

from farmproof.domain.models import (
    Batch,
    ProcessStatus,
    ProcessStep,
    StepType,
    TreeMonthlyStatus,
)

logger = logging.getLogger(__name__)

STEP_TYPE_ORDER: dict[StepType, int] = {
    StepType.MONTHLY_UPDATE: 1,
    StepType.DRYING: 2,
    StepType.FINAL_BAG: 3,
    StepType.COMPLETED: 4,
}


def as_utc(moment: datetime) -> datetime:
    """Treat naive timestamps as UTC so mixed inputs stay comparable."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _step_sort_key(step: ProcessStep) -> tuple[int, int, int]:
    # Unset step numbers sort after numbered ones
    number_missing = 1 if step.step_number is None else 0
    return (
        STEP_TYPE_ORDER.get(step.step_type, 99),
        number_missing,
        step.step_number or 0,
    )


class ProcessStepAggregator:
    """Groups and orders process step records. Stateless."""

    def order_within_batch(self, steps: list[ProcessStep]) -> list[ProcessStep]:
        """
        Stable sort by kind priority, then step number (unset last).

        Args:
            steps: Steps of one batch

        Returns:
            New ordered list
        """
        return sorted(steps, key=_step_sort_key)

    def batch_created_at(self, steps: list[ProcessStep]) -> datetime:
        """
        Creation time of a batch: the earliest step creation time.

        Raises:
            ValueError: If steps is empty
        """
        if not steps:
            raise ValueError("A batch needs at least one step")
        return min((step.created_at for step in steps), key=as_utc)

    def group_by_batch(self, steps: list[ProcessStep]) -> list[Batch]:
        """
        Group steps by batch id, most recently created batch first.

        Uncompleted steps are grouped and ordered like any other step.

        Args:
            steps: Flat collection of step records

        Returns:
            List of Batch
        """
        grouped: dict[str, list[ProcessStep]] = {}
        for step in steps:
            grouped.setdefault(step.batch_id, []).append(step)

        batches = [
            Batch(
                batch_id=batch_id,
                farm_id=batch_steps[0].farm_id,
                created_at=self.batch_created_at(batch_steps),
                steps=self.order_within_batch(batch_steps),
            )
            for batch_id, batch_steps in grouped.items()
        ]

        # sorted() is stable with reverse=True, ties keep first-seen order
        batches = sorted(batches, key=lambda b: as_utc(b.created_at), reverse=True)
        logger.debug(f"Grouped {len(steps)} steps into {len(batches)} batches")
        return batches

    def photo_ids(self, steps: list[ProcessStep]) -> list[str]:
        """Distinct photo ids referenced by the steps, in step order."""
        seen: dict[str, None] = {}
        for step in steps:
            if step.photo_id is not None:
                seen.setdefault(step.photo_id, None)
        return list(seen)

    def process_status(
        self,
        steps: list[ProcessStep],
        tree_monthly_status: Optional[list[TreeMonthlyStatus]] = None,
    ) -> ProcessStatus:
        """
        Advisory position of a batch in the production cycle.

        The current step is informational only; every action is always
        reported as available.

        Args:
            steps: Steps of one batch (or of a whole farm)
            tree_monthly_status: Per-tree coverage to attach

        Returns:
            ProcessStatus
        """
        completed = [s for s in steps if s.is_completed]
        monthly = [
            s for s in completed
            if s.step_type == StepType.MONTHLY_UPDATE and s.tree_id is not None
        ]
        drying = [s for s in completed if s.step_type == StepType.DRYING]
        final_bag = [s for s in completed if s.step_type == StepType.FINAL_BAG]
        process_completed = any(s.step_type == StepType.COMPLETED for s in completed)

        if process_completed:
            current_step = StepType.COMPLETED
        elif final_bag or drying:
            # Final bagging follows drying
            current_step = StepType.FINAL_BAG
        else:
            current_step = StepType.MONTHLY_UPDATE

        return ProcessStatus(
            current_step=current_step,
            completed_steps=completed,
            monthly_steps=monthly,
            drying_steps=drying,
            final_bag_steps=final_bag,
            tree_monthly_status=tree_monthly_status or [],
        )
