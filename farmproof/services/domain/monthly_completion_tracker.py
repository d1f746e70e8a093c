"""
Domain service: Per-tree monthly photo coverage.
"""
from dataclasses import dataclass
from typing import Optional
import logging

from farmproof.domain.models import ProcessStep, StepType, Tree, TreeMonthlyStatus
from farmproof.config import settings

logger = logging.getLogger(__name__)


@dataclass
class TrackerConfig:
    """Configuration for monthly completion tracking."""

    months_per_cycle: int = 12
    """Number of production months per cycle"""


class MonthlyCompletionTracker:
    """
    Computes which production months each tree has evidence for.

    Only completed monthly updates that name one of the farm's trees and a
    month number count. Steps pointing at trees of another farm are ignored.
    """

    def __init__(self, config: Optional[TrackerConfig] = None):
        self.config = config or TrackerConfig(months_per_cycle=settings.months_per_cycle)

    @property
    def all_months(self) -> list[int]:
        return list(range(1, self.config.months_per_cycle + 1))

    def status(
        self,
        trees: list[Tree],
        steps: list[ProcessStep],
    ) -> list[TreeMonthlyStatus]:
        """
        Monthly status for every tree, including trees with no steps.

        Args:
            trees: Trees owned by the farm
            steps: Steps of the farm, optionally scoped to one batch

        Returns:
            One TreeMonthlyStatus per tree, in tree order
        """
        trees = trees or []
        completed: dict[str, set[int]] = {tree.id: set() for tree in trees}
        valid_months = set(self.all_months)
        skipped_foreign = 0

        for step in steps or []:
            if (
                step.step_type != StepType.MONTHLY_UPDATE
                or not step.is_completed
                or step.tree_id is None
                or step.step_number is None
            ):
                continue

            if step.tree_id not in completed:
                skipped_foreign += 1
                continue

            if step.step_number not in valid_months:
                logger.debug(f"Ignoring step {step.id} with month {step.step_number}")
                continue

            completed[step.tree_id].add(step.step_number)

        if skipped_foreign:
            logger.warning(f"Skipped {skipped_foreign} monthly steps referencing trees outside the farm")

        statuses = []
        for tree in trees:
            months = sorted(completed[tree.id])
            statuses.append(TreeMonthlyStatus(
                tree_id=tree.id,
                tree_number=tree.tree_number,
                completed_months=months,
                missing_months=[m for m in self.all_months if m not in completed[tree.id]],
            ))

        return statuses
