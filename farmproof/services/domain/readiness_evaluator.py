"""
Domain service: Certificate readiness for a batch.

Checks run in a fixed order and stop at the first failure; the reason of
that failure is shown to the user verbatim.

1. The farm owns at least one tree
2. Every tree has a completed monthly update with a photo in the batch
3. The batch has a completed drying step with a photo
4. The batch has a completed final bag step with a photo
"""
from dataclasses import dataclass
from typing import Optional
import logging

from farmproof.domain.models import Farm, ProcessStep, ReadinessResult, StepType, Tree
from farmproof.config import settings

logger = logging.getLogger(__name__)

NO_TREES_REASON = "Farm must have at least one tree"
MISSING_DRYING_REASON = "Missing photo of the drying system"
MISSING_FINAL_BAG_REASON = "Missing photo of the final bag"


@dataclass
class ReadinessConfig:
    """Configuration for readiness evaluation."""

    tree_label_length: int = 8
    """Characters of the tree id shown when a tree has no number"""


def _is_photo_evidence(step: ProcessStep, step_type: StepType) -> bool:
    return step.step_type == step_type and step.is_completed and step.has_photo


class ReadinessEvaluator:
    """Pure predicate gating certificate issuance."""

    def __init__(self, config: Optional[ReadinessConfig] = None):
        self.config = config or ReadinessConfig(tree_label_length=settings.tree_label_length)

    def tree_label(self, tree: Tree) -> str:
        """Tree number if set, else a truncated id."""
        return tree.tree_number or tree.id[:self.config.tree_label_length]

    def evaluate(self, farm: Farm, batch_steps: list[ProcessStep]) -> ReadinessResult:
        """
        Decide whether a batch qualifies for certificate issuance.

        Args:
            farm: Farm with its trees
            batch_steps: Steps of the batch under review

        Returns:
            ReadinessResult naming the first unmet condition
        """
        trees = farm.trees or []
        steps = batch_steps or []

        if not trees:
            return self._unmet(farm, NO_TREES_REASON)

        tree_ids = {tree.id for tree in trees}
        trees_with_photos = {
            step.tree_id
            for step in steps
            if _is_photo_evidence(step, StepType.MONTHLY_UPDATE) and step.tree_id in tree_ids
        }

        trees_without_photos = [tree for tree in trees if tree.id not in trees_with_photos]
        if trees_without_photos:
            labels = ", ".join(self.tree_label(tree) for tree in trees_without_photos)
            return self._unmet(
                farm,
                f"Missing photos for tree(s): {labels}. Each tree needs at least one photo.",
            )

        if not any(_is_photo_evidence(step, StepType.DRYING) for step in steps):
            return self._unmet(farm, MISSING_DRYING_REASON)

        if not any(_is_photo_evidence(step, StepType.FINAL_BAG) for step in steps):
            return self._unmet(farm, MISSING_FINAL_BAG_REASON)

        logger.info(f"Batch for farm {farm.id} is ready for certification "
                    f"({len(trees)} trees, {len(steps)} steps)")
        return ReadinessResult(ready=True)

    def _unmet(self, farm: Farm, reason: str) -> ReadinessResult:
        logger.info(f"Batch for farm {farm.id} not ready: {reason}")
        return ReadinessResult(ready=False, reason=reason)
