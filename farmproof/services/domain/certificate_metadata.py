"""
Domain service: Descriptive certificate metadata for a ready batch.
"""
from dataclasses import dataclass, field
from typing import Optional

from farmproof.domain.models import Batch, CertificateMetadata, CertificateWindow, Farm
from farmproof.config import settings


@dataclass
class CertificateMetadataConfig:
    work_scope: list[str] = field(default_factory=list)
    impact_scope: list[str] = field(default_factory=list)
    rights: list[str] = field(default_factory=list)


class CertificateMetadataBuilder:
    """Builds the fields the certificate-issuance collaborator publishes."""

    def __init__(self, config: Optional[CertificateMetadataConfig] = None):
        self.config = config or CertificateMetadataConfig(
            work_scope=list(settings.certificate_work_scope),
            impact_scope=list(settings.certificate_impact_scope),
            rights=list(settings.certificate_rights),
        )

    def build(
        self,
        farm: Farm,
        batch: Batch,
        window: CertificateWindow,
        contributors: Optional[list[str]] = None,
    ) -> CertificateMetadata:
        """
        Assemble certificate metadata.

        Args:
            farm: Farm that produced the batch
            batch: The batch being certified
            window: Work period from the batch photos
            contributors: Contributor identifiers, if known

        Returns:
            CertificateMetadata
        """
        work_start = int(window.first_capture.timestamp())
        work_end = int(window.last_capture.timestamp())

        return CertificateMetadata(
            name=f"{farm.name} - Batch {batch.batch_number}",
            description=(
                f"Specialty coffee production batch from {farm.name}. Covers the complete "
                f"production cycle including monthly updates, drying, and final bagging "
                f"with full traceability and data verification."
            ),
            work_scope=self.config.work_scope,
            impact_scope=self.config.impact_scope,
            rights=self.config.rights,
            contributors=contributors or [],
            work_timeframe_start=work_start,
            work_timeframe_end=work_end,
            impact_timeframe_start=work_start,
            impact_timeframe_end=0,
            tree_count=len(farm.trees),
        )
