"""
Domain service: Work period of a batch from its photo timestamps.
"""
from datetime import datetime
from typing import Any, Optional
import logging

from pydantic import TypeAdapter, ValidationError

from farmproof.domain.models import CertificateWindow, Photo
from farmproof.services.domain.process_step_aggregator import as_utc

logger = logging.getLogger(__name__)

_datetime_adapter = TypeAdapter(datetime)


def parse_capture_time(value: Any) -> Optional[datetime]:
    """
    Parse a capture timestamp into an aware UTC datetime.

    Returns:
        datetime, or None when missing or unparsable
    """
    if value is None or value == "":
        return None
    try:
        return as_utc(_datetime_adapter.validate_python(value))
    except ValidationError:
        return None


class CertificateWindowDeriver:
    """Derives the inclusive calendar window covered by a batch's photos."""

    def window(self, photos: list[Photo]) -> Optional[CertificateWindow]:
        """
        First and last capture dates of the photos.

        Args:
            photos: Photos referenced by the batch

        Returns:
            CertificateWindow, or None when no photo has a parsable timestamp
        """
        captures = []
        for photo in photos or []:
            captured = parse_capture_time(photo.taken_at)
            if captured is None:
                logger.debug(f"Discarding photo {photo.id} with unparsable timestamp {photo.taken_at!r}")
                continue
            captures.append(captured)

        if not captures:
            logger.info("No photo timestamps available to derive a certificate window")
            return None

        captures.sort()
        first, last = captures[0], captures[-1]
        return CertificateWindow(
            start=first.date(),
            end=last.date(),
            first_capture=first,
            last_capture=last,
        )
