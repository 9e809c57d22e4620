"""
Report title enrichment for feed hits.

Feed hit messages only carry the feed and report ids. The report title,
score and link are looked up on the server API after normalization; any
failure leaves the record as it was.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from event_forwarder.errors import ReportLookupError
from event_forwarder.schemas.message import ReportInfo

logger = logging.getLogger(__name__)


class ReportLookup(Protocol):
    def get_report(self, feed_id: int, report_id: str) -> ReportInfo: ...

    def close(self) -> None: ...


class ReportEnricher:
    """Attaches ``report_title``, ``report_score`` and ``report_link``."""

    def __init__(self, client: ReportLookup):
        self.client = client

    def postprocess(self, record: dict[str, Any]) -> dict[str, Any]:
        """
        Enrich ``record`` in place and return it.

        Only records carrying both ``feed_id`` and ``report_id`` are looked
        up. ``report_id`` must be a string; ``feed_id`` may be the decoded
        integer or its string form. Errors are logged, never raised.
        """
        if "feed_id" not in record or "report_id" not in record:
            return record

        feed_id = record["feed_id"]
        report_id = record["report_id"]
        if not isinstance(feed_id, (str, int)) or isinstance(feed_id, bool):
            logger.info("Feed id was an unexpected type")
            return record
        if not isinstance(report_id, str):
            logger.info("Report id was an unexpected type")
            return record

        try:
            feed_id_int = int(feed_id)
        except ValueError:
            logger.info(f"Unable to convert feed_id {feed_id!r} to an integer")
            return record

        try:
            report = self.client.get_report(feed_id_int, report_id)
        except ReportLookupError as e:
            logger.warning(f"Report lookup failed for feed {feed_id_int} report {report_id}: {e}")
            return record
        except Exception as e:
            logger.error(f"Unexpected error looking up feed {feed_id_int} report {report_id}: {e}")
            return record

        logger.debug(
            f"Report title = {report.title}, score = {report.score}, link = {report.link}"
        )
        record["report_title"] = report.title
        record["report_score"] = report.score
        record["report_link"] = report.link
        return record
