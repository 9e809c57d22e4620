from event_forwarder.enrichment.report_api import ReportAPIClient, ReportAPIConfig
from event_forwarder.enrichment.reports import ReportEnricher

__all__ = ["ReportAPIClient", "ReportAPIConfig", "ReportEnricher"]
