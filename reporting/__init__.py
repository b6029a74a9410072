from .service import MissingParameterError, ReportingService, SiteStats

__all__ = ["MissingParameterError", "ReportingService", "SiteStats"]
