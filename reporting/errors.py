"""
Exceptions raised by the reporting core

Routes translate them into HTTP responses: ``BadRequestError`` becomes a
400 with its message, ``SearchEngineError`` becomes a 500 whose detail
never carries query internals.
"""


class ReportError(Exception):
    """Base class for reporting failures"""


class BadRequestError(ReportError):
    """The request cannot be served as given (missing id, unknown category, ...)"""


class UnknownMetricError(BadRequestError):
    """The ``type`` selector does not name a registered metric"""

    def __init__(self, metric_type: str):
        super().__init__(f"Unknown report type: {metric_type}")
        self.metric_type = metric_type


class SearchEngineError(ReportError):
    """A count or search call against Elasticsearch failed"""

    def __init__(self, message: str, query: str = ""):
        super().__init__(message)
        self.query = query
