from fastapi import APIRouter, Depends

from models import ReportRequest
from reporting import ReportService, get_report_service
from reporting.metrics import KEYWORD_METRICS
from routes.common import run_report

router = APIRouter()


@router.post("/api/v2/reports/keywords", tags=["Keyword Reports"])
async def keyword_report(request: ReportRequest, service: ReportService = Depends(get_report_service)):
    """
    Social listening report for one topic.

    ``type`` selects the metric, e.g. mentions, channelSource,
    channelSentiments, typeofMentions, keywordsChart or polarityBreakdown.
    """
    return await run_report(service.report, KEYWORD_METRICS, request)
