from fastapi import APIRouter, Depends

from models import ReportRequest
from reporting import ReportService, get_report_service
from reporting.metrics import UNDP_METRICS
from routes.common import run_report

router = APIRouter()


@router.post("/api/v2/reports/undp", tags=["UNDP Reports"])
async def undp_report(request: ReportRequest, service: ReportService = Depends(get_report_service)):
    """
    Humanitarian and customer-experience report for one topic.

    Touch point, sentiment, journey, churn and satisfaction breakdowns, area
    graphs and word clouds. ``aidType`` selects the series of unAidsChart.
    """
    return await run_report(service.report, UNDP_METRICS, request)
