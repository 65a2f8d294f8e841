from fastapi import APIRouter, Depends

from models import FeedRequest
from reporting import ReportService, get_report_service
from routes.common import run_report

router = APIRouter()


@router.post("/api/v2/reports/undp/posts", tags=["UNDP Reports"])
async def undp_posts(request: FeedRequest, service: ReportService = Depends(get_report_service)):
    """Posts behind one category of a report chart, as document cards"""
    return await run_report(service.feed, request)
