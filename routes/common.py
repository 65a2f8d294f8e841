import math
import logging
from typing import Any, Callable

from fastapi import HTTPException
from starlette.concurrency import run_in_threadpool

from reporting.errors import BadRequestError, ReportError, SearchEngineError

logger = logging.getLogger(__name__)


def sanitize_float(value):
    """Handle non-finite float values for JSON serialization"""
    if value is None:
        return None
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
    return value


def sanitize_data(data):
    """Recursively sanitize all float values in the data structure"""
    if isinstance(data, dict):
        return {k: sanitize_data(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [sanitize_data(item) for item in data]
    elif isinstance(data, float):
        return sanitize_float(data)
    return data


async def run_report(fn: Callable[..., Any], *args) -> Any:
    """Run a blocking report call off the event loop and map core errors to HTTP errors"""
    try:
        result = await run_in_threadpool(fn, *args)
    except BadRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SearchEngineError as e:
        logger.error(f"Search engine failure for query [{e.query}]: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
    except ReportError as e:
        logger.error(f"Report failed: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
    except Exception as e:
        logger.exception(f"Unexpected report failure: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
    return sanitize_data(result)
