"""
Main FastAPI application: the workflow step endpoint for social listening reports.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from listening.config import settings
from listening.core.analysis import analyze_brand_sentiment
from listening.schemas import ErrorResponse, ReportRequest, ReportResponse
from listening.utils import (
    MissingBrandError,
    build_error_outputs,
    build_report_outputs,
    now_iso,
    read_inputs,
)

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=settings.LOG_FORMAT)
for noisy in ("httpx", "httpcore"):
    logging.getLogger(noisy).setLevel(logging.WARNING)

logger = logging.getLogger("listening")


# Initialize FastAPI app
app = FastAPI(
    title="Social Listening Report API",
    version="0.1.0",
    description="Brand mention aggregation and report generation for workflow automation",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "as_of": now_iso(),
        "service": "social-listening-report",
    }


@app.post(
    "/workflow/social-listening-report",
    response_model=ReportResponse,
    responses={400: {"model": ErrorResponse}},
)
async def social_listening_report(request: ReportRequest):
    """
    Run one social listening analysis for a workflow step.

    A missing brand is reported as a 400 error instead of the normal outputs.
    """
    inputs = request.inputs.model_dump()
    logger.info("Function inputs: %s", inputs)

    try:
        params = read_inputs(inputs)
    except MissingBrandError as e:
        logger.warning("Missing required brand_or_product parameter")
        return JSONResponse(status_code=400, content={"error": str(e)})

    try:
        analysis = await analyze_brand_sentiment(
            params["brand"],
            params["competitors"],
            params["time_range"],
            params["platforms"],
        )
        outputs = build_report_outputs(analysis, params)
    except Exception as e:
        logger.exception("Social listening analysis failed for %s", params["brand"])
        outputs = build_error_outputs(params["brand"], e)

    logger.info(
        "Report ready for %s (critical issues: %s)", params["brand"], outputs["has_critical_issues"]
    )
    return {"outputs": outputs}


if __name__ == "__main__":
    # For development
    import uvicorn
    uvicorn.run("listening.main:app", host="0.0.0.0", port=settings.PORT, reload=True)
