from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from mangum import Mangum

from api.cron_routes import router as cron_router
from api.enrichment_routes import router as enrichment_router
from utils.errors import InvalidStateError, NotFoundError, PipelineError, ValidationError

app = FastAPI(
    title="Job Enrichment Pipeline API",
    description="Operator and scheduler endpoints for job scraping and enrichment",
    version="1.0.0",
)

# Error kind -> HTTP status; anything else is a 500
ERROR_STATUS_CODES = {
    ValidationError: 400,
    NotFoundError: 404,
    InvalidStateError: 409,
}


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError):
    status_code = next(
        (code for kind, code in ERROR_STATUS_CODES.items() if isinstance(exc, kind)),
        500,
    )
    return JSONResponse(status_code=status_code, content={"error": exc.message, "code": exc.code})


# Include routers
app.include_router(enrichment_router, prefix="/admin", tags=["Enrichment"])
app.include_router(cron_router, prefix="/cron", tags=["Cron"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# Lambda handler
handler = Mangum(app, lifespan="off")
