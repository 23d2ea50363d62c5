import logging
from datetime import datetime

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()

from app.api.routes import ai, analytics, carbon, esg, forecast, reports, sbti  # noqa: E402
from app.config import get_settings  # noqa: E402
from app.services.errors import (  # noqa: E402
    InsufficientDataError,
    TargetValidationError,
    UnknownPathwayError,
)

# ================== CONFIG ==================
settings = get_settings()

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger("esg")

# ================== FASTAPI APP ==================
app = FastAPI(title="ESG Scoring & Forecasting API", version="1.0.0")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(esg.router, prefix="/api/esg", tags=["ESG Scoring"])
app.include_router(carbon.router, prefix="/api/carbon", tags=["Carbon"])
app.include_router(sbti.router, prefix="/api/sbti", tags=["SBTi"])
app.include_router(forecast.router, prefix="/api/forecast", tags=["Forecasting"])
app.include_router(analytics.router, prefix="/api/analytics", tags=["Analytics"])
app.include_router(ai.router, prefix="/api/ai", tags=["AI Insights"])
app.include_router(reports.router, prefix="/api/reports", tags=["Reports"])


# ================== ERROR HANDLERS ==================
@app.exception_handler(InsufficientDataError)
async def insufficient_data_handler(request: Request, exc: InsufficientDataError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(TargetValidationError)
async def target_validation_handler(request: Request, exc: TargetValidationError):
    logger.info("Rejected SBTi target: %s", exc.errors)
    return JSONResponse(status_code=400, content={"detail": str(exc), "errors": exc.errors})


@app.exception_handler(UnknownPathwayError)
async def unknown_pathway_handler(request: Request, exc: UnknownPathwayError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


# ================== ADDITIONAL ROUTES ==================
@app.get("/", tags=["Root"])
async def root():
    return {
        "message": "ESG Scoring & Forecasting API",
        "version": "1.0.0",
        "timestamp": datetime.now().isoformat(),
    }


@app.get("/health", tags=["Root"])
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
