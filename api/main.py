"""
Survey Insights API - Main FastAPI Application
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from .config import settings
from .routes import datasets, health


# API Description for Swagger UI
API_DESCRIPTION = """
## Survey Insights API

Turns the free-text columns of a survey export into LLM-written thematic reports.

---

### Supported File Formats

| Format | Extensions | Requirements |
|--------|------------|--------------|
| **Excel** | `.xlsx`, `.xls` | First sheet, first row is the header |

---

### Column Selection

A column becomes a dataset when:
- its name passes the configured policy (contains a free-text marker such as `text`,
  or matches no skip pattern), and
- it has at least 10 distinct non-empty answers (no-answer markers like `(空)` ignored)

The first columns of the sheet (default 3) are carried along as identity fields.

---

### Quick Start

1. **Upload a survey:** `POST /api/v1/datasets/upload`
2. **Analyze a column:** `POST /api/v1/datasets/{index}/analyze`
3. **Classify by topic:** `POST /api/v1/datasets/{index}/classify` with `{"topics": "price、service"}`
4. **Poll for results:** `GET /api/v1/datasets/{index}` until `status` is `analyzed` / `classified`

---

### Dataset Status

| Status | Description |
|--------|-------------|
| `idle` | Ready to analyze |
| `selecting-topics` | Topics set, classification not started |
| `analyzing` | Narrative analysis running |
| `classifying` | Topic classification running |
| `analyzed` | Narrative report ready |
| `classified` | Themed report ready |
| `failed` | Final aggregation failed; see `error` |
"""

# Tags for organizing endpoints in Swagger UI
TAGS_METADATA = [
    {
        "name": "Datasets",
        "description": "Upload survey workbooks, run narrative analysis and topic classification on columns.",
    },
    {
        "name": "Health",
        "description": "Service health and readiness checks.",
    },
]

# Setup logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown"""
    # Startup
    logger.info("Starting Survey Insights API...")
    logger.info(f"LLM endpoint: {settings.LLM_API_URL} (model: {settings.LLM_MODEL})")
    logger.info(f"Batch size: {settings.BATCH_SIZE}, column policy: {settings.COLUMN_ADMISSION_POLICY}")

    # Check for API key
    if not settings.LLM_API_KEY:
        logger.warning("LLM_API_KEY not set - analysis and classification will fail")

    yield

    # Shutdown
    logger.info("Shutting down Survey Insights API...")


app = FastAPI(
    title="Survey Insights API",
    description=API_DESCRIPTION,
    version="1.0.0",
    lifespan=lifespan,
    openapi_tags=TAGS_METADATA,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(datasets.router, prefix="/api/v1", tags=["Datasets"])


@app.get("/")
async def root():
    """Root endpoint with API info"""
    return {
        "name": "Survey Insights API",
        "version": "1.0.0",
        "description": "LLM thematic analysis of free-text survey answers",
        "docs": "/docs",
        "health": "/api/v1/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
