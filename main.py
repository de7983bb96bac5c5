from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
import os
import logging
from dotenv import load_dotenv
import time
from typing import Optional
from contextlib import asynccontextmanager

from extractors.dom import EmptyDocumentError
from extractors.upwork import extract_job, is_job_url
from models.job import JobSnapshot
from models.request import AnalyzeRequest, ConnectionTestRequest, ExtractRequest, PreviewRequest
from models.response import AssistantResponse
from providers.errors import ProviderError
from providers.provider_factory import ProviderFactory
from utils.llm_processor import LLMProcessor
from utils.output_validator import AnalysisValidationError
from utils.prompt_builder import format_job_preview
from utils.settings import get_api_key, load_settings
from utils.snapshot_store import SnapshotStore

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

NOT_A_JOB_PAGE = "Navigate to an Upwork job details page first."
NO_SNAPSHOT = "No job snapshot available. Open an Upwork job page and extract it first."

# Application state
app_state = {
    "health": "OK",
    "providers": {},
    "llm_processor": None,
    "snapshot_store": SnapshotStore(),
}

# Startup and shutdown events
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Initialize resources
    logging.info("Starting application and initializing resources...")
    try:
        app_state["providers"] = ProviderFactory.create_providers()
        app_state["llm_processor"] = LLMProcessor(load_settings())
        app_state["snapshot_store"] = SnapshotStore()
        app_state["health"] = "OK"
        logging.info("Application startup complete")
    except Exception as e:
        logging.error(f"Error during startup: {str(e)}")
        app_state["health"] = f"ERROR: {str(e)}"

    yield

    # Shutdown: Clean up resources
    logging.info("Shutting down application...")
    app_state["providers"] = {}
    app_state["llm_processor"] = None
    app_state["snapshot_store"].clear()
    logging.info("Application shutdown complete")

# Initialize FastAPI
app = FastAPI(
    title="Upwork Job Assistant API",
    description="Extracts Upwork job details and asks an LLM whether to apply",
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _processor() -> LLMProcessor:
    if app_state["llm_processor"] is None:
        raise ValueError(f"Assistant is not ready: {app_state['health']}")
    return app_state["llm_processor"]


def _failure(e: Exception) -> AssistantResponse:
    """Map a pipeline exception onto an ok=false reply"""
    if isinstance(e, ProviderError):
        return AssistantResponse(
            ok=False,
            error=e.message,
            provider=e.provider,
            status_code=e.status_code,
            raw_error=e.raw_error,
        )
    if isinstance(e, AnalysisValidationError):
        return AssistantResponse(ok=False, error=str(e), raw_error=e.raw_text)
    return AssistantResponse(ok=False, error=str(e))


def _resolve_job(job: Optional[JobSnapshot], tab_id: Optional[int]) -> JobSnapshot:
    if job is not None:
        return job
    if tab_id is not None:
        stored = app_state["snapshot_store"].get(tab_id)
        if stored is not None:
            return stored
    raise ValueError(NO_SNAPSHOT)


@app.get("/")
async def root():
    """Root endpoint - returns API welcome message"""
    return {"message": "Welcome to the Upwork Job Assistant API! Go to /docs for API documentation."}

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": app_state["health"],
        "time": time.time(),
        "snapshots": len(app_state["snapshot_store"]),
        "providers": list(app_state["providers"].keys())
    }

@app.get("/api/ping", response_model=AssistantResponse, response_model_exclude_none=True)
async def ping():
    return AssistantResponse(ok=True, type="PONG")

@app.get("/api/providers")
async def get_providers():
    """Get available completion providers"""
    return {
        "providers": [
            {"name": name, "label": provider.label, "hasApiKey": get_api_key(name) is not None}
            for name, provider in app_state["providers"].items()
        ]
    }

@app.get("/api/settings", response_model=AssistantResponse, response_model_exclude_none=True)
async def get_settings():
    """Current provider settings and profile; API keys are never included"""
    try:
        settings = _processor().settings
    except ValueError as e:
        return _failure(e)
    return AssistantResponse(ok=True, type="SETTINGS", settings=settings.model_dump(by_alias=True))

@app.post("/api/extract", response_model=AssistantResponse, response_model_exclude_none=True)
async def extract(request: ExtractRequest):
    """
    Extract a job snapshot from the HTML of an Upwork job page
    """
    if not is_job_url(request.url):
        return AssistantResponse(ok=False, error=NOT_A_JOB_PAGE)

    try:
        job = extract_job(request.html, request.url)
    except EmptyDocumentError as e:
        logging.warning(f"Nothing to extract from {request.url}: {str(e)}")
        return _failure(e)

    if request.tab_id is not None:
        app_state["snapshot_store"].put(request.tab_id, job)

    return AssistantResponse(ok=True, type="ACTIVE_JOB", job=job)

@app.get("/api/tabs/{tab_id}/job", response_model=AssistantResponse, response_model_exclude_none=True)
async def get_tab_job(tab_id: int):
    """Latest snapshot extracted for a tab"""
    job = app_state["snapshot_store"].get(tab_id)
    if job is None:
        return AssistantResponse(ok=False, error=NO_SNAPSHOT)
    return AssistantResponse(ok=True, type="ACTIVE_JOB", job=job)

@app.delete("/api/tabs/{tab_id}", response_model=AssistantResponse, response_model_exclude_none=True)
async def evict_tab(tab_id: int):
    """Forget a tab's snapshot when the tab closes"""
    removed = app_state["snapshot_store"].evict(tab_id)
    return AssistantResponse(ok=True, message="Snapshot removed." if removed else "No snapshot stored.")

@app.post("/api/preview", response_model=AssistantResponse, response_model_exclude_none=True)
async def preview(request: PreviewRequest):
    return AssistantResponse(ok=True, type="PREVIEW", preview=format_job_preview(request.job))

@app.post("/api/analyze", response_model=AssistantResponse, response_model_exclude_none=True)
async def analyze(request: AnalyzeRequest):
    """
    Analyze a job with the configured or requested provider
    """
    try:
        job = _resolve_job(request.job, request.tab_id)
        result = await _processor().analyze_job(job, provider=request.provider, api_key=request.api_key)
    except (ProviderError, ValueError) as e:
        logging.error(f"Analysis failed: {str(e)}")
        return _failure(e)

    return AssistantResponse(ok=True, type="ANALYSIS", result=result)

@app.post("/api/test-connection", response_model=AssistantResponse, response_model_exclude_none=True)
async def connection_test(request: ConnectionTestRequest):
    """Check that a provider accepts the key"""
    try:
        message = await _processor().test_connection(provider=request.provider, api_key=request.api_key)
    except (ProviderError, ValueError) as e:
        logging.error(f"Connection test failed: {str(e)}")
        return _failure(e)

    return AssistantResponse(ok=True, type="CONNECTION_TEST", message=message)

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
