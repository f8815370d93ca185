"""
Intake Server

FastAPI server for nomination submissions.

Endpoints (each mounted at /nominate and /api/nominate):
- POST: Submit a nomination
- GET: Diagnostics (configuration presence + live CloudKit test write)
- PUT/PATCH/DELETE/HEAD/OPTIONS: 405

- GET /health: Health check

Pipeline:
1. Parse JSON body
2. Validate and sanitize
3. Generate showrunner insights (optional)
4. Format Slack message
5. Send to Slack and CloudKit concurrently
6. Report one aggregated outcome
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from ..common.config import load_config, NominationsConfig
from .orchestrator import IntakeOrchestrator

logger = logging.getLogger("nominations.intake.server")


# Global state
config: Optional[NominationsConfig] = None
orchestrator: Optional[IntakeOrchestrator] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize components on startup"""
    global config, orchestrator

    print("[Intake] Starting up...")

    load_dotenv()
    config = load_config()
    orchestrator = IntakeOrchestrator(config)

    print(f"[Intake] Slack webhook {'configured' if orchestrator.notifier.is_configured else 'NOT configured'}")
    if orchestrator.insight_generator.is_available:
        print(f"[Intake] AI insights ready ({config.llm.provider}: {config.llm.model_for()})")
    else:
        print("[Intake] AI insights disabled (no API key)")
    if orchestrator.record_store.is_configured:
        print(f"[Intake] CloudKit ready (environment: {orchestrator.record_store.environment})")
    else:
        print("[Intake] CloudKit not configured (records will not be stored)")

    print("[Intake] Ready to receive nominations")

    yield

    print("[Intake] Shutting down...")


app = FastAPI(
    title="Nominations Intake",
    description="Nomination intake with Slack notification, AI insights and CloudKit storage",
    version="0.1.0",
    lifespan=lifespan,
)

router = APIRouter()


def _require_orchestrator() -> IntakeOrchestrator:
    if not orchestrator:
        raise HTTPException(status_code=503, detail="Intake not initialized")
    return orchestrator


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/nominate")
async def submit_nomination(request: Request):
    """
    Accept a nomination.

    Malformed JSON is passed on as None so the orchestrator can apply its
    checks in order (configuration first, then body).
    """
    intake = _require_orchestrator()

    body = await request.body()
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError):
        payload = None

    result = await intake.submit(payload)
    return JSONResponse(result.to_response(), status_code=result.status_code)


@router.get("/nominate")
async def nomination_diagnostics():
    """Report configuration presence and run a CloudKit test write"""
    intake = _require_orchestrator()
    return await intake.diagnose()


@router.api_route("/nominate", methods=["PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"])
async def method_not_allowed():
    return JSONResponse({"success": False, "error": "Method not allowed"}, status_code=405)


app.include_router(router)
app.include_router(router, prefix="/api")


@app.get("/health")
async def health():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "nominations-intake",
        "initialized": orchestrator is not None,
        "slack_configured": orchestrator.notifier.is_configured if orchestrator else False,
        "insights_available": orchestrator.insight_generator.is_available if orchestrator else False,
        "cloudkit_configured": orchestrator.record_store.is_configured if orchestrator else False,
    }


# =============================================================================
# CLI Entry Point
# =============================================================================

def run_server():
    """Run the intake server"""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    load_dotenv()
    config = load_config()

    print(f"[Intake] Starting server on {config.server.host}:{config.server.port}")
    uvicorn.run(
        "nominations.intake.server:app",
        host=config.server.host,
        port=config.server.port,
        reload=False,
    )


if __name__ == "__main__":
    run_server()
