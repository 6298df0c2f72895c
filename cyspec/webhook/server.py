"""FastAPI webhook exposing the pipeline to n8n-style workflow tools.

Routes:
  POST /webhook/cypress-agent    run a repository through the pipeline
  GET  /webhook/status           liveness and version
  GET  /webhook/generated-specs  list spec files in the output directory

Start with ``cyspec n8n`` or ``uvicorn cyspec.webhook.server:create_app --factory``.
"""

from __future__ import annotations

import logging
import secrets
import time
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cyspec import __version__
from cyspec.analyzers.models import utc_now_iso
from cyspec.core.pipeline import CypressAgent, create_agent

logger = logging.getLogger("cyspec.webhook")

SERVICE_NAME = "cyspec Cypress agent"


def _request_id() -> str:
    return f"req-{int(time.time() * 1000)}-{secrets.token_hex(5)}"


def _elapsed_ms(started: float) -> str:
    return f"{int((time.monotonic() - started) * 1000)}ms"


def create_app(agent: Optional[CypressAgent] = None) -> FastAPI:
    """Build the webhook application around ``agent`` (created from config if omitted)."""
    app = FastAPI(title=SERVICE_NAME, version=__version__)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
    app.state.agent = agent

    def get_agent() -> CypressAgent:
        if app.state.agent is None:
            app.state.agent = create_agent()
        return app.state.agent

    @app.post("/webhook/cypress-agent")
    def run_agent(body: dict):
        started = time.monotonic()
        request_id = _request_id()
        logger.info("[%s] Request received", request_id)

        github_url = body.get("githubUrl")
        if not github_url:
            return JSONResponse(
                status_code=400,
                content={"success": False, "error": "githubUrl is required", "requestId": request_id},
            )

        project_name = body.get("projectName")
        trigger_type = body.get("triggerType") or "manual"
        logger.info("[%s] Processing %s", request_id, github_url)

        try:
            current = get_agent()
            result = current.process_repository(github_url)
        except Exception as e:
            logger.error("[%s] Error: %s", request_id, e)
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": str(e),
                    "requestId": request_id,
                    "processingTime": _elapsed_ms(started),
                },
            )

        if result.success:
            output = {
                "projectAnalysis": {
                    "type": result.analysis.project_type,
                    "framework": result.analysis.framework,
                    "hasCypress": result.cypress_check.has_cypress_dependency,
                },
                "generatedSpecs": {
                    "total": result.spec_summary.total_specs,
                    "types": result.spec_summary.spec_types,
                    "estimatedTime": result.spec_summary.estimated_execution_time,
                },
                "outputPath": result.output_path,
                "tempPath": result.temp_path,
                "files": [f.to_dict() for f in current.list_generated_files()],
                "summary": (
                    f"Generated {result.spec_summary.total_specs} specs "
                    f"for {result.analysis.project_type}"
                ),
            }
        else:
            output = {"error": result.error}

        processing_time = _elapsed_ms(started)
        logger.info("[%s] Finished in %s (success=%s)", request_id, processing_time, result.success)
        return JSONResponse(
            status_code=200 if result.success else 500,
            content={
                "success": result.success,
                "requestId": request_id,
                "processingTime": processing_time,
                "timestamp": utc_now_iso(),
                "input": {
                    "githubUrl": github_url,
                    "projectName": project_name,
                    "triggerType": trigger_type,
                },
                "output": output,
            },
        )

    @app.get("/webhook/status")
    def status():
        return {
            "status": "active",
            "service": SERVICE_NAME,
            "version": __version__,
            "timestamp": utc_now_iso(),
        }

    @app.get("/webhook/generated-specs")
    def generated_specs():
        try:
            files = get_agent().list_generated_files()
        except Exception as e:
            logger.error("Listing generated specs failed: %s", e)
            return JSONResponse(status_code=500, content={"success": False, "error": str(e)})
        return {"success": True, "totalFiles": len(files), "files": [f.to_dict() for f in files]}

    return app


def run_server(host: str, port: int, agent: Optional[CypressAgent] = None) -> None:
    """Serve the webhook with uvicorn until interrupted."""
    agent = agent or create_agent()
    agent.cleanup_stale_clones()
    logger.info("Starting webhook on %s:%d", host, port)
    uvicorn.run(create_app(agent), host=host, port=port, log_level="info")
