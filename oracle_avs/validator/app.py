from __future__ import annotations

from typing import Any, Dict, Sequence

import bittensor as bt
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from oracle_avs import __version__
from oracle_avs.errors import AvsError
from oracle_avs.lifecycle import Closer, add_cors, closing_lifespan
from oracle_avs.protocol import ValidateAgentRequest, ValidateRequest
from oracle_avs.validator.coordinator import VoteCoordinator


def _error(data: Dict[str, Any], message: str) -> JSONResponse:
    # "Could not judge" is never reported as a false verdict.
    return JSONResponse(status_code=500, content={"data": data, "error": True, "message": message})


def create_app(coordinator: VoteCoordinator, *, closers: Sequence[Closer] = ()) -> FastAPI:
    app = FastAPI(
        title="oracle-avs Validation Service",
        version=__version__,
        lifespan=closing_lifespan(closers),
    )
    add_cors(app)
    app.state.coordinator = coordinator

    @app.get("/healthz")
    def healthz():
        return {
            "ok": True,
            "symbol": coordinator.bound.symbol,
            "similarity_threshold": coordinator.similarity.threshold,
        }

    @app.post("/task/validate")
    async def validate_task(payload: ValidateRequest):
        try:
            verdict = await coordinator.vote(payload.proof_of_task)
        except AvsError as exc:
            bt.logging.error(f"Validation error: {exc}")
            return _error({}, "Error during validation step")
        return {"data": {"result": verdict.approved}, "message": "Task validated successfully"}

    @app.post("/task/validate-agent")
    async def validate_agent_task(payload: ValidateAgentRequest):
        ids = {"task_definition_id": payload.task_definition_id, "model_name": payload.model_name}
        try:
            verdict = await coordinator.vote_agent(
                payload.context(), payload.agent_response, payload.task_definition_id
            )
        except AvsError as exc:
            bt.logging.error(f"Error generating validation strategy: {exc}")
            return _error(ids, f"Error during strategy generation: {exc}")

        score = verdict.score if verdict.score is not None else 0.0
        threshold = verdict.threshold if verdict.threshold is not None else coordinator.similarity.threshold
        return {
            "data": {
                "result": verdict.approved,
                **ids,
                "validation_details": {
                    "similarity_score": score,
                    "threshold": threshold,
                    "meets_threshold": score >= threshold,
                },
            },
            "message": "Agent response validated successfully",
        }

    return app
