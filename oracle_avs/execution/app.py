from __future__ import annotations

from typing import Optional, Sequence

import bittensor as bt
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from oracle_avs import __version__
from oracle_avs.errors import AvsError
from oracle_avs.execution.coordinator import TaskCoordinator
from oracle_avs.lifecycle import Closer, add_cors, closing_lifespan
from oracle_avs.protocol import ExecuteAgentRequest, ExecuteTaskRequest


def _unavailable(message: str) -> JSONResponse:
    return JSONResponse(status_code=503, content=message)


def create_app(coordinator: TaskCoordinator, *, closers: Sequence[Closer] = ()) -> FastAPI:
    app = FastAPI(
        title="oracle-avs Execution Service",
        version=__version__,
        lifespan=closing_lifespan(closers),
    )
    add_cors(app)
    app.state.coordinator = coordinator

    @app.get("/healthz")
    def healthz():
        return {
            "ok": True,
            "performer_address": coordinator.signer.address,
            "symbol": coordinator.symbol,
        }

    @app.post("/task/execute")
    async def execute_task(payload: Optional[ExecuteTaskRequest] = None):
        task_definition_id = payload.task_definition_id if payload is not None else 0
        bt.logging.info(f"Executing Task (taskDefinitionId={task_definition_id})")
        try:
            await coordinator.execute_oracle(task_definition_id)
        except AvsError as exc:
            return _unavailable(f"Task execution failed: {exc}")
        return "Task executed successfully"

    @app.post("/task/execute-agent")
    async def execute_agent(payload: ExecuteAgentRequest):
        bt.logging.info(f"Executing Agent (taskDefinitionId={payload.task_definition_id})")
        try:
            execution = await coordinator.execute_agent(payload.context(), payload.task_definition_id)
        except AvsError as exc:
            return _unavailable(f"Error calling farming agent: {exc}")
        return {"status": "success", "data": {"response": execution.response.response}}

    return app
