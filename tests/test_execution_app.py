from __future__ import annotations

from typing import List

import httpx
import pytest
from fastapi.testclient import TestClient

from oracle_avs.agents.base import ChatAgent, ChatResponse
from oracle_avs.agents.farming import StableYieldFarmingAgent
from oracle_avs.agents.openai_agent import OpenAIChatAgent
from oracle_avs.crypto.signer import Signer
from oracle_avs.errors import ConfigurationError, RpcError, UpstreamError
from oracle_avs.execution.app import create_app
from oracle_avs.execution.coordinator import TaskCoordinator
from oracle_avs.oracle.price_source import PriceSource
from oracle_avs.protocol import PriceQuote, TaskProof

DEV_KEY = "ac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
DEV_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


class StaticPriceSource(PriceSource):
    def __init__(self, price="2000.00", fail=False):
        self.price = price
        self.fail = fail

    async def get_price(self, symbol):
        if self.fail:
            raise UpstreamError("price source down")
        return PriceQuote(symbol=symbol, price=self.price)


class FixedReplyAgent(ChatAgent):
    async def chat(self, messages):
        return ChatResponse(input_prompt="prompt", response="hold 50% ETH, short on Binance")


class RecordingSubmitter:
    def __init__(self, error=None):
        self.sent: List[TaskProof] = []
        self.error = error

    async def send_task(self, proof):
        self.sent.append(proof)
        if self.error is not None:
            raise self.error
        return True


def _no_key(model_name):
    raise ConfigurationError("OpenAI API key not configured")


def _client(*, price_source=None, submitter=None, agents=None):
    submitter = submitter or RecordingSubmitter()
    coordinator = TaskCoordinator(
        signer=Signer(DEV_KEY),
        submitter=submitter,
        price_source=price_source or StaticPriceSource(),
        agents=agents or (lambda model: StableYieldFarmingAgent(FixedReplyAgent())),
        symbol="ETHUSDT",
    )
    return TestClient(create_app(coordinator)), submitter


def test_healthz_reports_performer():
    client, _ = _client()
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["performer_address"] == DEV_ADDRESS


def test_execute_submits_price_proof():
    client, submitter = _client()
    r = client.post("/task/execute", json={"taskDefinitionId": 3})

    assert r.status_code == 200
    assert r.json() == "Task executed successfully"
    [proof] = submitter.sent
    assert proof.proof_of_task == "2000.00"
    assert proof.task_definition_id == 3


def test_execute_defaults_task_definition_id_to_zero():
    client, submitter = _client()
    assert client.post("/task/execute", json={}).status_code == 200
    assert client.post("/task/execute").status_code == 200
    assert [p.task_definition_id for p in submitter.sent] == [0, 0]


def test_execute_rejects_out_of_range_task_id():
    client, submitter = _client()
    r = client.post("/task/execute", json={"taskDefinitionId": 2**31})
    assert r.status_code == 422
    assert submitter.sent == []


def test_execute_price_failure_is_service_unavailable():
    client, submitter = _client(price_source=StaticPriceSource(fail=True))
    r = client.post("/task/execute", json={})
    assert r.status_code == 503
    assert "price source down" in r.json()
    assert submitter.sent == []


def test_execute_rpc_failure_is_service_unavailable():
    client, _ = _client(submitter=RecordingSubmitter(error=RpcError(1, "m")))
    r = client.post("/task/execute", json={})
    assert r.status_code == 503
    assert "RPC Error 1: m" in r.json()


def test_execute_agent_returns_strategy():
    client, submitter = _client()
    r = client.post(
        "/task/execute-agent",
        json={"taskDefinitionId": 1, "prices": "ETH: 2000", "portfolio": "10 ETH", "model_name": "gpt-4o"},
    )

    assert r.status_code == 200
    assert r.json() == {"status": "success", "data": {"response": "hold 50% ETH, short on Binance"}}
    [proof] = submitter.sent
    assert proof.result == b"hold 50% ETH, short on Binance"


def test_execute_agent_submission_failure_is_service_unavailable():
    client, _ = _client(submitter=RecordingSubmitter(error=UpstreamError("aggregator down")))
    r = client.post(
        "/task/execute-agent",
        json={"prices": "ETH: 2000", "portfolio": "10 ETH", "model_name": "gpt-4o"},
    )
    assert r.status_code == 503


def test_execute_agent_without_api_key_is_service_unavailable():
    client, submitter = _client(agents=_no_key)
    r = client.post(
        "/task/execute-agent",
        json={"prices": "ETH: 2000", "portfolio": "10 ETH", "model_name": "gpt-4o"},
    )
    assert r.status_code == 503
    assert "API key" in r.json()
    assert submitter.sent == []


def test_execute_agent_requires_inputs():
    client, _ = _client()
    r = client.post("/task/execute-agent", json={"prices": "ETH: 2000"})
    assert r.status_code == 422


def _llm_backed_agents(handler):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))

    def agents(model_name):
        return StableYieldFarmingAgent(
            OpenAIChatAgent("sk-test", model_name, base_url="http://llm/v1", client=http)
        )

    return agents


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="overloaded"),
        httpx.Response(200, json={"choices": ["oops"]}),
        httpx.Response(200, json={"choices": {"a": 1}}),
        httpx.Response(200, json={"choices": [{"message": "plain string"}]}),
    ],
)
def test_execute_agent_language_model_failure_is_service_unavailable(response):
    client, submitter = _client(agents=_llm_backed_agents(lambda request: response))
    r = client.post(
        "/task/execute-agent",
        json={"prices": "ETH: 2000", "portfolio": "10 ETH", "model_name": "gpt-4o"},
    )
    assert r.status_code == 503
    assert r.json().startswith("Error calling farming agent:")
    assert submitter.sent == []


def test_execute_agent_with_language_model_backend_submits_strategy():
    reply = {"choices": [{"message": {"role": "assistant", "content": "lend USDC on Aave"}}]}
    client, submitter = _client(agents=_llm_backed_agents(lambda request: httpx.Response(200, json=reply)))
    r = client.post(
        "/task/execute-agent",
        json={"taskDefinitionId": 2, "prices": "ETH: 2000", "portfolio": "10 ETH", "model_name": "gpt-4o"},
    )
    assert r.status_code == 200
    assert r.json()["data"]["response"] == "lend USDC on Aave"
    [proof] = submitter.sent
    assert proof.result == b"lend USDC on Aave"
    assert proof.task_definition_id == 2
