"""Tests for the serverless HTTP handlers."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

from liquidvote.models import Topic
from liquidvote.rpc import build_request

from api import aggregate, rpc


def make_request(method: str, body=None):
    request = MagicMock()
    request.method = method
    request.body = json.dumps(body).encode("utf-8") if body is not None else b""
    return request


class TestRPCHandler:
    def test_preflight(self):
        response = rpc.handler(make_request("OPTIONS"))
        assert response["statusCode"] == 204
        assert "POST" in response["headers"]["Access-Control-Allow-Methods"]

    def test_get_not_allowed(self):
        assert rpc.handler(make_request("GET"))["statusCode"] == 405

    def test_calculation(self):
        data = Topic.dummy().to_vote_data()
        body = build_request(data, "plurality").to_dict()
        response = rpc.handler(make_request("POST", body))

        assert response["statusCode"] == 200
        reply = json.loads(response["body"])
        assert reply["id"] == data.request_id()
        assert len(reply["result"]["winners"][0]) == 1

    def test_unknown_method_is_rpc_error(self):
        response = rpc.handler(make_request("POST", {"id": 1, "method": "x", "params": {}}))
        assert response["statusCode"] == 200
        assert json.loads(response["body"])["error"] == "method not found"

    def test_invalid_json(self):
        request = make_request("POST")
        request.body = b"{not json"
        response = rpc.handler(request)
        assert response["statusCode"] == 400
        assert "Invalid JSON" in json.loads(response["body"])["error"]


class TestAggregateHandler:
    def test_lists_modules(self, monkeypatch):
        monkeypatch.setenv("VOTE_MODULES", json.dumps({"liquid": "http://calc"}))
        response = aggregate.handler(make_request("GET"))
        assert response["statusCode"] == 200
        assert json.loads(response["body"]) == {"liquid": "http://calc"}

    def test_bad_module_config(self, monkeypatch):
        monkeypatch.setenv("VOTE_MODULES", "[1, 2]")
        response = aggregate.handler(make_request("GET"))
        assert response["statusCode"] == 500

    def test_fans_out_topic(self, monkeypatch):
        monkeypatch.setenv("VOTE_MODULES", json.dumps({"liquid": "http://calc"}))
        topic = Topic.dummy()
        merged = {"liquid": {"scores": {}}}

        with patch("api.aggregate.fan_out", new=AsyncMock(return_value=merged)) as mock:
            response = aggregate.handler(make_request("POST", topic.to_dict()))

        assert response["statusCode"] == 200
        assert json.loads(response["body"]) == merged
        registry, data = mock.call_args.args
        assert registry.to_dict() == {"liquid": "http://calc"}
        assert data == topic.to_vote_data()

    def test_invalid_topic(self, monkeypatch):
        monkeypatch.delenv("VOTE_MODULES", raising=False)
        body = {"title": "t", "votes": {"stranger": {"x": 1}}}
        response = aggregate.handler(make_request("POST", body))
        assert response["statusCode"] == 400

    def test_put_not_allowed(self, monkeypatch):
        monkeypatch.delenv("VOTE_MODULES", raising=False)
        assert aggregate.handler(make_request("PUT"))["statusCode"] == 405
