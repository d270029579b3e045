import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from services.webapp.responders import JsonDataResponder


@pytest.fixture
def counting_producer():
    calls = {"count": 0}

    def producer():
        calls["count"] += 1
        return '{"call": %d}' % calls["count"]

    producer.calls = calls
    return producer


@pytest.fixture
def client(counting_producer):
    app = FastAPI()
    JsonDataResponder(counting_producer, product="mapweb", version="1.2.3").mount(
        app, "/settings.json"
    )
    return TestClient(app)


def test_response_headers_and_body(client):
    response = client.get("/settings.json")

    assert response.status_code == 200
    assert response.headers["server"] == "mapweb v1.2.3"
    assert response.headers["cache-control"] == "no-cache"
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {"call": 1}


def test_producer_is_invoked_per_request(client, counting_producer):
    client.get("/settings.json")
    second = client.get("/settings.json")

    assert second.json() == {"call": 2}
    assert counting_producer.calls["count"] == 2


@pytest.mark.parametrize("method", ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
def test_request_method_and_query_are_ignored(client, method):
    response = client.request(method, "/settings.json?map=nether&refresh=1")

    assert response.status_code == 200
    assert response.headers["cache-control"] == "no-cache"
    assert response.json() == {"call": 1}


def test_head_request_is_answered(client):
    response = client.head("/settings.json")

    assert response.status_code == 200
    assert response.headers["server"] == "mapweb v1.2.3"


def test_handle_without_router(counting_producer, mocker):
    responder = JsonDataResponder(counting_producer, product="mapweb", version="0.1.0")

    response = responder.handle(mocker.MagicMock())

    assert response.status_code == 200
    assert response.body == b'{"call": 1}'
    assert response.headers["server"] == "mapweb v0.1.0"
