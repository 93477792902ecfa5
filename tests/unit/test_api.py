import httpx
import pytest
from fastapi.testclient import TestClient

from drug_label_explorer.api import APIResponse, create_app
from tests.fixtures.mock_label_responses import IBUPROFEN_LABEL, WARFARIN_LABEL, label_payload


@pytest.fixture
def make_client(fresh_config, mock_client):
    def build(handler=None):
        handler = handler or (lambda request: httpx.Response(200, json=label_payload([WARFARIN_LABEL, IBUPROFEN_LABEL])))
        app = create_app(fresh_config, client=mock_client(handler))
        return app, TestClient(app)

    return build


def test_health(make_client):
    _, client = make_client()

    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["status"] == "ok"
    assert body["timestamp"]


def test_root_lists_endpoints(make_client):
    _, client = make_client()

    body = client.get("/").json()

    assert "/rag/ae-pipeline" in body["data"]["endpoints"]
    assert body["data"]["name"] == "Drug Label Explorer"


def test_search_drug_labels(make_client):
    seen = {}

    def handler(request):
        seen.update(request.url.params)
        return httpx.Response(200, json=label_payload([WARFARIN_LABEL], total=5))

    _, client = make_client(handler)

    body = client.get("/drug-labels", params={"search": "warfarin", "limit": 1}).json()

    assert seen == {"search": "warfarin", "limit": "1"}
    assert body["success"] is True
    assert body["data"]["results_count"] == 1
    assert body["message"] == "Found 1 labels"


def test_search_limit_is_validated(make_client):
    _, client = make_client()

    assert client.get("/drug-labels", params={"limit": 0}).status_code == 422
    assert client.get("/drug-labels", params={"skip": -1}).status_code == 422


def test_search_accepts_limit_up_to_200(make_client):
    seen = {}

    def handler(request):
        seen.update(request.url.params)
        return httpx.Response(200, json=label_payload([WARFARIN_LABEL]))

    _, client = make_client(handler)

    assert client.get("/drug-labels", params={"limit": 200}).status_code == 200
    assert seen["limit"] == "200"
    assert client.get("/drug-labels", params={"limit": 201}).status_code == 422


@pytest.mark.parametrize(
    "path,key",
    [
        ("/drug/warfarin/adverse-reactions", "adverse_reactions_data"),
        ("/drug/warfarin/warnings", "warnings_data"),
        ("/drug/warfarin/indications", "indications_data"),
    ],
)
def test_drug_section_routes(make_client, path, key):
    _, client = make_client()

    response = client.get(path, params={"limit": 2})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["query"] == "warfarin"
    assert data[key][0]["drug_name"] == "Coumadin"


def test_upstream_failure_maps_to_502(make_client):
    _, client = make_client(lambda request: httpx.Response(400, json={"error": "bad"}))

    response = client.get("/drug/warfarin/warnings")

    assert response.status_code == 502
    assert "OpenFDA API error (400)" in response.json()["detail"]


def test_unexpected_failure_maps_to_500(make_client, monkeypatch):
    app, client = make_client()

    async def broken(drug_name, limit=3):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(app.state.service, "get_indications", broken)

    response = client.get("/drug/warfarin/indications")

    assert response.status_code == 500
    assert response.json()["detail"] == "unexpected"


def test_ae_pipeline_route(make_client):
    _, client = make_client()

    response = client.post("/rag/ae-pipeline", json={"drug": "warfarin", "query": "bleeding", "top_k": 2})

    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data["top_chunks"]) == 2
    assert data["drug"] == "warfarin"
    assert "condition" not in data
    assert data["citations"]


def test_ae_pipeline_without_criteria(make_client):
    _, client = make_client()

    data = client.post("/rag/ae-pipeline", json={}).json()["data"]

    assert data["top_chunks"] == []
    assert data["summary"].startswith("Please provide a drug name")


def test_ae_pipeline_validates_arguments(make_client):
    _, client = make_client()

    assert client.post("/rag/ae-pipeline", json={"drug": "x", "top_k": 20}).status_code == 422
    assert client.post("/rag/ae-pipeline", json={"drug": "x", "filters": {"limit": 101}}).status_code == 422


def test_ae_pipeline_upstream_failure(make_client):
    _, client = make_client(lambda request: httpx.Response(400, json={"error": "bad"}))

    response = client.post("/rag/ae-pipeline", json={"drug": "warfarin"})

    assert response.status_code == 502
    assert "RAG pipeline failed" in response.json()["detail"]


def test_api_response_defaults():
    response = APIResponse(success=False, error="boom")

    assert response.data is None
    assert response.timestamp
