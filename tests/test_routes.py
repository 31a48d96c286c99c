import pytest
from fastapi.testclient import TestClient

from fakes import PNEUMONIA_PAYLOAD, FakeOpenAI, function_call_response, png_bytes, text_response
from main import create_app
from utils.config import Settings


@pytest.fixture
def settings(tmp_path):
    return Settings(database_dir=str(tmp_path / "database"), enhancement_delay=0, log_level="DEBUG")


@pytest.fixture
def openai_client():
    return FakeOpenAI()


@pytest.fixture
def client(settings, openai_client):
    with TestClient(create_app(settings, openai_client=openai_client)) as test_client:
        yield test_client


def upload(client, name="xray.png", content=None, content_type="image/png"):
    return client.post("/analysis/upload", files={"file": (name, content or png_bytes(), content_type)})


def test_health_reports_empty_history(client):
    body = client.get("/health").json()

    assert body == {"ok": True, "history_records": 0, "openai_available": True}
    assert client.get("/history").json() == []


def test_upload_validation_errors(client):
    assert upload(client, "notes.txt", b"hello", "text/plain").status_code == 415
    assert client.get("/analysis").json()["error"] == "Please upload a valid image file (PNG, JPG, JPEG)."

    too_big = b"\0" * (5 * 1024 * 1024)
    assert upload(client, content=too_big).status_code == 413
    assert client.get("/analysis").json()["state"] == "IDLE"


def test_analyze_without_upload_conflicts(client):
    assert client.post("/analysis/analyze").status_code == 409


def test_full_analysis_flow(client, openai_client):
    openai_client.responses.push(function_call_response(PNEUMONIA_PAYLOAD))
    openai_client.responses.push(text_response("Pneumonia is a lung infection."))

    uploaded = upload(client).json()
    assert uploaded["state"] == "UPLOADING"
    assert uploaded["preview"].startswith("data:image/png;base64,")

    done = client.post("/analysis/analyze", params={"wait": "true"}).json()
    assert done["state"] == "COMPLETE"
    assert done["enhanced"] is True
    record_id = done["result"]["id"]

    rows = client.get("/history").json()
    assert [row["id"] for row in rows] == [record_id]
    assert "imageUrl" not in rows[0]

    detail = client.get(f"/history/{record_id}").json()
    assert detail["imageUrl"] == uploaded["preview"]
    assert client.get("/views").json()["view"] == "LANDING"

    selected = client.post(f"/history/{record_id}/select").json()
    assert selected["id"] == record_id
    assert client.get("/views").json()["view"] == "DETAIL"

    thumb = client.get(f"/history/{record_id}/thumbnail")
    assert thumb.status_code == 200
    assert thumb.headers["content-type"] == "image/png"

    report = client.get(f"/history/{record_id}/report")
    assert "DIAGNOSIS\n---------\nPneumonia" in report.text
    assert f"neuroscan-report-{record_id}.txt" in report.headers["content-disposition"]

    chat = client.post(f"/history/{record_id}/discuss").json()
    assert "Pneumonia" in chat["messages"][0]["text"]
    assert "88" in chat["messages"][0]["text"]

    transcript = client.post("/chat/messages", json={"text": "What does it mean?"}).json()
    assert [m["role"] for m in transcript["messages"]] == ["assistant", "user", "assistant"]
    assert transcript["messages"][-1]["text"] == "Pneumonia is a lung infection."


def test_failed_analysis_reports_error(client, openai_client):
    openai_client.responses.push(RuntimeError("boom"))
    upload(client)

    done = client.post("/analysis/analyze", params={"wait": "true"}).json()

    assert done["state"] == "ERROR"
    assert done["error"] == "Failed to analyze image. Please try again."
    assert client.get("/history").json() == []
    assert client.post("/analysis/discuss").status_code == 409

    assert client.post("/analysis/reset").json()["state"] == "IDLE"


def test_history_survives_restart(settings, openai_client):
    openai_client.responses.push(function_call_response(PNEUMONIA_PAYLOAD))
    with TestClient(create_app(settings, openai_client=openai_client)) as first:
        upload(first)
        first.post("/analysis/analyze", params={"wait": "true"})
        before = first.get("/history").json()

    with TestClient(create_app(settings, openai_client=FakeOpenAI())) as second:
        assert second.get("/history").json() == before


def test_navigation_and_chat_views(client):
    assert client.get("/views").json()["view"] == "LANDING"
    assert client.get("/chat").status_code == 409
    assert client.post("/views/detail").status_code == 409
    assert client.post("/views/settings").status_code == 404

    state = client.post("/views/chat").json()
    assert state["view"] == "CHAT"
    assert state["conversation"]["messages"][0]["text"].startswith("Hello! I am Dr. Neuro")

    blank = client.post("/chat/messages", json={"text": "   "}).json()
    assert len(blank["messages"]) == 1

    assert client.post("/views/history").json()["conversation"] is None


def test_unknown_record_is_404(client):
    assert client.get("/history/missing").status_code == 404
    assert client.post("/history/missing/select").status_code == 404
    assert client.get("/history/missing/report").status_code == 404
    assert client.post("/history/missing/discuss").status_code == 404


def test_module_exposes_app_for_uvicorn():
    import main

    paths = {route.path for route in main.app.routes}

    assert "/health" in paths
    assert "/history/{record_id}/select" in paths
