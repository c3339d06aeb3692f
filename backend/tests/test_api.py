from fastapi.testclient import TestClient

from backend.converter.main import app
from backend.tests.samples import IPOKER_SAMPLE, dumps, heads_up_checkdown

client = TestClient(app)


def test_health() -> None:
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_convert_batch_content() -> None:
    content = dumps(heads_up_checkdown()) + "\n\nnot a record\n\n" + IPOKER_SAMPLE

    resp = client.post("/api/convert", json={"content": content})
    assert resp.status_code == 200
    payload = resp.json()

    assert payload["handsConverted"] == 2
    assert payload["output"].startswith("PokerStars Hand #1001:")
    assert "PokerStars Hand #lv0irhede81k:" in payload["output"]
    assert [(item["index"], item["error"]) for item in payload["failures"]] == [(1, "MalformedRecord")]
    assert payload["warnings"] == []


def test_convert_single_hand() -> None:
    resp = client.post("/api/convert/hand", json={"content": IPOKER_SAMPLE})
    assert resp.status_code == 200
    payload = resp.json()

    assert payload["handId"] == "lv0irhede81k"
    assert "DubNation collected 3.97 from pot" in payload["output"]
    assert payload["warnings"] == []


def test_convert_single_hand_reports_error_kind() -> None:
    payload = heads_up_checkdown()
    payload["game_type"] = "Badugi"

    resp = client.post("/api/convert/hand", json={"content": dumps(payload)})
    assert resp.status_code == 422
    body = resp.json()
    assert body["error"] == "UnsupportedVariant"
    assert "Badugi" in body["message"]


def test_empty_content_is_rejected() -> None:
    resp = client.post("/api/convert", json={"content": ""})
    assert resp.status_code == 422
