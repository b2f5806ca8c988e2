import json
import uuid
from datetime import datetime, timezone

from app.api.utils import response_payloads


def _get_json(response):
    """Decode a Starlette/JSONResponse body into a Python dict."""
    # response.body is bytes
    return json.loads(response.body.decode())


def test_success_response_with_data():
    resp = response_payloads.success_response(200, "OK", {"id": 1})
    assert resp.status_code == 200
    body = _get_json(resp)
    assert body["status"] == "SUCCESS"
    assert body["status_code"] == 200
    assert body["message"] == "OK"
    assert body["data"] == {"id": 1}


def test_success_response_no_data():
    resp = response_payloads.success_response(200, "No data")
    body = _get_json(resp)
    assert body["data"] == {}


def test_success_response_encodes_uuid_and_datetime():
    entry_id = uuid.uuid4()
    created = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    resp = response_payloads.success_response(201, "Created", {"id": entry_id, "at": created})

    body = _get_json(resp)
    assert body["data"]["id"] == str(entry_id)
    assert body["data"]["at"].startswith("2024-01-02T03:04:05")


def test_error_response():
    resp = response_payloads.error_response(
        status_code=400, message="Bad Request", errors={"email": ["invalid"]}
    )
    assert resp.status_code == 400
    body = _get_json(resp)
    assert body["error"] == "ERROR"
    assert body["message"] == "Bad Request"
    assert body["status_code"] == 400
    assert body["errors"] == {"email": ["invalid"]}
