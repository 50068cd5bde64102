import json

import pytest

from superchat.api import ChatAPI


@pytest.fixture
def api():
    return ChatAPI()


def _post(api, payload):
    return api.send_message_handler("POST", json.dumps(payload).encode())


def test_send_then_get_returns_messages_in_order(api):
    assert _post(api, {"content": "first"}).status == 200
    assert _post(api, {"content": "second ✨"}).status == 200
    response = api.get_messages_handler("GET")
    assert response.status == 200
    assert response.headers["Content-Type"] == "application/json"
    assert json.loads(response.body) == ["first", "second ✨"]


def test_empty_store_returns_null(api):
    response = api.get_messages_handler("GET")
    assert response.status == 200
    assert response.body == b"null"


@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE"])
def test_send_rejects_other_methods(api, method):
    response = api.send_message_handler(method, b'{"content":"x"}')
    assert response.status == 405
    assert response.body == b"Invalid request method\n"


@pytest.mark.parametrize("method", ["POST", "PATCH"])
def test_get_rejects_other_methods(api, method):
    response = api.get_messages_handler(method)
    assert response.status == 405


@pytest.mark.parametrize("body", [b"{not json", b"[1,2]", b'{"content": 5}', b"NaN"])
def test_invalid_json_rejected(api, body):
    response = api.send_message_handler("POST", body)
    assert response.status == 400
    assert response.body == b"Invalid JSON\n"
    assert json.loads(api.get_messages_handler("GET").body) is None


def test_field_name_matches_case_insensitively(api):
    _post(api, {"Content": "upper"})
    assert json.loads(api.get_messages_handler("GET").body) == ["upper"]


def test_missing_content_stores_empty_message(api):
    _post(api, {"other": "ignored"})
    assert json.loads(api.get_messages_handler("GET").body) == [""]


def test_html_characters_are_escaped(api):
    _post(api, {"content": "<b>&</b>"})
    body = api.get_messages_handler("GET").body
    assert b"<" not in body and b"&" not in body
    assert json.loads(body) == ["<b>&</b>"]