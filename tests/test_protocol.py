"""Tests for envelope parsing and response encoding."""

from __future__ import annotations

import json

import pytest

from planka_mcp.errors import InvalidRequest, ParseError
from planka_mcp.protocol import Request, encode, error_response, parse_message, success_response


class TestParseMessage:
    def test_full_request(self) -> None:
        req = parse_message('{"protocol_version":"1.0","method":"list_cards","params":{"board_id":"B1"},"id":7}')
        assert req == Request(method="list_cards", params={"board_id": "B1"}, id=7)
        assert not req.is_notification

    def test_params_default_to_empty(self) -> None:
        req = parse_message('{"protocol_version":"1.0","method":"ping","id":"a"}')
        assert req.params == {}
        assert req.id == "a"

    def test_missing_id_is_notification(self) -> None:
        assert parse_message('{"protocol_version":"1.0","method":"ping"}').is_notification

    def test_null_id_is_notification(self) -> None:
        assert parse_message('{"protocol_version":"1.0","method":"ping","id":null}').is_notification

    def test_invalid_json(self) -> None:
        with pytest.raises(ParseError):
            parse_message("{not json")

    def test_non_object(self) -> None:
        with pytest.raises(InvalidRequest) as exc_info:
            parse_message("[1, 2]")
        assert exc_info.value.request_id is None

    def test_bool_id_rejected_without_echo(self) -> None:
        with pytest.raises(InvalidRequest) as exc_info:
            parse_message('{"protocol_version":"1.0","method":"ping","id":true}')
        assert exc_info.value.request_id is None

    def test_wrong_version_keeps_id(self) -> None:
        with pytest.raises(InvalidRequest) as exc_info:
            parse_message('{"protocol_version":"2.0","method":"ping","id":3}')
        assert exc_info.value.request_id == 3

    @pytest.mark.parametrize("method", ['""', "42", "null"])
    def test_bad_method(self, method: str) -> None:
        with pytest.raises(InvalidRequest) as exc_info:
            parse_message(f'{{"protocol_version":"1.0","method":{method},"id":"x"}}')
        assert exc_info.value.request_id == "x"

    def test_params_must_be_object(self) -> None:
        with pytest.raises(InvalidRequest, match="params"):
            parse_message('{"protocol_version":"1.0","method":"ping","params":[1],"id":1}')

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity", "1e400"])
    def test_non_finite_numbers_are_parse_errors(self, literal: str) -> None:
        with pytest.raises(ParseError):
            parse_message(f'{{"protocol_version":"1.0","method":"ping","id":{literal}}}')

    def test_utf8_bytes(self) -> None:
        req = parse_message('{"protocol_version":"1.0","method":"create_card","params":{"name":"T\u00e4sk"},"id":1}'.encode())
        assert req.params == {"name": "T\u00e4sk"}

    def test_invalid_utf8_is_parse_error(self) -> None:
        with pytest.raises(ParseError):
            parse_message(b'{"protocol_version":"1.0","method":"ping","params":{"name":"T\xff\xfe"},"id":1}')


class TestEncode:
    def test_success_is_one_compact_line(self) -> None:
        line = encode(success_response(1, {"name": "Täsk"}))
        assert line.endswith("\n")
        assert line.count("\n") == 1
        assert "Täsk" in line
        assert json.loads(line) == {"protocol_version": "1.0", "result": {"name": "Täsk"}, "id": 1}

    def test_error_carries_id(self) -> None:
        line = encode(error_response("abc", {"code": -32601, "message": "Method not found: nope"}))
        data = json.loads(line)
        assert data["id"] == "abc"
        assert data["error"]["code"] == -32601
        assert "result" not in data

    def test_embedded_newlines_are_escaped(self) -> None:
        line = encode(success_response(1, {"description": "line one\nline two"}))
        assert line.count("\n") == 1

    def test_non_finite_result_rejected(self) -> None:
        with pytest.raises(ValueError):
            encode(success_response(1, {"position": float("nan")}))
