import asyncio
import json

import httpx
import pytest

from db.config import OracleSettings
from extraction.oracle import ExtractionOracle, parse_attributes, prepare_image_part
from inspections.errors import ExtractionError


PHOTO = "data:image/png;base64," + "A" * 120


def _settings(**overrides):
    values = {"api_key": "test-key", "model": "test-model", "base_url": "https://oracle.test/v1beta"}
    values.update(overrides)
    return OracleSettings(**values)


def _gemini_response(payload: dict | str) -> dict:
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _oracle(handler, **settings):
    return ExtractionOracle(settings=_settings(**settings), transport=httpx.MockTransport(handler))


def test_extract_parses_and_sanitizes_response():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["key"] = request.headers.get("x-goog-api-key")
        seen["body"] = json.loads(request.content)
        fenced = "```json\n" + json.dumps(
            {
                "razaoSocial": "laticinios sul",
                "cnpj": ["12.345.678/0001-99"],
                "site": "WWW.SUL.COM",
                "formatoEmbalagem": "cilíndrico",
                "moldagem": "injetado",
            }
        ) + "\n```"
        return httpx.Response(200, json=_gemini_response(fenced))

    attributes = asyncio.run(_oracle(handler).extract([PHOTO, "", "short"]))

    assert seen["url"] == "https://oracle.test/v1beta/models/test-model:generateContent"
    assert seen["key"] == "test-key"
    parts = seen["body"]["contents"][0]["parts"]
    assert len(parts) == 2  # one usable photo plus the prompt
    assert parts[0]["inline_data"]["mime_type"] == "image/png"
    assert attributes.legal_name == "LATICINIOS SUL"
    assert attributes.website == "www.sul.com"
    assert attributes.shape == "REDONDO"
    assert attributes.molding == "INJETADO"


def test_http_error_becomes_extraction_error():
    def handler(request):
        return httpx.Response(503, json={"error": "overloaded"})

    with pytest.raises(ExtractionError) as excinfo:
        asyncio.run(_oracle(handler).extract([PHOTO]))
    assert "503" in excinfo.value.reason


def test_timeout_becomes_extraction_error():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(ExtractionError) as excinfo:
        asyncio.run(_oracle(handler, timeout_seconds=5).extract([PHOTO]))
    assert "timed out" in excinfo.value.reason


def test_connection_failure_becomes_extraction_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ExtractionError) as excinfo:
        asyncio.run(_oracle(handler).extract([PHOTO]))
    assert "unreachable" in excinfo.value.reason


def test_no_usable_photos_fails_before_calling_service():
    def handler(request):  # pragma: no cover
        raise AssertionError("service must not be called")

    with pytest.raises(ExtractionError):
        asyncio.run(_oracle(handler).extract(["", "tiny"]))


def test_missing_api_key_fails():
    def handler(request):  # pragma: no cover
        raise AssertionError("service must not be called")

    with pytest.raises(ExtractionError):
        asyncio.run(_oracle(handler, api_key="").extract([PHOTO]))


def test_all_sentinel_output_is_not_usable():
    def handler(request):
        return httpx.Response(200, json=_gemini_response({"razaoSocial": "N/I", "cnpj": ["N/I"]}))

    with pytest.raises(ExtractionError) as excinfo:
        asyncio.run(_oracle(handler).extract([PHOTO]))
    assert "no usable data" in excinfo.value.reason


def test_parse_attributes_rejects_malformed_payloads():
    for text in (None, "", "not json", "[1, 2]"):
        with pytest.raises(ExtractionError):
            parse_attributes(text)


def test_prepare_image_part_defaults_to_jpeg():
    part = prepare_image_part("QUJD")
    assert part == {"inline_data": {"mime_type": "image/jpeg", "data": "QUJD"}}
