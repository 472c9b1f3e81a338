"""
HTTP trigger tests: func.HttpRequest in, func.HttpResponse out.

Failure responses must carry only fixed text.
"""

import base64
import json
import logging
from unittest.mock import MagicMock

import azure.functions as func
import httpx
import pytest

from config import AppConfig, DeliveryMode
from core.models import RepackageResult
from exceptions import (
    ArchiveFormatError,
    ContractViolationError,
    DecompressionError,
    FetchError,
    OutputWriteError,
    PublishError,
    TruncatedInputError,
)
from triggers.health import HealthCheckTrigger
from triggers.livez import livez_trigger
from services.archive_transcoder import ArchiveTranscoder
from services.naming import build_output_filename, derive_base_name
from services.repackage_service import RepackageService
from services.source_fetcher import SourceFetcher
from triggers.repackage import RepackageTrigger, content_disposition


def _request(body=None, method="POST", headers=None, raw=None):
    payload = raw if raw is not None else (json.dumps(body).encode() if body is not None else b"")
    return func.HttpRequest(
        method=method,
        url="http://localhost/api/repackage",
        headers=headers or {},
        body=payload,
    )


def _json(response):
    return json.loads(response.get_body())


def _inline_result():
    return RepackageResult(
        base_name="file1",
        filename="file1.zip",
        delivery_mode=DeliveryMode.INLINE,
        size_bytes=4,
        entry_count=1,
        content_base64=base64.b64encode(b"PK..").decode(),
    )


@pytest.fixture
def service():
    return MagicMock()


@pytest.fixture
def trigger(service):
    return RepackageTrigger(service_factory=lambda: service)


class TestRepackageSuccess:

    def test_inline_response(self, trigger, service):
        service.repackage.return_value = _inline_result()

        response = trigger.handle_request(_request({"url": "https://example.com/file1.tar.zst"}))

        assert response.status_code == 200
        body = _json(response)
        assert body["filename"] == "file1.zip"
        assert base64.b64decode(body["content_base64"]) == b"PK.."
        assert response.headers["Content-Disposition"] == 'attachment; filename="file1.zip"'
        assert response.headers["X-Request-ID"] == body["request_id"]
        service.repackage.assert_called_once_with(
            "https://example.com/file1.tar.zst", request_id=body["request_id"]
        )

    def test_presigned_response(self, trigger, service):
        service.repackage.return_value = RepackageResult(
            base_name="file1",
            filename="file1.zip",
            delivery_mode=DeliveryMode.PRESIGNED_URL,
            size_bytes=4,
            entry_count=1,
            object_key="zips/file1-20250102T030405Z.zip",
            download_url="https://acct.blob.core.windows.net/repackaged/zips/file1.zip?sig=x",
            expires_in_seconds=3600,
        )

        response = trigger.handle_request(_request({"url": "https://example.com/file1.tar.zst"}))

        body = _json(response)
        assert response.status_code == 200
        assert body["download_url"].endswith("sig=x")
        assert body["expires_in_seconds"] == 3600
        assert "content_base64" not in body
        assert "Content-Disposition" not in response.headers

    def test_incoming_request_id_is_reused(self, trigger, service):
        service.repackage.return_value = _inline_result()
        response = trigger.handle_request(
            _request({"url": "https://example.com/a.tar.zst"}, headers={"X-Request-ID": "abc-123"})
        )
        assert response.headers["X-Request-ID"] == "abc-123"

    def test_service_built_once(self, service):
        factory = MagicMock(return_value=service)
        service.repackage.return_value = _inline_result()
        trigger = RepackageTrigger(service_factory=factory)

        trigger.handle_request(_request({"url": "https://example.com/a.tar.zst"}))
        trigger.handle_request(_request({"url": "https://example.com/a.tar.zst"}))

        factory.assert_called_once()


class TestRepackageInvalidPayload:

    @pytest.mark.parametrize("request_factory", [
        lambda: _request(raw=b"{not json"),
        lambda: _request(raw=b""),
        lambda: _request(["https://example.com/a.tar.zst"]),
        lambda: _request({}),
        lambda: _request({"url": ""}),
        lambda: _request({"url": 42}),
        lambda: _request({"url": "ftp://example.com/a.tar.zst"}),
        lambda: _request({"url": "not a url"}),
    ])
    def test_returns_400_fixed_text(self, trigger, service, request_factory):
        response = trigger.handle_request(request_factory())

        assert response.status_code == 400
        assert _json(response)["error"] == "Invalid request payload"
        service.repackage.assert_not_called()

    def test_wrong_method(self, trigger):
        response = trigger.handle_request(_request(method="GET"))
        assert response.status_code == 405


class TestRepackageFailures:

    @pytest.mark.parametrize("error, message", [
        (FetchError("dns failure for secret-host.internal"), "Failed to download file"),
        (DecompressionError("bad frame"), "Failed to repackage file"),
        (ArchiveFormatError("bad checksum"), "Failed to repackage file"),
        (TruncatedInputError("short body", entry_name="a.txt"), "Failed to repackage file"),
        (OutputWriteError("bad name"), "Failed to repackage file"),
        (PublishError("403 from storage"), "Failed to publish file"),
        (RuntimeError("something odd"), "Internal server error"),
        (ContractViolationError("bug"), "Internal server error"),
    ])
    def test_returns_500_fixed_text(self, trigger, service, error, message):
        service.repackage.side_effect = error

        response = trigger.handle_request(_request({"url": "https://example.com/a.tar.zst"}))

        assert response.status_code == 500
        body = _json(response)
        assert body["error"] == message
        assert set(body) == {"error", "request_id", "timestamp"}
        assert error.args[0] not in response.get_body().decode()

    def test_service_construction_failure_is_500(self):
        def broken_factory():
            raise RuntimeError("bad config")

        trigger = RepackageTrigger(service_factory=broken_factory)
        response = trigger.handle_request(_request({"url": "https://example.com/a.tar.zst"}))

        assert response.status_code == 500
        assert _json(response)["error"] == "Internal server error"

    def test_internal_value_error_is_500_not_400(self, trigger, service):
        service.repackage.side_effect = ValueError("bad internal state")

        response = trigger.handle_request(_request({"url": "https://example.com/a.tar.zst"}))

        assert response.status_code == 500
        assert _json(response)["error"] == "Internal server error"

    def test_failure_logged_once_with_traceback(self, caplog):
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        service = RepackageService(
            fetcher=SourceFetcher(transport=transport),
            transcoder=ArchiveTranscoder(),
        )
        trigger = RepackageTrigger(service_factory=lambda: service)

        with caplog.at_level(logging.ERROR):
            response = trigger.handle_request(_request({"url": "https://example.com/a.tar.zst"}))

        assert response.status_code == 500
        errors = [r for r in caplog.records if r.levelno >= logging.ERROR]
        assert len(errors) == 1
        assert errors[0].exc_info is not None
        assert errors[0].custom_dimensions["error_code"] == "DOWNLOAD_FAILED"
        assert errors[0].custom_dimensions["stage"] == "fetch"


class TestContentDisposition:

    def test_plain_name_unchanged(self):
        assert content_disposition("file1.zip") == 'attachment; filename="file1.zip"'

    def test_control_characters_and_quotes_cannot_break_out(self, trigger, service):
        service.repackage.return_value = RepackageResult(
            base_name="x",
            filename='x\r\nSet-Cookie: evil=1".zip',
            delivery_mode=DeliveryMode.INLINE,
            size_bytes=4,
            entry_count=1,
            content_base64=base64.b64encode(b"PK..").decode(),
        )

        response = trigger.handle_request(_request({"url": "https://example.com/a.tar.zst"}))

        header = response.headers["Content-Disposition"]
        assert "\r" not in header and "\n" not in header
        assert header.startswith('attachment; filename="x__Set-Cookie: evil=1_.zip"; ')
        assert header.endswith("filename*=UTF-8''x%0D%0ASet-Cookie%3A%20evil%3D1%22.zip")

    def test_name_derived_from_hostile_url(self):
        url = "https://example.com/x%0d%0aSet-Cookie:%20evil=1%22.tar.zst"

        header = content_disposition(build_output_filename(derive_base_name(url)))

        assert "\r" not in header and "\n" not in header
        assert header.count('"') == 2

    def test_non_ascii_name_gets_utf8_parameter(self):
        assert content_disposition("donn\u00e9es.zip") == (
            "attachment; filename=\"donn_es.zip\"; filename*=UTF-8''donn%C3%A9es.zip"
        )


class TestLivez:

    def test_alive(self):
        response = livez_trigger.handle_request(_request(method="GET"))
        assert response.status_code == 200
        assert _json(response)["status"] == "alive"


class TestHealth:

    def test_healthy_with_valid_config(self):
        trigger = HealthCheckTrigger(config_loader=AppConfig.from_environment)

        response = trigger.handle_request(_request(method="GET"))

        body = _json(response)
        assert response.status_code == 200
        assert body["status"] == "healthy"
        assert set(body["components"]) == {"configuration", "codecs", "storage"}
        assert body["components"]["codecs"]["details"]["installed"] is True

    def test_unhealthy_when_config_fails(self):
        def broken_loader():
            raise ValueError("REPACKAGE_CHUNK_SIZE_BYTES must be an integer")

        trigger = HealthCheckTrigger(config_loader=broken_loader)
        response = trigger.handle_request(_request(method="GET"))

        assert response.status_code == 503
        assert _json(response)["status"] == "unhealthy"

    def test_connection_string_is_masked(self, monkeypatch):
        monkeypatch.setenv("STORAGE_CONNECTION_STRING", "AccountName=a;AccountKey=c2VjcmV0")
        trigger = HealthCheckTrigger(config_loader=AppConfig.from_environment)

        response = trigger.handle_request(_request(method="GET"))

        assert "c2VjcmV0" not in response.get_body().decode()
