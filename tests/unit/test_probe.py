# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import time

import boto3
import httpx
import pytest
from botocore.exceptions import ReadTimeoutError
from botocore.stub import Stubber

from originfetch.config import OriginSettings
from originfetch.errors import OriginError, PreflightErrorKind
from originfetch.http.adapters import StubHttpClient
from originfetch.http.httpx_client import HttpxClient
from originfetch.http.models import HttpResponse
from originfetch.models import ImageRequest, OriginType, RequestTimings, ResolutionTimings
from originfetch.origin.probe import OriginHeaderProbe

S3_URL = "https://my-bucket.s3.us-east-1.amazonaws.com/images/cat.jpg"
HTTP_URL = "https://images.example.com/cat.jpg"


def _s3_client():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


def _http_probe(handler, **settings):
    settings_obj = OriginSettings(**settings)
    http_client = HttpxClient(settings_obj, client=httpx.Client(transport=httpx.MockTransport(handler)))
    return OriginHeaderProbe(http_client, s3_client=_s3_client(), settings=settings_obj)


def test_s3_probe_stores_content_type_and_timing():
    s3 = _s3_client()
    probe = OriginHeaderProbe(StubHttpClient(), s3_client=s3, settings=OriginSettings())
    request = ImageRequest(
        source_url=S3_URL,
        client_headers={"If-None-Match": '"abc"', "X-Amz-Expected-Bucket-Owner": "123456789012", "Cookie": "x=1"},
        timings=RequestTimings(request_resolution=ResolutionTimings()),
    )

    with Stubber(s3) as stubber:
        stubber.add_response(
            "head_object",
            {"ContentType": "image/jpeg", "ContentLength": 4},
            {"Bucket": "my-bucket", "Key": "images/cat.jpg", "IfNoneMatch": '"abc"', "ExpectedBucketOwner": "123456789012"},
        )
        result = probe.validate_origin_url(S3_URL, request)
        stubber.assert_no_pending_responses()

    assert result.origin_type == OriginType.S3
    assert result.content_type == "image/jpeg"
    assert request.source_image_content_type == "image/jpeg"
    assert request.timings.request_resolution.preflight_validation_ms == result.elapsed_ms
    assert result.elapsed_ms >= 0


def test_timing_is_only_recorded_into_existing_bucket():
    s3 = _s3_client()
    probe = OriginHeaderProbe(StubHttpClient(), s3_client=s3, settings=OriginSettings())
    request = ImageRequest(source_url=S3_URL, timings=RequestTimings())

    with Stubber(s3) as stubber:
        stubber.add_response("head_object", {"ContentType": "image/png"}, {"Bucket": "my-bucket", "Key": "images/cat.jpg"})
        probe.validate_origin_url(S3_URL, request)

    assert request.timings.request_resolution is None


def test_s3_probe_missing_key_is_resource_not_found():
    s3 = _s3_client()
    probe = OriginHeaderProbe(StubHttpClient(), s3_client=s3, settings=OriginSettings())

    with Stubber(s3) as stubber:
        stubber.add_client_error("head_object", service_error_code="404", service_message="Not Found", http_status_code=404)
        with pytest.raises(OriginError) as excinfo:
            probe.validate_origin_url(S3_URL, ImageRequest(source_url=S3_URL))

    assert excinfo.value.status_code == 404
    assert excinfo.value.kind == PreflightErrorKind.RESOURCE_NOT_FOUND


@pytest.mark.parametrize(
    "status, expected_status, kind",
    [
        (403, 403, PreflightErrorKind.ACCESS_DENIED),
        (500, 502, PreflightErrorKind.BAD_GATEWAY),
        (400, 502, PreflightErrorKind.BAD_GATEWAY),
    ],
)
def test_s3_probe_error_mapping(status, expected_status, kind):
    s3 = _s3_client()
    probe = OriginHeaderProbe(StubHttpClient(), s3_client=s3, settings=OriginSettings())

    with Stubber(s3) as stubber:
        stubber.add_client_error("head_object", service_error_code=str(status), http_status_code=status)
        with pytest.raises(OriginError) as excinfo:
            probe.validate_origin_url(S3_URL, ImageRequest(source_url=S3_URL))

    assert excinfo.value.status_code == expected_status
    assert excinfo.value.kind == kind


def test_s3_probe_rejects_non_image_content_type():
    s3 = _s3_client()
    probe = OriginHeaderProbe(StubHttpClient(), s3_client=s3, settings=OriginSettings())
    request = ImageRequest(source_url=S3_URL)

    with Stubber(s3) as stubber:
        stubber.add_response("head_object", {"ContentType": "text/plain"}, {"Bucket": "my-bucket", "Key": "images/cat.jpg"})
        with pytest.raises(OriginError) as excinfo:
            probe.validate_origin_url(S3_URL, request)

    assert excinfo.value.status_code == 400
    assert excinfo.value.kind == PreflightErrorKind.INVALID_FORMAT
    assert request.source_image_content_type is None


def test_s3_probe_unparsable_url_is_invalid_url():
    probe = OriginHeaderProbe(StubHttpClient(), s3_client=_s3_client(), settings=OriginSettings())
    url = "https://my-bucket.s3.amazonaws.com/"
    with pytest.raises(OriginError) as excinfo:
        probe.validate_origin_url(url, ImageRequest(source_url=url))
    assert excinfo.value.status_code == 400
    assert excinfo.value.kind == PreflightErrorKind.INVALID_URL
    assert excinfo.value.title == "Invalid S3 URL format"


@pytest.mark.parametrize(
    "url, kind",
    [
        ("http://images.example.com/cat.jpg", PreflightErrorKind.UNSUPPORTED_PROTOCOL),
        ("ftp://images.example.com/cat.jpg", PreflightErrorKind.UNSUPPORTED_PROTOCOL),
        ("https:///cat.jpg", PreflightErrorKind.INVALID_URL),
        ("", PreflightErrorKind.INVALID_URL),
    ],
)
def test_url_validation_failures(url, kind):
    stub = StubHttpClient()
    probe = OriginHeaderProbe(stub, s3_client=_s3_client(), settings=OriginSettings())
    with pytest.raises(OriginError) as excinfo:
        probe.validate_origin_url(url, ImageRequest(source_url=url))
    assert excinfo.value.status_code == 400
    assert excinfo.value.kind == kind
    assert stub.requests == []


def test_http_probe_sends_head_without_redirects_and_caller_headers():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(200, headers={"Content-Type": "image/webp"})

    probe = _http_probe(handler)
    request = ImageRequest(source_url=HTTP_URL, client_headers={"Authorization": "Bearer t"})
    result = probe.validate_origin_url(HTTP_URL, request)

    assert seen == {"method": "HEAD", "auth": "Bearer t"}
    assert result.origin_type == OriginType.HTTP
    assert request.source_image_content_type == "image/webp"


def test_http_probe_uses_probe_timeout_and_no_redirects():
    stub = StubHttpClient({HTTP_URL: HttpResponse(ok=True, status_code=200, headers={"content-type": "image/png"})})
    probe = OriginHeaderProbe(stub, s3_client=_s3_client(), settings=OriginSettings())
    probe.validate_origin_url(HTTP_URL, ImageRequest(source_url=HTTP_URL))

    sent = stub.requests[0]
    assert sent.method == "HEAD"
    assert sent.timeout == 5.0
    assert sent.allow_redirects is False


def test_http_probe_does_not_add_identifying_header():
    seen = {}

    def handler(request):
        seen["user_agent"] = request.headers.get_list("user-agent")
        return httpx.Response(200, headers={"Content-Type": "image/png"})

    probe = _http_probe(handler, user_agent="OriginFetch/test")
    probe.validate_origin_url(HTTP_URL, ImageRequest(source_url=HTTP_URL, client_headers={"X-Trace": "1"}))
    assert "OriginFetch/test" not in seen["user_agent"]


def test_http_probe_slow_head_is_request_timeout():
    def handler(request):
        time.sleep(0.8)
        return httpx.Response(200, headers={"Content-Type": "image/png"})

    probe = _http_probe(handler, probe_timeout=0.2)
    started = time.monotonic()
    with pytest.raises(OriginError) as excinfo:
        probe.validate_origin_url(HTTP_URL, ImageRequest(source_url=HTTP_URL))
    elapsed = time.monotonic() - started

    assert excinfo.value.status_code == 408
    assert excinfo.value.kind == PreflightErrorKind.REQUEST_TIMEOUT
    assert excinfo.value.message == f"Origin validation timeout after 200ms for URL: {HTTP_URL}"
    assert elapsed < 0.5


@pytest.mark.parametrize("delay_error", ["sleep", "read_timeout"])
def test_s3_probe_timeout_is_request_timeout(delay_error):
    class SlowS3:
        def head_object(self, **params):
            if delay_error == "read_timeout":
                raise ReadTimeoutError(endpoint_url="https://my-bucket.s3.us-east-1.amazonaws.com")
            time.sleep(1.0)
            return {"ContentType": "image/jpeg"}

    probe = OriginHeaderProbe(StubHttpClient(), s3_client=SlowS3(), settings=OriginSettings(probe_timeout=0.1))
    with pytest.raises(OriginError) as excinfo:
        probe.validate_origin_url(S3_URL, ImageRequest(source_url=S3_URL))
    assert excinfo.value.status_code == 408
    assert excinfo.value.kind == PreflightErrorKind.REQUEST_TIMEOUT


@pytest.mark.parametrize(
    "status, expected_status, kind",
    [
        (404, 404, PreflightErrorKind.RESOURCE_NOT_FOUND),
        (403, 403, PreflightErrorKind.ACCESS_DENIED),
        (401, 401, PreflightErrorKind.ACCESS_DENIED),
        (500, 502, PreflightErrorKind.BAD_GATEWAY),
        (503, 502, PreflightErrorKind.BAD_GATEWAY),
        (302, 502, PreflightErrorKind.BAD_GATEWAY),
        (400, 502, PreflightErrorKind.BAD_GATEWAY),
    ],
)
def test_http_probe_status_mapping(status, expected_status, kind):
    probe = _http_probe(lambda request: httpx.Response(status, headers={"Location": "https://elsewhere.example/"}))
    with pytest.raises(OriginError) as excinfo:
        probe.validate_origin_url(HTTP_URL, ImageRequest(source_url=HTTP_URL))
    assert excinfo.value.status_code == expected_status
    assert excinfo.value.kind == kind


@pytest.mark.parametrize(
    "exc, expected_status, kind",
    [
        (httpx.ConnectTimeout("timed out"), 408, PreflightErrorKind.REQUEST_TIMEOUT),
        (httpx.ConnectError("[Errno -2] Name or service not known"), 404, PreflightErrorKind.HOST_NOT_FOUND),
        (httpx.ConnectError("[SSL: CERTIFICATE_VERIFY_FAILED] certificate verify failed"), 403, PreflightErrorKind.ACCESS_DENIED),
        (httpx.ConnectError("Connection refused"), 502, PreflightErrorKind.BAD_GATEWAY),
    ],
)
def test_http_probe_transport_mapping(exc, expected_status, kind):
    def handler(request):
        raise exc

    probe = _http_probe(handler)
    with pytest.raises(OriginError) as excinfo:
        probe.validate_origin_url(HTTP_URL, ImageRequest(source_url=HTTP_URL))
    assert excinfo.value.status_code == expected_status
    assert excinfo.value.kind == kind


def test_http_probe_timeout_message_names_deadline():
    def handler(request):
        raise httpx.ReadTimeout("timed out")

    probe = _http_probe(handler)
    with pytest.raises(OriginError) as excinfo:
        probe.validate_origin_url(HTTP_URL, ImageRequest(source_url=HTTP_URL))
    assert excinfo.value.message == f"Origin validation timeout after 5000ms for URL: {HTTP_URL}"


@pytest.mark.parametrize("content_type", ["IMAGE/JPEG", "text/html", None])
def test_http_probe_rejects_content_types(content_type):
    headers = {"Content-Type": content_type} if content_type else {}
    probe = _http_probe(lambda request: httpx.Response(200, headers=headers))
    with pytest.raises(OriginError) as excinfo:
        probe.validate_origin_url(HTTP_URL, ImageRequest(source_url=HTTP_URL))
    assert excinfo.value.status_code == 400
    assert excinfo.value.kind == PreflightErrorKind.INVALID_FORMAT


def test_http_probe_accepts_octet_stream_with_parameters():
    probe = _http_probe(lambda request: httpx.Response(200, headers={"Content-Type": "binary/octet-stream; foo=bar"}))
    result = probe.validate_origin_url(HTTP_URL, ImageRequest(source_url=HTTP_URL))
    assert result.content_type == "binary/octet-stream; foo=bar"
