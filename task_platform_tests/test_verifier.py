"""
Tests for the credential verifier client.

The auth service app is mounted through FastAPI's TestClient, which is an
httpx.Client, so the verifier talks to the real routes without a network.
Transport failures are simulated with httpx.MockTransport.
"""
import time

import httpx
import pytest
from fastapi.testclient import TestClient

from task_platform.auth_service.main import app as auth_app
from task_platform.tasks_service.gate import authenticate, extract_credential
from task_platform.tasks_service.errors import AuthInvalid, AuthMissing, AuthUnreachable
from task_platform.tasks_service.verifier import CredentialVerifier, VerificationStatus


@pytest.fixture(scope="module")
def auth_client():
    with TestClient(auth_app) as c:
        yield c


@pytest.fixture
def verifier(auth_client):
    return CredentialVerifier("http://testserver", timeout=1.0, client=auth_client)


def mock_verifier(handler) -> CredentialVerifier:
    client = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://auth-service")
    return CredentialVerifier("http://auth-service", timeout=0.5, client=client)


def test_known_token_is_valid(verifier):
    result = verifier.verify("abc")
    assert result.status == VerificationStatus.VALID
    assert result.principal == "u1"
    assert result.is_valid


def test_unknown_token_is_invalid(verifier):
    result = verifier.verify("xyz")
    assert result.status == VerificationStatus.INVALID
    assert result.principal is None


def test_token_with_slashes_is_quoted(verifier):
    result = verifier.verify("a/b?c")
    assert result.status == VerificationStatus.INVALID


def test_issued_token_verifies(auth_client, verifier):
    hashed = auth_client.post("/hashed-password", json={"password": "secret"}).json()["hashed_password"]
    token = auth_client.post(
        "/token",
        json={"email": "bob@example.com", "hashed_password": hashed, "password": "secret"}
    ).json()["token"]

    result = verifier.verify(token)
    assert result.status == VerificationStatus.VALID
    assert result.principal == "bob@example.com"


def test_timeout_is_unreachable():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    result = mock_verifier(handler).verify("abc")
    assert result.status == VerificationStatus.UNREACHABLE
    assert "timeout" in result.reason


def test_connection_refused_is_unreachable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    result = mock_verifier(handler).verify("abc")
    assert result.status == VerificationStatus.UNREACHABLE


def test_server_error_is_unreachable():
    result = mock_verifier(lambda request: httpx.Response(503)).verify("abc")
    assert result.status == VerificationStatus.UNREACHABLE
    assert "503" in result.reason


def test_forbidden_is_invalid():
    result = mock_verifier(lambda request: httpx.Response(403)).verify("abc")
    assert result.status == VerificationStatus.INVALID


def test_malformed_body_is_unreachable():
    result = mock_verifier(lambda request: httpx.Response(200, text="<html>")).verify("abc")
    assert result.status == VerificationStatus.UNREACHABLE


def test_missing_uid_is_unreachable():
    result = mock_verifier(lambda request: httpx.Response(200, json={"message": "Valid token."})).verify("abc")
    assert result.status == VerificationStatus.UNREACHABLE


def test_single_request_per_verification():
    calls = []

    def handler(request):
        calls.append(request.url.path)
        raise httpx.ConnectError("down", request=request)

    mock_verifier(handler).verify("abc")
    assert calls == ["/verify-token/abc"]


@pytest.mark.parametrize("header", [None, "", "abc", "Basic abc", "Bearer ", "Bearer    "])
def test_extract_credential_rejects_missing(header):
    with pytest.raises(AuthMissing):
        extract_credential(header)


def test_extract_credential_accepts_any_case_prefix():
    assert extract_credential("bearer abc") == "abc"
    assert extract_credential("Bearer abc") == "abc"


def test_authenticate_missing_makes_no_call():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"uid": "u1"})

    with pytest.raises(AuthMissing):
        authenticate(None, mock_verifier(handler))
    assert calls == []


def test_authenticate_maps_results(verifier):
    assert authenticate("Bearer abc", verifier) == "u1"
    with pytest.raises(AuthInvalid):
        authenticate("Bearer xyz", verifier)

    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(AuthUnreachable):
        authenticate("Bearer abc", mock_verifier(handler))


def test_trickling_response_is_cut_off_at_deadline(trickle_auth_url):
    verifier = CredentialVerifier(trickle_auth_url, timeout=1.0)
    try:
        started = time.monotonic()
        result = verifier.verify("abc")
        elapsed = time.monotonic() - started
    finally:
        verifier.close()

    assert result.status == VerificationStatus.UNREACHABLE
    assert result.reason == "timeout: deadline exceeded"
    assert elapsed < 2.0


def test_oversized_response_is_unreachable():
    body = b'{"uid": "u1", "padding": "' + b"x" * (CredentialVerifier.MAX_RESPONSE_BYTES + 1) + b'"}'
    result = mock_verifier(lambda request: httpx.Response(200, content=body)).verify("abc")
    assert result.status == VerificationStatus.UNREACHABLE
    assert result.reason == "response too large"


@pytest.mark.parametrize("header", ["Bearer .", "Bearer ..", "Bearer ...."])
def test_dot_only_credential_is_missing(header):
    with pytest.raises(AuthMissing):
        extract_credential(header)


def test_dot_only_credential_makes_no_call():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(404)

    with pytest.raises(AuthMissing):
        authenticate("Bearer ..", mock_verifier(handler))
    assert calls == []


def test_credential_with_dots_inside_is_sent():
    seen = []

    def handler(request):
        seen.append(request.url.raw_path)
        return httpx.Response(401)

    result = mock_verifier(handler).verify("a.b..c")
    assert result.status == VerificationStatus.INVALID
    assert seen == [b"/verify-token/a.b..c"]
