"""
Contract tests for CORS enforcement.
"""

import pytest

from http_source.infrastructure.config import CorsSettings


@pytest.mark.contract
async def test_allowed_origin_is_accepted(make_client, sink):
    async with make_client(path_pattern="/", cors=CorsSettings(allowed_origins=["/bar"])) as client:
        response = await client.post("/", content="hello", headers={"Origin": "/bar"})

    assert response.status_code == 202
    assert response.headers["Access-Control-Allow-Origin"] == "/bar"
    assert "Origin" in response.headers["Vary"]
    assert sink.poll().payload == "hello"


@pytest.mark.contract
async def test_disallowed_origin_is_forbidden(make_client, sink):
    async with make_client(path_pattern="/", cors=CorsSettings(allowed_origins=["/bar"])) as client:
        response = await client.post("/", content="hello", headers={"Origin": "/junk"})

    assert response.status_code == 403
    assert response.text == "Invalid CORS request"
    assert sink.poll() is None


@pytest.mark.contract
async def test_any_origin_by_default(client, sink):
    response = await client.post("/foo", content="hello", headers={"Origin": "http://anywhere.example"})

    assert response.status_code == 202
    assert response.headers["Access-Control-Allow-Origin"] == "*"


@pytest.mark.contract
async def test_origin_patterns(make_client, sink):
    cors = CorsSettings(allowed_origins=["https://*.example.com"])
    async with make_client(path_pattern="/", cors=cors) as client:
        allowed = await client.post("/", content="a", headers={"Origin": "https://app.example.com"})
        rejected = await client.post("/", content="b", headers={"Origin": "https://example.org"})

    assert allowed.status_code == 202
    assert rejected.status_code == 403
    assert [m.payload for m in sink.messages] == ["a"]


@pytest.mark.contract
async def test_credentials_echo_origin(make_client):
    cors = CorsSettings(allow_credentials=True)
    async with make_client(path_pattern="/", cors=cors) as client:
        response = await client.post("/", content="a", headers={"Origin": "http://site.example"})

    assert response.headers["Access-Control-Allow-Origin"] == "http://site.example"
    assert response.headers["Access-Control-Allow-Credentials"] == "true"


@pytest.mark.contract
async def test_preflight(make_client, sink):
    cors = CorsSettings(allowed_origins=["/bar"], allowed_headers=["content-type", "x-*"])
    async with make_client(path_pattern="/", cors=cors) as client:
        response = await client.options(
            "/",
            headers={
                "Origin": "/bar",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type, X-Trace",
            },
        )

    assert response.status_code == 200
    assert response.headers["Access-Control-Allow-Origin"] == "/bar"
    assert "POST" in response.headers["Access-Control-Allow-Methods"]
    assert response.headers["Access-Control-Allow-Headers"] == "Content-Type, X-Trace"
    assert response.headers["Access-Control-Max-Age"] == "1800"
    assert sink.poll() is None


@pytest.mark.contract
async def test_preflight_rejects_header(make_client):
    cors = CorsSettings(allowed_headers=["content-type"])
    async with make_client(path_pattern="/", cors=cors) as client:
        response = await client.options(
            "/",
            headers={
                "Origin": "http://site.example",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "X-Secret",
            },
        )

    assert response.status_code == 403
    assert response.text == "Invalid CORS request"


@pytest.mark.contract
async def test_preflight_rejects_method(make_client):
    async with make_client(path_pattern="/") as client:
        response = await client.options(
            "/",
            headers={"Origin": "http://site.example", "Access-Control-Request-Method": "DELETE"},
        )

    assert response.status_code == 403


@pytest.mark.contract
async def test_preflight_bypasses_authentication(make_client):
    async with make_client(path_pattern="/", secured=True, security_user_password="secret") as client:
        response = await client.options(
            "/",
            headers={"Origin": "http://site.example", "Access-Control-Request-Method": "POST"},
        )

    assert response.status_code == 200


@pytest.mark.contract
async def test_cors_rejection_precedes_authentication(make_client, sink):
    cors = CorsSettings(allowed_origins=["/bar"])
    async with make_client(path_pattern="/", secured=True, security_user_password="secret", cors=cors) as client:
        response = await client.post("/", content="hello", headers={"Origin": "/junk"})

    assert response.status_code == 403
    assert sink.poll() is None


@pytest.mark.contract
async def test_actual_request_with_disallowed_method_is_forbidden(make_client, sink):
    cors = CorsSettings(allowed_methods=["GET"])
    async with make_client(path_pattern="/", cors=cors) as client:
        response = await client.post("/", content="hello", headers={"Origin": "http://site.example"})

    assert response.status_code == 403
    assert response.text == "Invalid CORS request"
    assert sink.poll() is None
