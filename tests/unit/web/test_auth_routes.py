"""Tests for the /auth HTTP contract."""

import uuid

import pytest
from helpers import FRONTEND_KEY, make_config, sign_digest

from aibtcauth.core.modules.signature.c32 import address_from_public_key
from aibtcauth.core.modules.signature.models import ChallengeMode
from aibtcauth.core.modules.signature.service import hash_message, hash_structured_message

AUTH = {"Authorization": FRONTEND_KEY}


@pytest.fixture
def config():
    """Plain-message challenge: the wallet signs "welcome to aibtcdev!"."""
    return make_config(challenge_mode=ChallengeMode.MESSAGE)


@pytest.fixture
def signature(private_key):
    return sign_digest(private_key, hash_message("welcome to aibtcdev!"))


@pytest.fixture
def expected_address(public_key_hex):
    return address_from_public_key(bytes.fromhex(public_key_hex), 22)


def alter_one_character(value: str) -> str:
    return value[:10] + ("0" if value[10] != "0" else "1") + value[11:]


class TestListEndpoints:
    """Tests for the ungated root of the service."""

    @pytest.mark.parametrize("path", ["/auth", "/auth/"])
    def test_lists_endpoints_without_auth(self, client, path):
        response = client.get(path)

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "data": {"endpoints": ["/request-auth-token", "/verify-address", "/verify-session-token"]},
        }


class TestRequestAuthToken:
    """Tests for exchanging a signature for a session token."""

    def test_issue_and_verify(self, client, signature, public_key_hex, expected_address):
        response = client.post(
            "/auth/request-auth-token", json={"signature": signature, "publicKey": public_key_hex}, headers=AUTH
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["address"] == expected_address
        session_token = body["data"]["sessionToken"]
        uuid.UUID(session_token)

        response = client.post("/auth/verify-session-token", json={"data": session_token}, headers=AUTH)
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "data": {"address": expected_address, "sessionToken": session_token},
        }

        response = client.post("/auth/verify-address", json={"data": expected_address}, headers=AUTH)
        assert response.status_code == 200
        assert response.json()["data"] == {"address": expected_address, "sessionKey": session_token}

    def test_altered_signature_rejected_without_writes(
        self, client, store, signature, public_key_hex, expected_address
    ):
        response = client.post(
            "/auth/request-auth-token",
            json={"signature": alter_one_character(signature), "publicKey": public_key_hex},
            headers=AUTH,
        )

        assert response.status_code == 401
        assert response.json()["success"] is False
        assert signature[:20] not in response.json()["error"]
        assert store.live_keys("auth:") == []

        response = client.post("/auth/verify-address", json={"data": expected_address}, headers=AUTH)
        assert response.status_code == 401
        assert response.json()["error"] == f"Address not found: {expected_address}"

    def test_structured_signature_rejected_in_message_mode(self, client, private_key, public_key_hex):
        """Test that one deployment only accepts its configured challenge format."""
        structured_digest = hash_structured_message("welcome to aibtcdev!", "sprint.aibtc.dev", "0.0.1", 1)
        response = client.post(
            "/auth/request-auth-token",
            json={"signature": sign_digest(private_key, structured_digest), "publicKey": public_key_hex},
            headers=AUTH,
        )
        assert response.status_code == 401

    def test_missing_fields(self, client):
        response = client.post("/auth/request-auth-token", json={}, headers=AUTH)

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Missing required parameters: signature, publicKey"}

    def test_invalid_json(self, client):
        response = client.post(
            "/auth/request-auth-token",
            content=b"{not json",
            headers={**AUTH, "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Request body is not valid JSON"

    def test_unparseable_signature(self, client, public_key_hex):
        response = client.post(
            "/auth/request-auth-token", json={"signature": "xyz", "publicKey": public_key_hex}, headers=AUTH
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Signature must be hex encoded"


class TestVerifyEndpoints:
    """Tests for address and session token lookups."""

    def test_unknown_session_token(self, client):
        token = str(uuid.uuid4())
        response = client.post("/auth/verify-session-token", json={"data": token}, headers=AUTH)

        assert response.status_code == 401
        assert token not in response.json()["error"]

    def test_invalid_address(self, client):
        response = client.post("/auth/verify-address", json={"data": "not-an-address"}, headers=AUTH)

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid address: not-an-address"}

    def test_missing_data(self, client):
        response = client.post("/auth/verify-address", json={"address": "x"}, headers=AUTH)

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required parameters: data"

    def test_expired_session(self, client, clock, signature, public_key_hex):
        response = client.post(
            "/auth/request-auth-token", json={"signature": signature, "publicKey": public_key_hex}, headers=AUTH
        )
        session_token = response.json()["data"]["sessionToken"]

        clock.advance(days=30)

        response = client.post("/auth/verify-session-token", json={"data": session_token}, headers=AUTH)
        assert response.status_code == 401


class TestSharedKeyGate:
    """Tests for the service-to-service gate in front of every POST endpoint."""

    @pytest.mark.parametrize("path", ["/auth/request-auth-token", "/auth/verify-address", "/auth/verify-session-token"])
    def test_missing_header(self, client, path):
        response = client.post(path, json={"data": "x"})

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Missing Authorization header"}

    def test_wrong_key(self, client):
        response = client.post("/auth/verify-session-token", json={"data": "x"}, headers={"Authorization": "nope"})

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Invalid Authorization key"}

    def test_gate_runs_before_body_validation(self, client):
        response = client.post("/auth/request-auth-token", json={})
        assert response.status_code == 401

    def test_rotation_applies_to_next_request(self, client, store):
        store.set("key:aibtcdev-frontend", "rotated")

        response = client.post("/auth/verify-session-token", json={"data": "x"}, headers=AUTH)
        assert response.json()["error"] == "Invalid Authorization key"

        response = client.post("/auth/verify-session-token", json={"data": "x"}, headers={"Authorization": "rotated"})
        assert response.json()["error"] == "Invalid or expired session token"

    def test_missing_stored_key_fails_closed(self, client, store):
        del store.entries["key:aibtcdev-backend"]

        response = client.post("/auth/verify-session-token", json={"data": "x"}, headers=AUTH)

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Unable to verify service credentials"}


class TestRouting:
    """Tests for unknown paths and methods."""

    def test_unknown_endpoint(self, client):
        response = client.post("/auth/revoke", json={}, headers=AUTH)

        assert response.status_code == 404
        assert response.json()["error"].startswith("Unsupported endpoint: /revoke")

    def test_outside_base_path(self, client):
        response = client.get("/database/agents")

        assert response.status_code == 404
        assert response.json()["error"] == "Request at /database/agents does not start with base path /auth"

    def test_wrong_method(self, client):
        response = client.get("/auth/verify-address", headers=AUTH)

        assert response.status_code == 405
        assert response.json() == {"success": False, "error": "Unsupported method: GET, supported method: POST"}

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}
