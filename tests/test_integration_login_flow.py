"""
Integration tests for the complete GitHub login flow.

Drives a browser-like TestClient through redirect, callback, token exchange
and access to the protected page, with GitHub replaced by a mock transport.
"""

import pytest
from fastapi.testclient import TestClient
from urllib.parse import urlparse

from conftest import VALID_CODE, state_from_location


class TestLoginFlowIntegration:
    """End-to-end login scenarios."""

    def test_complete_login_flow(self, client, fake_github):
        """Test redirect, callback and access to the protected page."""
        # Step 1: anonymous access is sent to GitHub
        response = client.get("/protected", follow_redirects=False)
        assert response.status_code == 302
        assert "scope=user:email" in response.headers["location"]
        state = state_from_location(response.headers["location"])

        # Step 2: GitHub sends the browser back with a code
        response = client.get("/callback", params={"code": VALID_CODE, "state": state},
                              follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "/protected"

        # Step 3: the protected handler runs
        response = client.get("/protected", follow_redirects=False)
        assert response.status_code == 200
        assert response.text == "Hello protected!"

        assert len(fake_github.requests) == 1
        assert fake_github.form()["code"] == VALID_CODE

    def test_login_following_redirects(self, client):
        """Test that the callback leads straight to the protected body."""
        response = client.get("/protected", follow_redirects=False)
        state = state_from_location(response.headers["location"])

        response = client.get("/callback", params={"code": VALID_CODE, "state": state})

        assert response.status_code == 200
        assert response.text == "Hello protected!"

    def test_session_survives_multiple_requests(self, client, fake_github):
        """Test that one login serves later requests without new exchanges."""
        response = client.get("/protected", follow_redirects=False)
        state = state_from_location(response.headers["location"])
        client.get("/callback", params={"code": VALID_CODE, "state": state})

        for _ in range(3):
            response = client.get("/protected", follow_redirects=False)
            assert response.status_code == 200
            assert response.text == "Hello protected!"

        assert len(fake_github.requests) == 1

    def test_sessions_are_independent(self, app):
        """Test that one browser's login does not authenticate another."""
        alice = TestClient(app)
        bob = TestClient(app)

        response = alice.get("/protected", follow_redirects=False)
        state = state_from_location(response.headers["location"])
        alice.get("/callback", params={"code": VALID_CODE, "state": state})

        assert alice.get("/protected", follow_redirects=False).status_code == 200
        assert bob.get("/protected", follow_redirects=False).status_code == 302

    def test_state_from_other_session_is_rejected(self, app, fake_github):
        """Test that a state issued to one browser cannot be used by another."""
        victim = TestClient(app)
        attacker = TestClient(app)

        victim.get("/protected", follow_redirects=False)
        response = attacker.get("/protected", follow_redirects=False)
        attacker_state = state_from_location(response.headers["location"])

        response = victim.get("/callback", params={"code": VALID_CODE, "state": attacker_state},
                              follow_redirects=False)

        assert response.status_code == 400
        assert fake_github.requests == []

    def test_failed_login_then_success(self, client, fake_github):
        """Test that a rejected code can be followed by a fresh login."""
        response = client.get("/protected", follow_redirects=False)
        state = state_from_location(response.headers["location"])
        response = client.get("/callback", params={"code": "bad", "state": state},
                              follow_redirects=False)
        assert response.status_code == 401

        response = client.get("/protected", follow_redirects=False)
        assert response.status_code == 302
        assert urlparse(response.headers["location"]).netloc == "github.com"
        state = state_from_location(response.headers["location"])

        response = client.get("/callback", params={"code": VALID_CODE, "state": state})
        assert response.text == "Hello protected!"
        assert len(fake_github.requests) == 2
