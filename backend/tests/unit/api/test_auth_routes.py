"""Route tests for /auth (login redirect, callback, refresh)."""

import uuid
from urllib.parse import parse_qs, urlparse

import pytest
from sqlalchemy import select

from worknest.core.models import User
from worknest.security.jwt import issue_token_pair, verify_token

PREFIX = "/api/v1/auth"


def _cookie_headers(resp):
    return [v for k, v in resp.headers.multi_items() if k.lower() == "set-cookie"]


class TestLoginRedirect:
    async def test_redirects_and_sets_pkce_cookies(self, async_client):
        resp = await async_client.get(f"{PREFIX}/fake")

        assert resp.status_code == 302
        location = urlparse(resp.headers["location"])
        assert location.netloc == "idp.example.com"
        state = parse_qs(location.query)["state"][0]

        cookies = _cookie_headers(resp)
        state_cookie = next(c for c in cookies if c.startswith("oauth_state="))
        verifier_cookie = next(c for c in cookies if c.startswith("oauth_code_verifier="))
        assert state_cookie.startswith(f"oauth_state={state};")
        for cookie in (state_cookie, verifier_cookie):
            lowered = cookie.lower()
            assert "httponly" in lowered
            assert "max-age=600" in lowered
            assert "path=/" in lowered
            assert "samesite=lax" in lowered

    async def test_unsupported_provider(self, async_client):
        resp = await async_client.get(f"{PREFIX}/myspace")
        assert resp.status_code == 400
        assert resp.json()["code"] == "unsupported_provider"


class TestCallback:
    async def _login(self, async_client):
        start = await async_client.get(f"{PREFIX}/fake")
        state = parse_qs(urlparse(start.headers["location"]).query)["state"][0]
        return state

    async def test_full_flow_returns_json(self, async_client, test_session, fake_provider):
        state = await self._login(async_client)

        resp = await async_client.get(f"{PREFIX}/fake/callback", params={"code": "abc", "state": state})

        assert resp.status_code == 200
        body = resp.json()
        assert set(body) == {"user", "accessToken", "refreshToken"}
        assert body["user"]["email"] == "ada@example.com"
        assert str(verify_token(body["accessToken"]).sub) == body["user"]["id"]
        assert verify_token(body["refreshToken"], "auth").sub == verify_token(body["accessToken"]).sub
        # the verifier issued at login is the one sent to the provider
        assert fake_provider.exchanges[0]["state"] == state

        # PKCE cookies are cleared
        cleared = _cookie_headers(resp)
        assert any(c.startswith('oauth_state=""') or c.startswith("oauth_state=;") for c in cleared)

        user = (await test_session.execute(select(User))).scalar_one()
        assert str(user.id) == body["user"]["id"]

    async def test_redirects_with_tokens_when_configured(self, async_client, monkeypatch):
        from worknest.api import auth as auth_routes
        from worknest.config import Settings

        settings = Settings(oauth_success_redirect_url="https://app.example.com/done")
        monkeypatch.setattr(auth_routes, "get_settings", lambda: settings)

        state = await self._login(async_client)
        resp = await async_client.get(f"{PREFIX}/fake/callback", params={"code": "abc", "state": state})

        assert resp.status_code == 302
        location = urlparse(resp.headers["location"])
        assert f"{location.scheme}://{location.netloc}{location.path}" == "https://app.example.com/done"
        params = parse_qs(location.query)
        assert verify_token(params["accessToken"][0]).sub
        assert verify_token(params["refreshToken"][0], "auth").sub

    async def test_missing_state_cookie(self, async_client):
        resp = await async_client.get(f"{PREFIX}/fake/callback", params={"code": "abc", "state": "s"})
        assert resp.status_code == 400
        assert resp.json()["code"] == "invalid_oauth_request"

    async def test_missing_code(self, async_client):
        state = await self._login(async_client)
        resp = await async_client.get(f"{PREFIX}/fake/callback", params={"state": state})
        assert resp.status_code == 400
        assert resp.json()["code"] == "invalid_oauth_request"

    async def test_forged_state(self, async_client):
        await self._login(async_client)
        resp = await async_client.get(f"{PREFIX}/fake/callback", params={"code": "abc", "state": "forged"})
        assert resp.status_code == 400
        assert resp.json()["code"] == "invalid_oauth_state"

    async def test_missing_id_token(self, async_client, fake_provider):
        fake_provider.id_claims = None
        state = await self._login(async_client)
        resp = await async_client.get(f"{PREFIX}/fake/callback", params={"code": "abc", "state": state})
        assert resp.status_code == 500
        assert resp.json() == {"code": "missing_id_token", "message": "No ID token was returned."}

    async def test_unsupported_provider_callback(self, async_client):
        resp = await async_client.get(f"{PREFIX}/myspace/callback", params={"code": "abc"})
        assert resp.status_code == 400
        assert resp.json()["code"] == "unsupported_provider"


class TestRefresh:
    async def test_refresh_returns_new_pair_without_rotation(self, async_client):
        user_id = uuid.uuid4()
        pair = issue_token_pair(user_id)
        headers = {"Authorization": f"Bearer {pair.refresh_token}"}

        first = await async_client.post(f"{PREFIX}/refresh", headers=headers)
        second = await async_client.post(f"{PREFIX}/refresh", headers=headers)

        assert first.status_code == 200
        assert second.status_code == 200
        body = first.json()
        assert set(body) == {"accessToken", "refreshToken"}
        assert verify_token(body["accessToken"]).sub == user_id

    async def test_access_token_cannot_refresh(self, async_client):
        pair = issue_token_pair(uuid.uuid4())
        resp = await async_client.post(
            f"{PREFIX}/refresh", headers={"Authorization": f"Bearer {pair.access_token}"}
        )
        assert resp.status_code == 401
        assert resp.json()["code"] == "invalid_token"

    @pytest.mark.parametrize(
        "headers,code",
        [
            ({}, "missing_authorization_header"),
            ({"Authorization": "Basic Zm9vOmJhcg=="}, "invalid_authorization_header"),
        ],
    )
    async def test_refresh_header_parsing(self, async_client, headers, code):
        resp = await async_client.post(f"{PREFIX}/refresh", headers=headers)
        assert resp.status_code == 401
        assert resp.json()["code"] == code

    async def test_get_refresh_is_method_not_allowed(self, async_client):
        resp = await async_client.get(f"{PREFIX}/refresh")
        assert resp.status_code == 405
        assert resp.json()["code"] == "method_not_allowed"
