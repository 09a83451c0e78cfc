import logging

import httpx

from app.core.config import settings
from app.core.errors import VitalAPIError, VitalConfigError

logger = logging.getLogger(__name__)


def _body(r: httpx.Response):
    try:
        return r.json()
    except ValueError:
        return r.text


class VitalClient:
    """Thin wrapper over the Vital (Junction) REST API used to link devices."""

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://api.tryvital.io",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        if not api_key:
            raise VitalConfigError("Missing API key")
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "X-Vital-API-Key": api_key,
                "Content-Type": "application/json",
            },
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Vital %s %s failed: %s", method, path, e)
            raise VitalAPIError(f"Vital request failed: {e}") from e

    def _expect_ok(self, r: httpx.Response, what: str):
        data = _body(r)
        if r.status_code >= 300:
            logger.error("Vital %s failed: HTTP %s %s", what, r.status_code, data)
            raise VitalAPIError(f"{what} failed", status_code=r.status_code, detail=data)
        return data

    def list_providers(self) -> list:
        data = self._expect_ok(self._request("GET", "/v2/providers"), "List providers")
        return data if isinstance(data, list) else []

    def list_users(self):
        return self._expect_ok(self._request("GET", "/v2/user"), "List users")

    def resolve_user(self, client_user_id: str) -> str:
        """Create the Vital user for our id, or look it up when it already exists (409)."""
        r = self._request("POST", "/v2/user", json={"client_user_id": client_user_id})
        data = _body(r)
        if r.status_code == 200:
            vital_user_id = data.get("user_id") if isinstance(data, dict) else None
            logger.info("Created Vital user %s for %s", vital_user_id, client_user_id)
        elif r.status_code == 409:
            detail = data.get("detail") if isinstance(data, dict) else None
            vital_user_id = (detail or {}).get("user_id") if isinstance(detail, dict) else None
            if not vital_user_id and isinstance(data, dict):
                vital_user_id = data.get("user_id")
            logger.info("Found existing Vital user %s for %s", vital_user_id, client_user_id)
        else:
            logger.error("Vital user creation failed: HTTP %s %s", r.status_code, data)
            raise VitalAPIError(
                "Failed to create/resolve Vital user", status_code=r.status_code, detail=data
            )
        if not vital_user_id:
            raise VitalAPIError("Unable to resolve Vital user ID", status_code=r.status_code, detail=data)
        return vital_user_id

    def create_link_token(self, vital_user_id: str) -> dict:
        r = self._request("POST", "/v2/link/token", json={"user_id": vital_user_id})
        return self._expect_ok(r, "Link token generation")

    def create_oauth_url(self, provider: str, link_token: str) -> str:
        r = self._request(
            "POST",
            f"/v2/link/oauth-url/{provider}",
            json={"vitalLinkToken": link_token},
        )
        data = self._expect_ok(r, "OAuth URL")
        url = data.get("oauth_url") if isinstance(data, dict) else None
        if not url:
            raise VitalAPIError("OAuth URL failed", status_code=r.status_code, detail=data)
        return url

    def exchange_token(self, public_token: str) -> dict:
        r = self._request("POST", "/v2/link/exchange", json={"code": public_token})
        return self._expect_ok(r, "Token exchange")


def get_vital_client():
    """FastAPI dependency: a client configured from settings, closed after the request."""
    client = VitalClient(
        settings.vital_api_key,
        base_url=settings.vital_base_url,
        timeout=settings.vital_timeout,
    )
    try:
        yield client
    finally:
        client.close()
