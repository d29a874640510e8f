#!/usr/bin/env python3
"""
Numerino Auth Client

Usage:
    from auth_client import AuthClient

    client = AuthClient.from_env()
    result = client.login("tstring@example.com", "Tpassword1!")
    profile = client.request("GET", "/users/profile", result.token)

Login kinds:
    - general: teachers and guardians, POST /auth/login (email)
    - student: POST /auth/student-login (username); students may also use
      /auth/login with their email
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

DEVICE_INFO = "Test Device"
USER_AGENT = "Test Browser"


@dataclass
class LoginResult:
    """Outcome of a login attempt."""
    success: bool
    token: Optional[str] = None
    refresh_token: Optional[str] = None
    user: Dict[str, Any] = field(default_factory=dict)
    expires_in: Optional[int] = None
    status_code: int = 0
    error: Optional[str] = None


def _login_body(payload: Any) -> Dict[str, Any]:
    """Accept both `{success, data: {...}}` and a bare login response."""
    if not isinstance(payload, dict):
        return {}
    data = payload.get("data")
    if isinstance(data, dict) and "accessToken" in data:
        return data
    return payload


class AuthClient:
    """Client for the Numerino auth endpoints."""

    DEFAULT_URL = "http://localhost:8080/api"

    def __init__(self, base_url: str = None, timeout: float = 10):
        self.base_url = (base_url or self.DEFAULT_URL).rstrip("/")
        self.timeout = timeout
        self.headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @classmethod
    def from_env(cls) -> "AuthClient":
        """Create client from TEST_BASE_URL / TEST_REQUEST_TIMEOUT."""
        base_url = os.getenv("TEST_BASE_URL") or cls.DEFAULT_URL
        timeout = float(os.getenv("TEST_REQUEST_TIMEOUT") or 10)
        return cls(base_url, timeout=timeout)

    def login(self, identifier: str, password: str, kind: str = "general",
              remember_me: bool = True) -> LoginResult:
        """
        Log in and return the tokens.

        `identifier` is an email for kind='general' and a username for
        kind='student'.
        """
        if kind == "student":
            endpoint = "/auth/student-login"
            payload = {"username": identifier}
        else:
            endpoint = "/auth/login"
            payload = {"email": identifier}
        payload.update({
            "password": password,
            "rememberMe": remember_me,
            "deviceInfo": DEVICE_INFO,
            "userAgent": USER_AGENT,
        })

        try:
            resp = httpx.post(
                f"{self.base_url}{endpoint}",
                headers=self.headers,
                json=payload,
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            return LoginResult(success=False, error=str(e))

        try:
            data = resp.json()
        except ValueError:
            data = None

        body = _login_body(data)
        token = body.get("accessToken")
        if resp.is_success and token:
            return LoginResult(
                success=True,
                token=token,
                refresh_token=body.get("refreshToken"),
                user=body.get("userInfo") or body.get("user") or {},
                expires_in=body.get("expiresIn"),
                status_code=resp.status_code,
            )

        message = data.get("message") if isinstance(data, dict) else None
        return LoginResult(
            success=False,
            status_code=resp.status_code,
            error=message or f"Login failed ({resp.status_code})",
        )

    def request(self, method: str, endpoint: str, token: str,
                body: Any = None) -> Dict[str, Any]:
        """Authenticated request. Network errors give status_code 0."""
        headers = {**self.headers, "Authorization": f"Bearer {token}"}
        kwargs = {"headers": headers, "timeout": self.timeout}
        if body is not None and method.upper() != "GET":
            kwargs["json"] = body

        try:
            resp = httpx.request(method, f"{self.base_url}{endpoint}", **kwargs)
        except httpx.HTTPError as e:
            return {"status_code": 0, "success": False, "data": None, "error": str(e)}

        try:
            data = resp.json()
        except ValueError:
            data = resp.text

        return {
            "status_code": resp.status_code,
            "success": resp.is_success,
            "data": data,
            "error": None,
        }

    def refresh(self, refresh_token: str) -> Dict[str, Any]:
        """Exchange a refresh token (POST /auth/refresh-token)."""
        return self._post_anonymous("/auth/refresh-token", {"refreshToken": refresh_token})

    def logout(self, refresh_token: str) -> Dict[str, Any]:
        """Revoke a refresh token (POST /auth/logout)."""
        return self._post_anonymous("/auth/logout", {"refreshToken": refresh_token})

    def _post_anonymous(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = httpx.post(
                f"{self.base_url}{endpoint}",
                headers=self.headers,
                json=payload,
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            return {"status_code": 0, "success": False, "data": None, "error": str(e)}
        try:
            data = resp.json()
        except ValueError:
            data = resp.text
        return {"status_code": resp.status_code, "success": resp.is_success, "data": data, "error": None}

    def curl_examples(self, token: str, user_id: Any = "{id}") -> str:
        """Copy-pasteable curl commands using the token."""
        return "\n".join([
            "1. Current profile:",
            "curl -X 'GET' \\",
            f"  '{self.base_url}/users/profile' \\",
            "  -H 'accept: */*' \\",
            f"  -H 'Authorization: Bearer {token}'",
            "",
            "2. Update student profile:",
            "curl -X 'PUT' \\",
            f"  '{self.base_url}/users/students/{user_id}' \\",
            "  -H 'accept: application/json' \\",
            f"  -H 'Authorization: Bearer {token}' \\",
            "  -H 'Content-Type: application/json' \\",
            "  -d '{\"firstName\": \"Updated\", \"lastName\": \"Name\"}'",
            "",
            "3. Change password:",
            "curl -X 'PUT' \\",
            f"  '{self.base_url}/users/{user_id}/password' \\",
            "  -H 'accept: application/json' \\",
            f"  -H 'Authorization: Bearer {token}' \\",
            "  -H 'Content-Type: application/json' \\",
            "  -d '{\"currentPassword\": \"...\", \"newPassword\": \"NewPassword123!\", "
            "\"confirmPassword\": \"NewPassword123!\"}'",
        ])


# Singleton
_client: Optional[AuthClient] = None


def get_client() -> AuthClient:
    global _client
    if _client is None:
        _client = AuthClient.from_env()
    return _client


def set_client(client: Optional[AuthClient]) -> None:
    """Replace the process-wide client (None re-reads the environment)."""
    global _client
    _client = client
