"""
HTTP request helper for the E2E phases.

invoke_request() never raises for transport problems: a request that produced
no HTTP response comes back as an ApiResponse with status_code 0 and the error
text in `body`, so it simply fails the status check that follows.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from . import conftest
from .conftest import log_detail, log_request, truncate

USER_AGENT = "Numerino-E2E/1.0"


@dataclass
class ApiResponse:
    """Outcome of one request."""
    status_code: int
    body: str = ""
    json: Any = None
    headers: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


_session: Optional[requests.Session] = None


def get_session() -> requests.Session:
    """Session with connection-level retries (TEST_RETRIES); responses are never retried."""
    global _session
    if _session is None:
        retry = Retry(
            total=conftest.RETRIES,
            connect=conftest.RETRIES,
            read=0,
            status=0,
            redirect=0,
            backoff_factor=0.5,
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        _session = requests.Session()
        _session.mount("http://", adapter)
        _session.mount("https://", adapter)
        _session.headers.update({
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        })
    return _session


def _parse_json(text: str):
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def invoke_request(
    method: str,
    endpoint: str,
    body: Any = None,
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, Any]] = None,
    raw_body: Optional[str] = None,
    token: Optional[str] = None,
) -> ApiResponse:
    """
    Send one request to the API under test.

    Args:
        method: HTTP method
        endpoint: Path relative to the API base (see endpoints.endpoint)
        body: JSON-serializable body (a bare string is sent as a JSON string)
        headers: Extra headers
        params: Query string parameters
        raw_body: Sent verbatim instead of `body` (malformed payload checks)
        token: Bearer token
    """
    url = f"{conftest.get_api_base()}{endpoint}"
    log_request(method, url)

    request_headers = {"Content-Type": "application/json"}
    if token:
        request_headers["Authorization"] = f"Bearer {token}"
    if headers:
        request_headers.update(headers)

    kwargs = {
        "headers": request_headers,
        "params": params,
        "timeout": conftest.TIMEOUT,
        "allow_redirects": False,
    }
    if raw_body is not None:
        kwargs["data"] = raw_body.encode("utf-8")
    elif body is not None:
        kwargs["data"] = json.dumps(body).encode("utf-8")

    if conftest.is_debug() and (raw_body is not None or body is not None):
        log_detail("Request", raw_body if raw_body is not None else json.dumps(body))

    try:
        resp = get_session().request(method, url, **kwargs)
    except requests.exceptions.RequestException as e:
        return ApiResponse(status_code=0, body=f"Error: {e}", error=str(e))

    response = ApiResponse(
        status_code=resp.status_code,
        body=resp.text,
        json=_parse_json(resp.text),
        headers=dict(resp.headers),
    )
    if conftest.is_debug():
        log_detail("Response", response.body)
    return response


def describe_expected(codes: Iterable[int]) -> str:
    """(200,) -> '200', (200, 404) -> '200 or 404', (200, 401, 404) -> '200, 401 or 404'."""
    codes = [str(c) for c in codes]
    if len(codes) <= 1:
        return "".join(codes)
    return f"{', '.join(codes[:-1])} or {codes[-1]}"


def expect_status(response: ApiResponse, *codes: int) -> ApiResponse:
    """Assert the response status is one of `codes`; returns the response."""
    if response.status_code not in codes:
        message = f"Expected {describe_expected(codes)}, got {response.status_code}"
        if response.body:
            message += f" | Response: {truncate(response.body)}"
        raise AssertionError(message)
    return response


def unwrap(payload: Any) -> Any:
    """Strip the `{success, message, data}` envelope the backend uses."""
    if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
        return payload["data"]
    return payload


def extract_ids(payload: Any, profile_key: str) -> Tuple[Optional[int], Optional[int]]:
    """
    Pull (user_id, profile_id) out of a registration response.

    Handles the data envelope, login-style bodies (`userInfo`) and flat DTOs.
    `profile_key` is e.g. 'studentProfileId'.
    """
    data = unwrap(payload)
    if not isinstance(data, dict):
        return None, None

    candidates = [data]
    for nested in ("userInfo", "user", "profile"):
        if isinstance(data.get(nested), dict):
            candidates.append(data[nested])

    user_id = None
    profile_id = None
    for item in candidates:
        if user_id is None:
            user_id = item.get("userId", item.get("id"))
        if profile_id is None:
            profile_id = item.get(profile_key, item.get("profileId"))
    return user_id, profile_id
