"""Post-deploy smoke checks executed from the app container."""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from datetime import date, timedelta
from uuid import uuid4

from app.core.enums import RoleEnum
from app.core.security import create_access_token

BASE_URL = "http://localhost:8000"


def request(
    path: str,
    *,
    method: str = "GET",
    headers: dict[str, str] | None = None,
    expected: int = 200,
) -> bytes:
    req_headers = {"Accept": "application/json"}
    if headers:
        req_headers.update(headers)

    request_obj = urllib.request.Request(
        f"{BASE_URL}{path}",
        method=method,
        headers=req_headers,
    )
    try:
        with urllib.request.urlopen(request_obj, timeout=30) as response:
            content = response.read()
            status = response.getcode()
    except urllib.error.HTTPError as exc:  # pragma: no cover - runtime smoke script
        body_text = exc.read().decode("utf-8", errors="ignore")
        raise RuntimeError(f"{method} {path} -> {exc.code}: {body_text}") from exc

    if status != expected:
        raise RuntimeError(f"{method} {path} -> {status}, expected {expected}")
    return content


def main() -> None:
    for endpoint in ["/health", "/ready", "/docs", "/metrics"]:
        request(endpoint, expected=200)

    party_id = uuid4()
    token = create_access_token(str(party_id), role=RoleEnum.STUDENT.value)
    me = json.loads(
        request(
            "/api/v1/identity/me",
            headers={"Authorization": f"Bearer {token}"},
        ).decode("utf-8"),
    )
    if me["id"] != str(party_id):
        raise RuntimeError("Token subject was not resolved as the acting party")

    # an unknown tutor has no windows, so the slot list is empty
    lesson_date = (date.today() + timedelta(days=1)).isoformat()
    slots = json.loads(
        request(f"/api/v1/scheduling/tutors/{uuid4()}/slots?lesson_date={lesson_date}").decode("utf-8"),
    )
    if slots["slots"]:
        raise RuntimeError("Expected no slots for a tutor without availability")

    print("Smoke checks passed.")


if __name__ == "__main__":
    main()
