"""Canned failure responses substituted for blocked requests."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

NOT_FOUND_TEMPLATE = "404_XboxLiveResiliency_NotFound.dat"
SERVICE_UNAVAILABLE_TEMPLATE = "503_XboxLiveResiliency_ServiceUnavailable.dat"
RATE_LIMIT_BURST_TEMPLATE = "429_XboxLiveResiliency_RateLimit_Burst.dat"
RATE_LIMIT_SUSTAINED_TEMPLATE = "429_XboxLiveResiliency_RateLimit_Sustained.dat"


@dataclass(frozen=True, slots=True)
class ResponseTemplate:
    """Static response substituted for the live one."""

    template_id: str
    status_code: int
    reason: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def to_bytes(self) -> bytes:
        lines = [f"HTTP/1.1 {self.status_code} {self.reason}"]
        headers = dict(self.headers)
        headers["Content-Length"] = str(len(self.body))
        lines.extend(f"{name}: {value}" for name, value in headers.items())
        head = "\r\n".join(lines) + "\r\n\r\n"
        return head.encode("ascii") + self.body


def _json_body(payload: dict[str, object]) -> bytes:
    return json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8")


def _rate_limit_template(
    template_id: str,
    *,
    max_requests: int,
    period_seconds: int,
) -> ResponseTemplate:
    return ResponseTemplate(
        template_id=template_id,
        status_code=429,
        reason="Too Many Requests",
        headers={
            "Content-Type": "application/json; charset=utf-8",
            "Retry-After": str(period_seconds),
            "Cache-Control": "no-cache",
        },
        body=_json_body(
            {
                "currentRequests": max_requests + 1,
                "maxRequests": max_requests,
                "periodInSeconds": period_seconds,
                "limitType": "Rate",
            }
        ),
    )


_TEMPLATES: dict[str, ResponseTemplate] = {
    NOT_FOUND_TEMPLATE: ResponseTemplate(
        template_id=NOT_FOUND_TEMPLATE,
        status_code=404,
        reason="Not Found",
        headers={
            "Content-Type": "application/json; charset=utf-8",
            "Cache-Control": "no-cache",
        },
        body=_json_body({"code": 404, "description": "Not Found"}),
    ),
    SERVICE_UNAVAILABLE_TEMPLATE: ResponseTemplate(
        template_id=SERVICE_UNAVAILABLE_TEMPLATE,
        status_code=503,
        reason="Service Unavailable",
        headers={
            "Content-Type": "application/json; charset=utf-8",
            "Retry-After": "30",
            "Cache-Control": "no-cache",
        },
        body=_json_body({"code": 503, "description": "Service Unavailable"}),
    ),
    # Fine-grained throttling windows: 10 calls per 15s burst, 30 per 300s sustained.
    RATE_LIMIT_BURST_TEMPLATE: _rate_limit_template(
        RATE_LIMIT_BURST_TEMPLATE,
        max_requests=10,
        period_seconds=15,
    ),
    RATE_LIMIT_SUSTAINED_TEMPLATE: _rate_limit_template(
        RATE_LIMIT_SUSTAINED_TEMPLATE,
        max_requests=30,
        period_seconds=300,
    ),
}


def list_template_ids() -> list[str]:
    return list(_TEMPLATES)


def get_template(template_id: str) -> ResponseTemplate:
    try:
        return _TEMPLATES[template_id]
    except KeyError:
        raise KeyError(f"unknown response template: {template_id}") from None


def render_template_bytes(template_id: str, *, responses_dir: str | Path | None = None) -> bytes:
    """Return raw response bytes, preferring an on-disk override when present."""
    template = get_template(template_id)
    if responses_dir is not None:
        override = Path(responses_dir) / template.template_id
        if override.is_file():
            return override.read_bytes()
    return template.to_bytes()
