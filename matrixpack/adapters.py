"""Scoped interception adapters that inject failures into HTTP clients."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from importlib import import_module
import logging
from typing import Any
from urllib.parse import urlparse

from matrixpack.policy.engine import Decision, InterceptionPolicy
from matrixpack.policy.templates import ResponseTemplate, get_template

logger = logging.getLogger(__name__)

TEMPLATE_HEADER = "X-LiveMatrix-Template"


@contextmanager
def intercept_requests(policy: InterceptionPolicy) -> Iterator[None]:
    """Patch requests Session.request within scope and fail blocked hosts."""
    requests_module = import_module("requests")
    session_cls = requests_module.sessions.Session
    original_request = session_cls.request

    def wrapped_request(self: Any, method: str, url: str, **kwargs: Any) -> Any:
        decision = policy.decide(_extract_host(url))
        if not decision.block:
            return original_request(self, method, url, **kwargs)
        _log_block(method, url, decision)
        return _build_requests_response(requests_module, _template_for(decision), url)

    session_cls.request = wrapped_request
    try:
        yield
    finally:
        session_cls.request = original_request


@contextmanager
def intercept_httpx(policy: InterceptionPolicy) -> Iterator[None]:
    """Patch httpx Client/AsyncClient request methods within scope."""
    httpx_module = import_module("httpx")
    client_cls = httpx_module.Client
    async_client_cls = httpx_module.AsyncClient

    original_client_request = client_cls.request
    original_async_client_request = async_client_cls.request

    def wrapped_client_request(self: Any, method: str, url: Any, **kwargs: Any) -> Any:
        decision = policy.decide(_extract_host(url))
        if not decision.block:
            return original_client_request(self, method, url, **kwargs)
        _log_block(method, url, decision)
        return _build_httpx_response(httpx_module, _template_for(decision), method, url)

    async def wrapped_async_client_request(
        self: Any,
        method: str,
        url: Any,
        **kwargs: Any,
    ) -> Any:
        decision = policy.decide(_extract_host(url))
        if not decision.block:
            return await original_async_client_request(self, method, url, **kwargs)
        _log_block(method, url, decision)
        return _build_httpx_response(httpx_module, _template_for(decision), method, url)

    client_cls.request = wrapped_client_request
    async_client_cls.request = wrapped_async_client_request
    try:
        yield
    finally:
        client_cls.request = original_client_request
        async_client_cls.request = original_async_client_request


def _extract_host(url: Any) -> str:
    return urlparse(str(url)).hostname or ""


def _template_for(decision: Decision) -> ResponseTemplate:
    return get_template(decision.response_template or "")


def _log_block(method: str, url: Any, decision: Decision) -> None:
    logger.info(
        "injected %s for %s %s",
        decision.response_template,
        method.upper(),
        url,
    )


def _response_headers(template: ResponseTemplate) -> dict[str, str]:
    headers = dict(template.headers)
    headers["Content-Length"] = str(len(template.body))
    headers[TEMPLATE_HEADER] = template.template_id
    return headers


def _build_requests_response(requests_module: Any, template: ResponseTemplate, url: Any) -> Any:
    response = requests_module.models.Response()
    response.status_code = template.status_code
    response.reason = template.reason
    response.headers = requests_module.structures.CaseInsensitiveDict(_response_headers(template))
    response._content = template.body
    response.encoding = "utf-8"
    response.url = str(url)
    return response


def _build_httpx_response(
    httpx_module: Any,
    template: ResponseTemplate,
    method: str,
    url: Any,
) -> Any:
    return httpx_module.Response(
        template.status_code,
        headers=_response_headers(template),
        content=template.body,
        request=httpx_module.Request(method, url),
    )
