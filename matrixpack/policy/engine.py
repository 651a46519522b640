"""Interception policy: enable flag, failure selection, and per-request decisions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import threading
from typing import Iterable

from matrixpack.policy.exceptions import InvalidHostTokenError
from matrixpack.policy.hosts import (
    BlockedHostSet,
    coerce_host_entry,
    format_host_list,
    normalize_host,
    parse_host_list,
)
from matrixpack.policy.services import (
    EXTERNAL_SERVICES_SENTINEL,
    SERVICES,
    get_service,
    is_xbox_live_host,
)
from matrixpack.policy.templates import (
    NOT_FOUND_TEMPLATE,
    RATE_LIMIT_BURST_TEMPLATE,
    RATE_LIMIT_SUSTAINED_TEMPLATE,
    SERVICE_UNAVAILABLE_TEMPLATE,
)

logger = logging.getLogger(__name__)

BLOCKED_SESSION_MARKER = "red"


class FailureType(Enum):
    NOT_FOUND = ("not-found", "404 - Not Found")
    SERVICE_UNAVAILABLE = ("service-unavailable", "503 - Service Unavailable")
    RATE_LIMIT_BURST = ("rate-limit-burst", "429 - Rate Limited (Burst)")
    RATE_LIMIT_SUSTAINED = ("rate-limit-sustained", "429 - Rate Limited (Sustained)")

    @property
    def slug(self) -> str:
        return self.value[0]

    @property
    def label(self) -> str:
        return self.value[1]

    @property
    def template_id(self) -> str:
        return _FAILURE_TEMPLATES[self]

    @classmethod
    def parse(cls, value: "str | FailureType") -> "FailureType":
        """Resolve a member from its name, CLI slug, or menu label."""
        if isinstance(value, FailureType):
            return value
        text = str(value).strip()
        lowered = text.lower()
        compact = lowered.replace("_", "").replace("-", "")
        for member in cls:
            if lowered in {member.slug, member.label.lower()}:
                return member
            if compact == member.name.replace("_", "").lower():
                return member
        choices = ", ".join(member.slug for member in cls)
        raise ValueError(f"unknown failure type '{value}' (expected one of: {choices})")


_FAILURE_TEMPLATES: dict[FailureType, str] = {
    FailureType.NOT_FOUND: NOT_FOUND_TEMPLATE,
    FailureType.SERVICE_UNAVAILABLE: SERVICE_UNAVAILABLE_TEMPLATE,
    FailureType.RATE_LIMIT_BURST: RATE_LIMIT_BURST_TEMPLATE,
    FailureType.RATE_LIMIT_SUSTAINED: RATE_LIMIT_SUSTAINED_TEMPLATE,
}


@dataclass(frozen=True, slots=True)
class Decision:
    block: bool
    response_template: str | None = None
    failure_type: FailureType | None = None
    marker: str | None = None
    reason: str | None = None


ALLOW = Decision(block=False)


@dataclass(frozen=True, slots=True)
class PolicySnapshot:
    enabled: bool
    failure_type: FailureType
    block_non_xbox_live: bool
    blocked_hosts: tuple[str, ...]

    def to_delimited_string(self) -> str:
        entries = list(self.blocked_hosts)
        if self.block_non_xbox_live:
            entries.append(EXTERNAL_SERVICES_SENTINEL)
        return format_host_list(entries)


class InterceptionPolicy:
    """Process-lifetime interception state shared by the UI and proxy layers.

    Every mutation and every ``decide`` call runs under one lock, so a decision
    always sees a single consistent state.
    """

    def __init__(
        self,
        *,
        enabled: bool = False,
        failure_type: FailureType = FailureType.NOT_FOUND,
        block_non_xbox_live: bool = False,
        blocked_hosts: Iterable[str] = (),
    ) -> None:
        self._lock = threading.RLock()
        self._enabled = bool(enabled)
        self._failure_type = FailureType.parse(failure_type)
        self._block_non_xbox_live = bool(block_non_xbox_live)
        self._hosts = BlockedHostSet()
        for host in blocked_hosts:
            self.add_blocked_host(host)

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def failure_type(self) -> FailureType:
        return self._failure_type

    @property
    def block_non_xbox_live(self) -> bool:
        return self._block_non_xbox_live

    @property
    def blocked_hosts(self) -> tuple[str, ...]:
        return self._hosts.entries

    def snapshot(self) -> PolicySnapshot:
        with self._lock:
            return PolicySnapshot(
                enabled=self._enabled,
                failure_type=self._failure_type,
                block_non_xbox_live=self._block_non_xbox_live,
                blocked_hosts=self._hosts.entries,
            )

    def set_enabled(self, on: bool) -> None:
        with self._lock:
            self._enabled = bool(on)
        logger.info("interception %s", "enabled" if on else "disabled")

    def set_failure_type(self, failure_type: FailureType | str) -> None:
        resolved = FailureType.parse(failure_type)
        with self._lock:
            self._failure_type = resolved
        logger.info("failure type set to %s", resolved.label)

    def set_block_non_xbox_live(self, on: bool) -> None:
        with self._lock:
            self._block_non_xbox_live = bool(on)
        logger.info("non-Xbox Live blocking %s", "on" if on else "off")

    def add_blocked_host(self, host: str) -> None:
        if _is_sentinel(host):
            self.set_block_non_xbox_live(True)
            return
        entry = coerce_host_entry(host)
        if entry is None:
            if (host or "").strip():
                logger.warning("ignoring invalid blocked host: %r", host)
            return
        with self._lock:
            added = self._hosts.add(entry)
        if added:
            logger.info("blocked host added: %s", entry)

    def remove_blocked_host(self, host: str) -> None:
        if _is_sentinel(host):
            self.set_block_non_xbox_live(False)
            return
        with self._lock:
            removed = self._hosts.remove(host)
        if removed:
            logger.info("blocked host removed: %s", normalize_host(host))

    def contains(self, host: str) -> bool:
        if _is_sentinel(host):
            return self._block_non_xbox_live
        return self._hosts.contains(host)

    def to_delimited_string(self) -> str:
        return self.snapshot().to_delimited_string()

    def replace_all(self, raw: str) -> tuple[bool, str]:
        """Replace the host list from its delimited form.

        Returns ``(False, detail)`` and leaves the policy untouched when any
        token is rejected.
        """
        try:
            tokens = parse_host_list(raw)
        except InvalidHostTokenError as error:
            logger.warning("host list rejected: %s", error)
            return False, str(error)

        external = EXTERNAL_SERVICES_SENTINEL in tokens
        hosts = [token for token in tokens if token != EXTERNAL_SERVICES_SENTINEL]
        with self._lock:
            self._hosts.replace_entries(hosts)
            self._block_non_xbox_live = external
        logger.info("host list replaced (%d entries)", len(hosts))
        return True, ""

    def decide(self, host: str) -> Decision:
        normalized = normalize_host(host)
        with self._lock:
            if not self._enabled:
                return ALLOW
            # An empty host has no destination; the non-Xbox Live overlay skips it too.
            if not normalized:
                return ALLOW
            if self._hosts.matches(normalized):
                reason = "host"
            elif self._block_non_xbox_live and not is_xbox_live_host(normalized):
                reason = "non-xbox-live"
            else:
                return ALLOW
            failure_type = self._failure_type

        logger.debug("blocking %s (%s) with %s", normalized, reason, failure_type.template_id)
        return Decision(
            block=True,
            response_template=failure_type.template_id,
            failure_type=failure_type,
            marker=BLOCKED_SESSION_MARKER,
            reason=reason,
        )

    def block_service(self, name: str) -> None:
        self.add_blocked_host(get_service(name).endpoint)

    def unblock_service(self, name: str) -> None:
        self.remove_blocked_host(get_service(name).endpoint)

    def select_all_services(self) -> None:
        with self._lock:
            for service in SERVICES:
                self.add_blocked_host(service.endpoint)

    def select_no_services(self) -> None:
        with self._lock:
            for service in SERVICES:
                self.remove_blocked_host(service.endpoint)

    def blocked_services(self) -> list[str]:
        with self._lock:
            return [service.name for service in SERVICES if self.contains(service.endpoint)]


def _is_sentinel(host: str) -> bool:
    return (host or "").strip().lower() == EXTERNAL_SERVICES_SENTINEL
