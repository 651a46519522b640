"""Catalog of the Xbox Live services that can be blocked by name."""

from __future__ import annotations

from dataclasses import dataclass

from matrixpack.policy.exceptions import UnknownServiceError

XBOX_LIVE_DOMAIN = "xboxlive.com"

# Stands in for "every non-Xbox Live host" inside the delimited host list.
EXTERNAL_SERVICES_SENTINEL = "98035eb0-74c9-4833-8c35-9de06241cb66.guid"


@dataclass(frozen=True, slots=True)
class Service:
    name: str
    endpoint: str

    @property
    def is_external(self) -> bool:
        return self.endpoint == EXTERNAL_SERVICES_SENTINEL


SERVICES: tuple[Service, ...] = (
    Service("Achievements", "achievements.xboxlive.com"),
    Service("Contextual Search", "contextualsearch.xboxlive.com"),
    Service("Data Platform", "data-vef.xboxlive.com"),
    Service("Leaderboards", "leaderboards.xboxlive.com"),
    Service("Catalog", "eds.xboxlive.com"),
    Service("Inventory", "inventory.xboxlive.com"),
    Service("Matchmaking", "smartmatch.xboxlive.com"),
    Service("Multiplayer Session Directory", "sessiondirectory.xboxlive.com"),
    Service("Presence", "userpresence.xboxlive.com"),
    Service("Privacy", "privacy.xboxlive.com"),
    Service("Profile", "profile.xboxlive.com"),
    Service("Realtime Activity", "rta.xboxlive.com"),
    Service("Social", "social.xboxlive.com"),
    Service("Reputation", "reputation.xboxlive.com"),
    Service("Client String", "client-strings.xboxlive.com"),
    Service("Title Storage", "titlestorage.xboxlive.com"),
    Service("User Stats", "userstats.xboxlive.com"),
    Service("External Services (non-Xbox)", EXTERNAL_SERVICES_SENTINEL),
)

_SERVICES_BY_KEY = {service.name.lower(): service for service in SERVICES}


def get_service(name: str) -> Service:
    key = (name or "").strip().lower()
    try:
        return _SERVICES_BY_KEY[key]
    except KeyError:
        known = ", ".join(service.name for service in SERVICES)
        raise UnknownServiceError(
            f"Unknown service '{name}'. Known services: {known}"
        ) from None


def list_service_names() -> list[str]:
    return [service.name for service in SERVICES]


def is_xbox_live_host(host: str) -> bool:
    return host.endswith(XBOX_LIVE_DOMAIN)
