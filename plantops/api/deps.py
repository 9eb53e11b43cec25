"""
FastAPI dependency injection providers.

Every long-lived service is built once in the application lifespan and
stored on ``app.state``; the providers below hand it to route handlers
through FastAPI's Depends() mechanism.

CHANGELOG:
- 2026-10-14: Add mail service provider (STORY-022)
- 2026-10-07: Add history and telemetry providers (STORY-012)
- 2026-10-03: Initial creation (STORY-004)

TODO:
- None
"""

from typing import Annotated

from fastapi import Depends, Request

from plantops.config import Settings
from plantops.services.history import HistoryLog
from plantops.services.mail import MailService
from plantops.services.store import PlantStore, RtuStore
from plantops.services.telemetry import TelemetryFeed


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_plant_store(request: Request) -> PlantStore:
    return request.app.state.plants


def get_rtu_store(request: Request) -> RtuStore:
    return request.app.state.rtus


def get_history(request: Request) -> HistoryLog:
    return request.app.state.history


def get_feed(request: Request) -> TelemetryFeed:
    return request.app.state.feed


def get_mail_service(request: Request) -> MailService:
    return request.app.state.mail


async def get_current_user(request: Request) -> str:
    """Authenticate the request via BearerAuth on app.state.

    Returns:
        str: The authenticated user name.
    """
    return await request.app.state.auth.verify(request)


# Type aliases for route signatures, e.g.:
#   async def list_plants(plants: PlantStoreDep):
SettingsDep = Annotated[Settings, Depends(get_settings)]
PlantStoreDep = Annotated[PlantStore, Depends(get_plant_store)]
RtuStoreDep = Annotated[RtuStore, Depends(get_rtu_store)]
HistoryDep = Annotated[HistoryLog, Depends(get_history)]
FeedDep = Annotated[TelemetryFeed, Depends(get_feed)]
MailServiceDep = Annotated[MailService, Depends(get_mail_service)]
CurrentUser = Annotated[str, Depends(get_current_user)]
