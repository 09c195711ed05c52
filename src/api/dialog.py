"""
RadioManager Dialog Service - Dialog Routes

GET endpoints called by the dialog engine. Each route searches and/or reads
the RadioManager backend and answers with the next dialog state plus session
data. Every route answers HTTP 200: on any failure the response only carries
the notFoundDS dialog state.

Endpoints:
- GET /presenters?name=
- GET /programs?title=
- GET /broadcasts?presenter=
- GET /broadcasts/current
- GET /broadcasts/next
- GET /songs
- GET /songs/last
- GET /songs/current

Patterns Applied:
- FastAPI router pattern
- Pydantic response models
- Dependency injection for the backend client
"""

from dataclasses import dataclass
from typing import Any, Final

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.api.dependencies import get_request_client
from src.clients.request_client import RequestClientProtocol
from src.clients.request_handler import RequestClientError
from src.core.config import Settings, get_settings
from src.core.exceptions import DialogStateError
from src.core.logging import get_logger
from src.search.query_builder import build_query
from src.search.results import extract_results

logger = get_logger(__name__)

SEARCH_ROUTE: Final[str] = "/search"
API_VERSION_PATH: Final[str] = "/api/v2"

# =============================================================================
# Response Models
# =============================================================================


class DialogAction(BaseModel):
    """Next dialog state for the dialog engine."""

    nextDialogstate: str | None = None


class DialogSession(BaseModel):
    """Session data stored under a namespace."""

    namespace: str | None = None
    data: Any = None


class DialogResponse(BaseModel):
    """Response returned to the dialog engine."""

    action: DialogAction
    session: DialogSession | None = None

    def payload(self) -> dict[str, Any]:
        """JSON payload; the session key is left out on failure.

        An unset nextDialogstate is left out of the action.
        """
        content: dict[str, Any] = {"action": self.action.model_dump(exclude_none=True)}
        if self.session is not None:
            content["session"] = self.session.model_dump()
        return content


# =============================================================================
# Dialog Query Parameters
# =============================================================================


@dataclass
class DialogQuery:
    """Query parameters shared by every dialog route."""

    successful_ds: str | None
    not_found_ds: str | None
    var_key: str | None

    def success(self, data: Any) -> JSONResponse:
        response = DialogResponse(
            action=DialogAction(nextDialogstate=self.successful_ds),
            session=DialogSession(namespace=self.var_key, data=data),
        )
        return JSONResponse(content=response.payload())

    def fallback(self, route: str, error: Exception) -> JSONResponse:
        """Log the failure and answer with the not-found dialog state."""
        if isinstance(error, DialogStateError):
            logger.info("dialog_not_found", route=route, reason=str(error))
        elif isinstance(error, RequestClientError):
            logger.error("dialog_upstream_error", route=route, **error.to_log_dict())
        else:
            logger.error(
                "dialog_error",
                route=route,
                error=str(error),
                error_type=type(error).__name__,
                exc_info=error,
            )
        response = DialogResponse(action=DialogAction(nextDialogstate=self.not_found_ds))
        return JSONResponse(content=response.payload())


def dialog_query(
    successfulDS: str | None = Query(default=None),
    notFoundDS: str | None = Query(default=None),
    varKey: str | None = Query(default=None),
) -> DialogQuery:
    """Collect the dialog engine query parameters."""
    return DialogQuery(
        successful_ds=successfulDS,
        not_found_ds=notFoundDS,
        var_key=varKey,
    )


# =============================================================================
# Helpers
# =============================================================================


def _require(value: str | None, name: str, route: str) -> str:
    if not value:
        raise DialogStateError(f"Missing query parameter: {name}", route=route)
    return value


async def _search(
    client: RequestClientProtocol,
    filter_type: str,
    fields: dict[str, Any],
    options: dict[str, Any] | None = None,
) -> list[dict[str, Any]]:
    response = await client.post(
        SEARCH_ROUTE,
        body=build_query(filter_type, fields, options or {}),
    )
    return extract_results(response)


async def _first_hit(
    client: RequestClientProtocol,
    filter_type: str,
    fields: dict[str, Any],
    route: str,
    options: dict[str, Any] | None = None,
) -> dict[str, Any]:
    records = await _search(client, filter_type, fields, options)
    if not records:
        raise DialogStateError(f"No {filter_type} found", route=route)
    return records[0]


def relative_route(href: str, base_url: str) -> str:
    """Turn a backend link into a route relative to the configured base URL.

    Args:
        href: Absolute link returned by the backend
        base_url: Configured backend base URL

    Returns:
        Route to append to the base URL

    Raises:
        DialogStateError: When the link is not under the backend API
    """
    if base_url and base_url in href:
        return href.replace(base_url, "")
    _, separator, route = href.partition(API_VERSION_PATH)
    if not separator:
        raise DialogStateError(f"Unexpected backend link: {href}")
    return route


async def _broadcast_with_presenters(
    client: RequestClientProtocol,
    route: str,
    base_url: str,
) -> dict[str, Any]:
    broadcast = dict(await client.get(route))
    href = broadcast.pop("presenters")["href"]
    linked = await client.get(relative_route(href, base_url))
    presenters = [presenter["name"] for presenter in linked["results"]]
    return {**broadcast, "presenters": presenters}


# =============================================================================
# Router
# =============================================================================

dialog_router = APIRouter(tags=["dialog"])

DIALOG_RESPONSES: Final[dict[int | str, dict[str, Any]]] = {
    200: {"model": DialogResponse},
}


@dialog_router.get("/presenters", responses=DIALOG_RESPONSES)
async def get_presenter(
    name: str | None = Query(default=None),
    dialog: DialogQuery = Depends(dialog_query),
    client: RequestClientProtocol = Depends(get_request_client),
) -> JSONResponse:
    """Search a presenter by name and return its attributes."""
    route = "/presenters"
    try:
        name = _require(name, "name", route)
        result = await _first_hit(client, "presenters", {"name": name}, route)
        presenter = await client.get(f"/presenters/{result['id']}")
        data = {
            "id": presenter["id"],
            "name": presenter["name"],
            **(presenter.get("field_values") or {}),
        }
        return dialog.success(data)
    except Exception as e:
        return dialog.fallback(route, e)


@dialog_router.get("/programs", responses=DIALOG_RESPONSES)
async def get_program(
    title: str | None = Query(default=None),
    dialog: DialogQuery = Depends(dialog_query),
    client: RequestClientProtocol = Depends(get_request_client),
) -> JSONResponse:
    """Search a program by title and return its attributes."""
    route = "/programs"
    try:
        title = _require(title, "title", route)
        result = await _first_hit(client, "programs", {"title": title}, route)
        program = await client.get(f"/programs/{result['id']}")
        if not program:
            raise DialogStateError("Program not found", route=route)
        data = {
            "id": program.get("id"),
            "title": program.get("title"),
            "description": program.get("description"),
            "short_name": program.get("short_name"),
            "medium_name": program.get("medium_name"),
            **(program.get("field_values") or {}),
        }
        return dialog.success(data)
    except Exception as e:
        return dialog.fallback(route, e)


@dialog_router.get("/broadcasts", responses=DIALOG_RESPONSES)
async def get_broadcasts(
    presenter: str | None = Query(default=None),
    dialog: DialogQuery = Depends(dialog_query),
    client: RequestClientProtocol = Depends(get_request_client),
) -> JSONResponse:
    """List broadcasts, optionally only those of one presenter."""
    route = "/broadcasts"
    try:
        options: dict[str, Any] = {}
        if presenter:
            options = {"filter": [{"match": {"presenters.name": presenter}}]}
        broadcasts = await _search(client, "broadcasts", {}, options)
        if not broadcasts:
            raise DialogStateError("No broadcasts found", route=route)
        return dialog.success(broadcasts)
    except Exception as e:
        return dialog.fallback(route, e)


@dialog_router.get("/broadcasts/current", responses=DIALOG_RESPONSES)
async def get_current_broadcast(
    dialog: DialogQuery = Depends(dialog_query),
    client: RequestClientProtocol = Depends(get_request_client),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """Return the broadcast on air, with its presenter names."""
    route = "/broadcasts/current"
    try:
        data = await _broadcast_with_presenters(client, route, settings.api_url)
        return dialog.success(data)
    except Exception as e:
        return dialog.fallback(route, e)


@dialog_router.get("/broadcasts/next", responses=DIALOG_RESPONSES)
async def get_next_broadcast(
    dialog: DialogQuery = Depends(dialog_query),
    client: RequestClientProtocol = Depends(get_request_client),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """Return the next broadcast, with its presenter names."""
    route = "/broadcasts/next"
    try:
        data = await _broadcast_with_presenters(client, route, settings.api_url)
        return dialog.success(data)
    except Exception as e:
        return dialog.fallback(route, e)


@dialog_router.get("/songs", responses=DIALOG_RESPONSES)
async def get_songs(
    dialog: DialogQuery = Depends(dialog_query),
    client: RequestClientProtocol = Depends(get_request_client),
) -> JSONResponse:
    route = "/songs"
    try:
        return dialog.success(await client.get("/items"))
    except Exception as e:
        return dialog.fallback(route, e)


@dialog_router.get("/songs/last", responses=DIALOG_RESPONSES)
async def get_last_song(
    dialog: DialogQuery = Depends(dialog_query),
    client: RequestClientProtocol = Depends(get_request_client),
) -> JSONResponse:
    """Return the most recently started song and its artist."""
    route = "/songs/last"
    options = {
        "size": 1,
        "query": {"bool": {"must": {"range": {"start": {"lte": "now"}}}}},
        "sort": [{"start": {"order": "desc"}}],
    }
    try:
        result = await _first_hit(client, "items", {}, route, options)
        song = await client.get(f"/items/{result['id']}")
        if not song:
            raise DialogStateError("Song not found", route=route)
        field_values = song.get("field_values") or {}
        data = {
            "id": song.get("id"),
            "title": song.get("title"),
            "artist": field_values.get("artist"),
        }
        return dialog.success(data)
    except Exception as e:
        return dialog.fallback(route, e)


@dialog_router.get("/songs/current", responses=DIALOG_RESPONSES)
async def get_current_song(
    dialog: DialogQuery = Depends(dialog_query),
    client: RequestClientProtocol = Depends(get_request_client),
) -> JSONResponse:
    route = "/songs/current"
    try:
        return dialog.success(await client.get("/items/current"))
    except Exception as e:
        return dialog.fallback(route, e)
