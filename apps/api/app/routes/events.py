"""Event and registration routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response, status

from app.routes.dependencies import (
    get_authenticated_principal,
    get_event_service,
    require_event_owner,
)
from app.schemas.auth import AuthPrincipal
from app.schemas.error import ConflictError, ForbiddenError, NoLeakNotFoundError, UnauthorizedError
from app.schemas.event import CreateEventRequest, Event, Registration, UpdateEventRequest
from app.services.authorization import AuthorizationGate
from app.services.events import EventService

router = APIRouter(prefix="/events", tags=["Events"])

_OWNER_ONLY_RESPONSES: dict = {
    401: {"model": UnauthorizedError},
    403: {"model": ForbiddenError},
    404: {"model": NoLeakNotFoundError},
}


@router.get("", response_model=list[Event])
def list_events(service: Annotated[EventService, Depends(get_event_service)]) -> list[Event]:
    return service.list_events()


@router.get(
    "/{eventId}",
    response_model=Event,
    responses={404: {"model": NoLeakNotFoundError}},
)
def get_event(
    event_id: Annotated[int, Path(alias="eventId")],
    service: Annotated[EventService, Depends(get_event_service)],
) -> Event:
    return service.get_event(event_id=event_id)


@router.post(
    "",
    response_model=Event,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"model": UnauthorizedError}},
)
def create_event(
    payload: CreateEventRequest,
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[EventService, Depends(get_event_service)],
) -> Event:
    return service.create_event(
        owner_id=AuthorizationGate.stamp_owner(principal),
        name=payload.name,
        description=payload.description,
        location=payload.location,
        date_time=payload.date_time,
    )


@router.put("/{eventId}", response_model=Event, responses=_OWNER_ONLY_RESPONSES)
def update_event(
    event_id: Annotated[int, Path(alias="eventId")],
    payload: UpdateEventRequest,
    _: Annotated[AuthPrincipal, Depends(require_event_owner)],
    service: Annotated[EventService, Depends(get_event_service)],
) -> Event:
    return service.update_event(
        event_id=event_id,
        name=payload.name,
        description=payload.description,
        location=payload.location,
        date_time=payload.date_time,
    )


@router.delete(
    "/{eventId}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_OWNER_ONLY_RESPONSES,
)
def delete_event(
    event_id: Annotated[int, Path(alias="eventId")],
    _: Annotated[AuthPrincipal, Depends(require_event_owner)],
    service: Annotated[EventService, Depends(get_event_service)],
) -> Response:
    service.delete_event(event_id=event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{eventId}/registrations",
    response_model=list[Registration],
    responses=_OWNER_ONLY_RESPONSES,
)
def list_registrations(
    event_id: Annotated[int, Path(alias="eventId")],
    _: Annotated[AuthPrincipal, Depends(require_event_owner)],
    service: Annotated[EventService, Depends(get_event_service)],
) -> list[Registration]:
    return service.list_registrations(event_id=event_id)


@router.post(
    "/{eventId}/registrations",
    response_model=Registration,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"model": UnauthorizedError},
        404: {"model": NoLeakNotFoundError},
        409: {"model": ConflictError},
    },
)
def register_for_event(
    event_id: Annotated[int, Path(alias="eventId")],
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[EventService, Depends(get_event_service)],
) -> Registration:
    return service.register(event_id=event_id, user_id=principal.user_id)


@router.delete(
    "/{eventId}/registrations",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={401: {"model": UnauthorizedError}, 404: {"model": NoLeakNotFoundError}},
)
def unregister_from_event(
    event_id: Annotated[int, Path(alias="eventId")],
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[EventService, Depends(get_event_service)],
) -> Response:
    service.unregister(event_id=event_id, user_id=principal.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
