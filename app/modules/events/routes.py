from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Form
from pydantic import ValidationError
from app.modules.events.schemas import (
    EventCreate, EventResponse, EventCreateResponse, GroupPair, Group,
    RegistrationCreate, EventRegistrationResponse, RegistrationStatusResponse
)
from app.modules.events.service import EventService
from app.core.dependencies import get_optional_user, get_request_supabase
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/events", tags=["events"])


def get_event_service(
    supabase: Client = Depends(get_request_supabase),
    current_user: Optional[Dict] = Depends(get_optional_user)
) -> EventService:
    return EventService(supabase, current_user)


@router.get("", response_model=List[EventResponse])
async def list_events(service: EventService = Depends(get_event_service)):
    """List upcoming events that are neither cancelled nor ended"""
    return service.fetch_events()


@router.get("/mine", response_model=List[EventResponse])
async def list_my_events(service: EventService = Depends(get_event_service)):
    """List upcoming events the current user is registered for"""
    return service.fetch_user_events()


@router.post("", response_model=EventCreateResponse, status_code=201)
async def create_event(
    event_data: EventCreate,
    service: EventService = Depends(get_event_service)
):
    """Create an event, with a pair of groups when uses_groups is set"""
    return service.create_event(event_data)


@router.post("/upload-with-image", response_model=EventCreateResponse, status_code=201)
async def create_event_with_image(
    title: str = Form(...),
    description: str = Form(""),
    datetime: str = Form(...),
    location: str = Form(...),
    max_participants: int = Form(...),
    uses_groups: bool = Form(False),
    group_a_title: Optional[str] = Form(None),
    group_a_description: str = Form(""),
    group_b_title: Optional[str] = Form(None),
    group_b_description: str = Form(""),
    header_image_file: Optional[UploadFile] = File(None),
    service: EventService = Depends(get_event_service)
):
    """
    Create an event from a multipart form with an optional header image.
    The image is stored under a random name and its storage key is saved
    on the event. Only image files are accepted.
    """
    event_groups = None
    if uses_groups and group_a_title and group_b_title:
        event_groups = GroupPair(
            group_a=Group(title=group_a_title, description=group_a_description),
            group_b=Group(title=group_b_title, description=group_b_description),
        )
    try:
        event_data = EventCreate(
            title=title,
            description=description,
            datetime=datetime,
            location=location,
            max_participants=max_participants,
            uses_groups=uses_groups,
            event_groups=event_groups
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    content = None
    content_type = None
    if header_image_file is not None and header_image_file.filename:
        content_type = header_image_file.content_type
        if not content_type or not content_type.startswith("image/"):
            raise HTTPException(status_code=400, detail="Only image files are accepted")
        content = await header_image_file.read()

    return service.create_event(event_data, header_image=content, content_type=content_type)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: int,
    service: EventService = Depends(get_event_service)
):
    """Get event by ID"""
    return service.fetch_event_by_id(event_id)


@router.post("/{event_id}/registrations", response_model=EventRegistrationResponse, status_code=201)
async def register_for_event(
    event_id: int,
    registration: Optional[RegistrationCreate] = None,
    service: EventService = Depends(get_event_service)
):
    """Register the current user for an event (group_id required for grouped events)"""
    group_id = registration.group_id if registration else None
    return service.register_for_event(event_id, group_id)


@router.get("/{event_id}/registration", response_model=RegistrationStatusResponse)
async def get_registration_status(
    event_id: int,
    service: EventService = Depends(get_event_service)
):
    """Whether the current user is registered for the event; false when anonymous"""
    return RegistrationStatusResponse(
        event_id=event_id,
        is_registered=service.is_registered_for_event(event_id)
    )
