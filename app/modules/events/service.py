from supabase import Client
from app.modules.events.schemas import (
    EventCreate, EventResponse, EventCreateResponse, EventRegistrationResponse
)
from app.modules.events.storage import get_header_image_storage
from app.core.datetime_utils import date_x_hours_ago, to_instant_string
from app.config import settings
from typing import Any, Dict, List, Optional
from fastapi import HTTPException
import uuid
import logging

logger = logging.getLogger(__name__)

GROUP_PAIR_SELECT = (
    "event_groups:event_group_pairs("
    "groupA:group_a(id, title, description), "
    "groupB:group_b(id, title, description))"
)
EVENT_SELECT = f"*, {GROUP_PAIR_SELECT}"
USER_EVENT_SELECT = f"{EVENT_SELECT}, event_registrations!inner(user_id)"


def _extract_event_id(data: Any) -> Optional[int]:
    """The RPC may return the new id, the new row, or a list of rows"""
    if isinstance(data, list):
        data = data[0] if data else None
    if isinstance(data, dict):
        data = data.get("id")
    if isinstance(data, int) and not isinstance(data, bool):
        return data
    return None


class EventService:
    def __init__(self, supabase: Client, current_user: Optional[Dict[str, Any]] = None, image_storage=None):
        self.supabase = supabase
        self.current_user = current_user
        self._image_storage = image_storage

    @property
    def image_storage(self):
        """Header image storage, created on first upload"""
        if self._image_storage is None:
            self._image_storage = get_header_image_storage(self.supabase)
        return self._image_storage

    @property
    def user_id(self) -> Optional[str]:
        if not self.current_user:
            return None
        return self.current_user.get("id")

    def _require_user(self, detail: str = "User not logged in") -> str:
        if not self.user_id:
            raise HTTPException(status_code=401, detail=detail)
        return self.user_id

    def _upcoming_events_query(self, columns: str):
        """Events that are neither cancelled nor ended and started at most the grace window ago"""
        cutoff = date_x_hours_ago(settings.upcoming_grace_hours)
        return self.supabase.table("events")\
            .select(columns)\
            .not_.eq("is_cancelled", True)\
            .not_.eq("is_ended", True)\
            .gt("datetime", to_instant_string(cutoff))

    def fetch_events(self) -> List[EventResponse]:
        """List upcoming events, soonest first, with their group pair"""
        try:
            result = self._upcoming_events_query(EVENT_SELECT)\
                .order("datetime", desc=False)\
                .execute()
        except Exception as e:
            logger.error(f"Failed to fetch events: {str(e)}")
            raise

        if result is None or result.data is None:
            logger.error("Failed to fetch events: no result set")
            raise HTTPException(status_code=500, detail="Failed to fetch events")

        return [EventResponse(**event) for event in result.data]

    def fetch_user_events(self) -> List[EventResponse]:
        """List upcoming events the current user is registered for"""
        user_id = self._require_user()
        try:
            result = self._upcoming_events_query(USER_EVENT_SELECT)\
                .eq("event_registrations.user_id", user_id)\
                .order("datetime", desc=False)\
                .execute()
        except Exception as e:
            logger.error(f"Failed to fetch events of user {user_id}: {str(e)}")
            raise

        if result is None or result.data is None:
            raise HTTPException(status_code=500, detail="Could not load user's events")

        return [EventResponse(**event) for event in result.data]

    def fetch_event_by_id(self, event_id: int) -> EventResponse:
        """Get event by ID"""
        result = self.supabase.table("events")\
            .select(EVENT_SELECT)\
            .eq("id", event_id)\
            .maybe_single()\
            .execute()

        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Event with this ID does not exist")

        return EventResponse(**result.data)

    def upload_header_image(self, file_content: bytes, content_type: Optional[str] = None) -> str:
        """Store a header image under a random name and return its storage key"""
        file_name = str(uuid.uuid4())
        content_type = content_type or settings.header_image_content_type
        logger.info(f"Uploading header image {file_name} ({content_type})")
        storage_key = self.image_storage.upload_file(file_content, file_name, content_type)
        if not storage_key:
            raise HTTPException(status_code=500, detail="Received no data after uploading image")
        return storage_key

    def create_event(
        self,
        event_data: EventCreate,
        header_image: Optional[bytes] = None,
        content_type: Optional[str] = None
    ) -> EventCreateResponse:
        """Create an event; grouped events go through the create_event_with_groups RPC"""
        self._require_user("User is not logged in")

        header_image_key = event_data.header_image
        if header_image:
            header_image_key = self.upload_header_image(header_image, content_type)

        try:
            if event_data.uses_groups:
                groups = event_data.event_groups
                result = self.supabase.rpc("create_event_with_groups", {
                    "title": event_data.title,
                    "description": event_data.description,
                    "header_image": header_image_key,
                    "datetime": to_instant_string(event_data.datetime),
                    "location": event_data.location,
                    "max_participants": event_data.max_participants,
                    "groupATitle": groups.group_a.title,
                    "groupADescription": groups.group_a.description,
                    "groupBTitle": groups.group_b.title,
                    "groupBDescription": groups.group_b.description,
                }).execute()
            else:
                result = self.supabase.table("events").insert({
                    "title": event_data.title,
                    "description": event_data.description,
                    "header_image": header_image_key,
                    "datetime": event_data.datetime.isoformat(),
                    "location": event_data.location,
                    "max_participants": event_data.max_participants,
                    # plain events never carry a pairing
                    "event_group_pair": None,
                }).execute()
        except Exception as e:
            logger.error(f"Failed to create event '{event_data.title}': {str(e)}")
            raise

        event_id = _extract_event_id(result.data if result else None)
        logger.info(f"Created event '{event_data.title}' (id={event_id}, grouped={event_data.uses_groups})")
        return EventCreateResponse(
            message="Event created successfully",
            event_id=event_id,
            header_image=header_image_key
        )

    def register_for_event(self, event_id: int, group_id: Optional[int] = None) -> EventRegistrationResponse:
        """Register the current user for an event, in one of its groups when it uses groups"""
        user_id = self._require_user()

        event = self.fetch_event_by_id(event_id)
        if event.is_cancelled or event.is_ended:
            raise HTTPException(status_code=400, detail="Event is no longer open for registration")
        if event.uses_groups:
            if group_id not in event.event_groups.group_ids():
                raise HTTPException(status_code=400, detail="Choose one of the event's two groups")
        elif group_id is not None:
            raise HTTPException(status_code=400, detail="Event does not use groups")

        try:
            result = self.supabase.table("event_registrations").insert({
                "user_id": user_id,
                "event_id": event_id,
                "group_id": group_id
            }).execute()
        except Exception as e:
            logger.error(f"Failed to register user {user_id} for event {event_id}: {str(e)}")
            raise

        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to register for event")

        return EventRegistrationResponse(**result.data[0])

    def is_registered_for_event(self, event_id: int) -> bool:
        """Whether the current user holds a registration; anonymous callers never do"""
        user_id = self.user_id
        if not user_id:
            return False

        result = self.supabase.table("event_registrations")\
            .select("id", count="exact", head=True)\
            .eq("event_id", event_id)\
            .eq("user_id", user_id)\
            .execute()

        return bool(result.count)
