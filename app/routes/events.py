from fastapi import APIRouter, Depends, HTTPException, status, Response, Path
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select, func
from typing import Annotated, List, Optional
from datetime import date
import logging

from app.database import get_db
from app.models import MAX_ROW_ID
from app.models.event import Event, EventCategory, EventStatus
from app.models.payment import Payment
from app.models.tickets import Ticket
from app.models.user import User
from app.schemas.event import (
    EventCreateSchema,
    EventUpdateSchema,
    EventResponseSchema
)
from app.auth.dependencies import get_current_admin_user

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/events",
    tags=["Events"]
)

@router.post(
    "/",
    response_model=EventResponseSchema,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new event (Admin only)"
)
async def create_event(
    event_data: EventCreateSchema,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    db_event = Event(**event_data.model_dump(), tickets_sold=0, author_id=current_user.id)
    db.add(db_event)
    try:
        await db.commit()
        await db.refresh(db_event)
        logger.info(f"Event '{db_event.title}' ({db_event.total_tickets} tickets) created by user ID {current_user.id}")
    except IntegrityError as e_integrity:
        await db.rollback()
        logger.warning(
            f"IntegrityError creating event with title '{event_data.title}' by user ID {current_user.id}: {str(e_integrity)}"
        )
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Could not create event due to a data conflict."
        )
    except Exception as e_general:
        await db.rollback()
        logger.error(
            f"Unexpected error creating event with title '{event_data.title}' by user ID {current_user.id}: {str(e_general)}",
            exc_info=True
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred while creating the event."
        )
    return db_event

@router.get(
    "/",
    response_model=List[EventResponseSchema],
    summary="Get published events with filtering and pagination (Public)"
)
async def get_all_events_public(
    db: AsyncSession = Depends(get_db),
    skip: int = 0,
    limit: int = 100,
    category: Optional[EventCategory] = None,
    event_status: Optional[EventStatus] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
):
    query = select(Event).where(Event.is_published.is_(True))
    if category is not None:
        query = query.where(Event.category == category)
    if event_status is not None:
        query = query.where(Event.status == event_status)
    if date_from is not None:
        query = query.where(Event.event_date >= date_from)
    if date_to is not None:
        query = query.where(Event.event_date <= date_to)

    query = query.offset(skip).limit(limit).order_by(Event.event_date.desc(), Event.id.desc())

    try:
        result = await db.execute(query)
        events = result.scalars().all()
        return events
    except Exception as e:
        logger.error(f"Error fetching events: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while fetching events."
        )

@router.get(
    "/admin/all",
    response_model=List[EventResponseSchema],
    summary="Admin: Get all events, published or not",
    dependencies=[Depends(get_current_admin_user)]
)
async def get_all_events_admin(
    db: AsyncSession = Depends(get_db),
    skip: int = 0,
    limit: int = 100
):
    result = await db.execute(select(Event).offset(skip).limit(limit).order_by(Event.id))
    return result.scalars().all()

@router.get(
    "/{event_id}",
    response_model=EventResponseSchema,
    summary="Get a specific event by ID (Public)"
)
async def get_event_by_id_public(
    event_id: Annotated[int, Path(le=MAX_ROW_ID)],
    db: AsyncSession = Depends(get_db)
):
    event = await db.get(Event, event_id)
    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Event with id {event_id} not found."
        )
    return event

@router.patch(
    "/{event_id}",
    response_model=EventResponseSchema,
    summary="Update an event (Admin only)"
)
async def update_event(
    event_id: Annotated[int, Path(le=MAX_ROW_ID)],
    event_update_data: EventUpdateSchema,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    db_event: Event | None = None
    update_payload_str = event_update_data.model_dump_json(exclude_unset=True)
    try:
        db_event = await db.get(Event, event_id)
        if not db_event:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Event with id {event_id} not found to update."
            )

        updated_data = event_update_data.model_dump(exclude_unset=True)
        if not updated_data:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No fields provided for update."
            )

        new_total = updated_data.get("total_tickets")
        if new_total is not None and new_total < db_event.tickets_sold:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"total_tickets cannot be lower than the {db_event.tickets_sold} tickets already sold."
            )

        for key, value in updated_data.items():
            setattr(db_event, key, value)

        await db.commit()
        await db.refresh(db_event)
        logger.info(f"Event ID {event_id} (title: '{db_event.title}') updated by user ID {current_user.id}.")
        return db_event

    except IntegrityError as e_integrity:
        # a concurrent purchase pushed tickets_sold past the new capacity
        await db.rollback()
        logger.warning(
            f"IntegrityError updating event id {event_id} with payload {update_payload_str}: {str(e_integrity)}"
        )
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Could not update event due to a data conflict."
        )
    except HTTPException:
        raise
    except Exception as e_general:
        await db.rollback()
        logger.error(
            f"Unexpected error updating event id {event_id} with payload {update_payload_str}: {str(e_general)}",
            exc_info=True
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"An unexpected error occurred while updating event {event_id}."
        )

@router.delete(
    "/{event_id}",
    summary="Delete an event without tickets (Admin only)",
    status_code=status.HTTP_204_NO_CONTENT
)
async def delete_event(
    event_id: Annotated[int, Path(le=MAX_ROW_ID)],
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    db_event_to_delete = await db.get(Event, event_id)
    if not db_event_to_delete:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Event with id {event_id} not found to delete."
        )

    ticket_count = await db.scalar(select(func.count(Ticket.id)).where(Ticket.event_id == event_id))
    payment_count = await db.scalar(select(func.count(Payment.id)).where(Payment.event_id == event_id))
    if ticket_count or payment_count:
        logger.warning(f"User ID {current_user.id} attempted to delete event ID {event_id} with {ticket_count} ticket(s).")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot delete event {event_id} while tickets or payments reference it."
        )

    try:
        event_title_for_log = db_event_to_delete.title
        await db.delete(db_event_to_delete)
        await db.commit()
        logger.info(f"Event '{event_title_for_log}' (ID: {event_id}) deleted successfully by user ID {current_user.id}.")
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except Exception as e:
        await db.rollback()
        logger.error(f"Error deleting event with id {event_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"An error occurred while deleting event {event_id}."
        )
