from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status, Path
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Annotated, List
import logging

from app.database import get_db
from app.models import MAX_ROW_ID
from app.models.event import Event
from app.models.user import User
from app.schemas.tickets import (
    TicketPurchaseSchema,
    TicketStatusUpdateSchema,
    TicketVerifySchema,
    TicketResponseSchema,
    VerificationReceiptSchema,
)
from app.auth.dependencies import get_current_active_user, get_current_admin_user, get_current_staff_user
from app.services.exceptions import TicketingError
from app.services.notifications import NotificationEmitter, get_notification_emitter
from app.services.ticket_admin import TicketAdmin
from app.services.ticket_issuer import TicketIssuer
from app.services.ticket_verifier import TicketVerifier

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/tickets",
    tags=["Tickets"]
)


def get_ticket_issuer(db: AsyncSession = Depends(get_db)) -> TicketIssuer:
    return TicketIssuer(db)

def get_ticket_verifier(db: AsyncSession = Depends(get_db)) -> TicketVerifier:
    return TicketVerifier(db)

def get_ticket_admin(db: AsyncSession = Depends(get_db)) -> TicketAdmin:
    return TicketAdmin(db)


@router.post(
    "",
    response_model=List[TicketResponseSchema],
    status_code=status.HTTP_201_CREATED,
    summary="Purchase tickets for an event (Authenticated User)"
)
async def purchase_tickets(
    purchase: TicketPurchaseSchema,
    background_tasks: BackgroundTasks,
    issuer: TicketIssuer = Depends(get_ticket_issuer),
    notifier: NotificationEmitter = Depends(get_notification_emitter),
    current_user: User = Depends(get_current_active_user)
):
    try:
        tickets = await issuer.issue(
            current_user,
            event_id=purchase.event_id,
            quantity=purchase.quantity,
            payment_method=purchase.payment_method,
        )
    except TicketingError as e:
        logger.warning(
            f"Purchase refused for user_id {current_user.id}, event_id {purchase.event_id}, quantity {purchase.quantity}: {e.detail}"
        )
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except Exception as e_general:
        logger.error(
            f"Unexpected error purchasing tickets for user_id {current_user.id}, event_id {purchase.event_id}: {str(e_general)}",
            exc_info=True
        )
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An unexpected error occurred.")

    event_title = await _event_title(issuer.db, purchase.event_id)
    background_tasks.add_task(
        notifier.ticket_confirmed,
        current_user.id,
        purchase.event_id,
        event_title,
        [t.id for t in tickets],
    )
    return tickets

async def _event_title(db: AsyncSession, event_id: int) -> str:
    event = await db.get(Event, event_id)
    title = event.title if event else f"event {event_id}"
    await db.commit()
    return title


@router.post(
    "/verify",
    response_model=VerificationReceiptSchema,
    summary="Verify and redeem a scanned ticket QR code (Staff or Admin)"
)
async def verify_ticket(
    scan: TicketVerifySchema,
    verifier: TicketVerifier = Depends(get_ticket_verifier),
    current_user: User = Depends(get_current_staff_user)
):
    try:
        receipt = await verifier.verify(scan.qr_data, current_user)
    except TicketingError as e:
        logger.warning(f"Scan by {current_user.email} rejected: {e.detail}")
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except Exception as e_general:
        await verifier.db.rollback()
        logger.error(f"Unexpected error verifying ticket scan by {current_user.email}: {str(e_general)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An unexpected error occurred.")
    return receipt


@router.get(
    "/user/me",
    response_model=List[TicketResponseSchema],
    summary="Get all tickets for the current authenticated user"
)
async def get_my_tickets(
    tickets: TicketAdmin = Depends(get_ticket_admin),
    current_user: User = Depends(get_current_active_user),
    skip: int = 0,
    limit: int = 100
):
    try:
        return await tickets.list_user_tickets(current_user.id, skip=skip, limit=limit)
    except Exception as e:
        logger.error(f"Error fetching tickets for current user_id {current_user.id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An error occurred.")

@router.get(
    "",
    response_model=List[TicketResponseSchema],
    summary="Admin: Get all tickets (paginated)",
    dependencies=[Depends(get_current_admin_user)]
)
async def get_all_tickets_admin(
    tickets: TicketAdmin = Depends(get_ticket_admin),
    skip: int = 0,
    limit: int = 100
):
    try:
        return await tickets.list_tickets(skip=skip, limit=limit)
    except Exception as e:
        logger.error(f"Error fetching all tickets (admin): {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An error occurred.")

@router.get(
    "/event/{event_id}",
    response_model=List[TicketResponseSchema],
    summary="Get all tickets for a specific event (Staff or Admin)",
    dependencies=[Depends(get_current_staff_user)]
)
async def get_tickets_for_event(
    event_id: Annotated[int, Path(le=MAX_ROW_ID)],
    tickets: TicketAdmin = Depends(get_ticket_admin),
    skip: int = 0,
    limit: int = 100
):
    if await tickets.db.get(Event, event_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Event with id {event_id} not found.")
    try:
        return await tickets.list_event_tickets(event_id, skip=skip, limit=limit)
    except Exception as e:
        logger.error(f"Error fetching tickets for event_id {event_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An error occurred.")

@router.get(
    "/{ticket_id}",
    response_model=TicketResponseSchema,
    summary="Get a specific ticket by ID (Owner, Staff or Admin)"
)
async def get_ticket_by_id_restricted(
    ticket_id: str,
    tickets: TicketAdmin = Depends(get_ticket_admin),
    current_user: User = Depends(get_current_active_user)
):
    try:
        ticket = await tickets.get_ticket(ticket_id)
    except TicketingError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)

    if ticket.user_id != current_user.id and not current_user.can_check_in:
        logger.warning(f"User ID {current_user.id} (role {current_user.role}) attempted to access ticket ID {ticket_id} not belonging to them.")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to access this ticket.")
    return ticket

@router.put(
    "/{ticket_id}/status",
    response_model=TicketResponseSchema,
    summary="Admin: Override a ticket's status",
    dependencies=[Depends(get_current_admin_user)]
)
async def update_ticket_status_by_admin(
    ticket_id: str,
    status_update: TicketStatusUpdateSchema,
    tickets: TicketAdmin = Depends(get_ticket_admin)
):
    try:
        return await tickets.update_status(ticket_id, status_update.status)
    except TicketingError as e:
        logger.warning(f"Admin status override of ticket {ticket_id} to {status_update.status.value} refused: {e.detail}")
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except Exception as e:
        await tickets.db.rollback()
        logger.error(f"Error (admin) updating status of ticket id {ticket_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An error occurred.")

@router.delete(
    "/{ticket_id}",
    summary="Admin: Delete a ticket and release its seat",
    dependencies=[Depends(get_current_admin_user)]
)
async def delete_ticket_by_admin(
    ticket_id: str,
    tickets: TicketAdmin = Depends(get_ticket_admin)
):
    try:
        await tickets.delete_ticket(ticket_id)
    except TicketingError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except Exception as e:
        await tickets.db.rollback()
        logger.error(f"Error deleting ticket with id {ticket_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An error occurred.")
    return {"message": "Ticket deleted successfully"}
