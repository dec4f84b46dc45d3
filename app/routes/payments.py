from fastapi import APIRouter, Depends, HTTPException, status, Path
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from typing import Annotated, List, Optional
from datetime import datetime
import logging

from app.database import get_db
from app.models import MAX_ROW_ID
from app.models.payment import PaymentStatus
from app.models.user import User
from app.schemas.payment import (
    PaymentCreateSchema,
    PaymentStatusUpdateSchema,
    PaymentResponseSchema
)
from app.auth.dependencies import get_current_active_user, get_current_admin_user, get_current_staff_user
from app.services.exceptions import TicketingError
from app.services.payments import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/payments",
    tags=["Payments"]
)


def get_payment_service(db: AsyncSession = Depends(get_db)) -> PaymentService:
    return PaymentService(db)


@router.post(
    "",
    response_model=PaymentResponseSchema,
    status_code=status.HTTP_201_CREATED,
    summary="Record a payment awaiting confirmation (Authenticated User)"
)
async def create_payment(
    payment_data: PaymentCreateSchema,
    payments: PaymentService = Depends(get_payment_service),
    current_user: User = Depends(get_current_active_user)
):
    try:
        return await payments.create_payment(
            current_user,
            event_id=payment_data.event_id,
            ticket_id=payment_data.ticket_id,
            amount=payment_data.amount,
            payment_method=payment_data.payment_method,
            transaction_id=payment_data.transaction_id,
        )
    except TicketingError as e:
        logger.warning(f"Payment creation refused for user_id {current_user.id}: {e.detail}")
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except IntegrityError as e_integrity:
        await payments.db.rollback()
        logger.warning(f"IntegrityError creating payment {payment_data.model_dump()}: {str(e_integrity)}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Could not create payment due to a data conflict.")
    except Exception as e_general:
        await payments.db.rollback()
        logger.error(f"Unexpected error creating payment for user_id {current_user.id}: {str(e_general)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An unexpected error occurred.")

@router.get(
    "",
    response_model=List[PaymentResponseSchema],
    summary="Get payments (Admins see all, users only their own)"
)
async def get_payments(
    payments: PaymentService = Depends(get_payment_service),
    current_user: User = Depends(get_current_active_user),
    skip: int = 0,
    limit: int = 100
):
    try:
        return await payments.list_payments(current_user, skip=skip, limit=limit)
    except Exception as e:
        logger.error(f"Error fetching payments for user_id {current_user.id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An error occurred.")

@router.get(
    "/filter/search",
    response_model=List[PaymentResponseSchema],
    summary="Admin: Filter payments by status and date range",
    dependencies=[Depends(get_current_admin_user)]
)
async def filter_payments(
    payments: PaymentService = Depends(get_payment_service),
    payment_status: Optional[PaymentStatus] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None
):
    return await payments.filter_payments(status=payment_status, start_date=start_date, end_date=end_date)

@router.get(
    "/{payment_id}",
    response_model=PaymentResponseSchema,
    summary="Get a payment by ID (Owner or Admin)"
)
async def get_payment_by_id(
    payment_id: Annotated[int, Path(le=MAX_ROW_ID)],
    payments: PaymentService = Depends(get_payment_service),
    current_user: User = Depends(get_current_active_user)
):
    try:
        return await payments.get_payment(payment_id, current_user)
    except TicketingError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)

@router.put(
    "/{payment_id}/status",
    response_model=PaymentResponseSchema,
    summary="Update a payment's status (Staff or Admin)"
)
async def update_payment_status(
    payment_id: Annotated[int, Path(le=MAX_ROW_ID)],
    status_update: PaymentStatusUpdateSchema,
    payments: PaymentService = Depends(get_payment_service),
    current_user: User = Depends(get_current_staff_user)
):
    try:
        payment = await payments.update_status(payment_id, status_update.status)
    except TicketingError as e:
        logger.warning(f"Status update of payment {payment_id} by {current_user.email} refused: {e.detail}")
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except Exception as e:
        await payments.db.rollback()
        logger.error(f"Error updating status of payment id {payment_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An error occurred.")
    logger.info(f"Payment {payment_id} set to {status_update.status.value} by {current_user.email}.")
    return payment

@router.delete(
    "/{payment_id}",
    summary="Admin: Delete a payment",
    dependencies=[Depends(get_current_admin_user)]
)
async def delete_payment(
    payment_id: Annotated[int, Path(le=MAX_ROW_ID)],
    payments: PaymentService = Depends(get_payment_service)
):
    try:
        await payments.delete_payment(payment_id)
    except TicketingError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except Exception as e:
        await payments.db.rollback()
        logger.error(f"Error deleting payment with id {payment_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An error occurred.")
    return {"message": "Payment deleted successfully"}
