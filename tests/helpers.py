from decimal import Decimal

from app.database import AsyncSessionLocal
from app.models.event import Event
from app.auth import security, user_crud

# SQLite holds its write lock for the whole transaction, so helpers here
# always work in a short-lived session of their own.


async def create_user(email: str, role: str = "customer", name: str | None = None):
    async with AsyncSessionLocal() as s:
        return await user_crud.create_user(s, email=email, password="password123", name=name, role=role)


async def create_event(total_tickets: int = 10, tickets_sold: int = 0, price: str = "25.00", title: str = "Spring Concert"):
    async with AsyncSessionLocal() as s:
        event = Event(
            title=title,
            total_tickets=total_tickets,
            tickets_sold=tickets_sold,
            price=Decimal(price),
            is_published=True,
        )
        s.add(event)
        await s.commit()
        return event


async def fetch(model, pk):
    async with AsyncSessionLocal() as s:
        return await s.get(model, pk)


def auth_headers(user) -> dict:
    token = security.token_for_user(user)
    return {"Authorization": f"Bearer {token}"}
