from contextlib import asynccontextmanager
from fastapi import FastAPI
import uvicorn
from app.routes import auth_router, users, events, tickets, payments
from app.models import Base
from app.database import engine
from app.config import settings
import logging
import sys

LOG_LEVEL = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s (%(filename)s:%(lineno)d)"
stream_handler = logging.StreamHandler(sys.stdout)
stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
logging.basicConfig(level=LOG_LEVEL, handlers=[stream_handler], force=True) 

@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logging.getLogger(__name__).info("Tickezy API started.")
    yield
    await engine.dispose()


app = FastAPI(title="Tickezy API", lifespan=lifespan)

app.include_router(auth_router.router, tags=["Authentication"])
app.include_router(users.router, tags=["Users"])
app.include_router(events.router, tags=["Events"])
app.include_router(tickets.router, tags=["Tickets"])
app.include_router(payments.router, tags=["Payments"])


@app.get("/")
def root():
    return {"status": "ok", "service": "tickezy"}

if __name__ == "__main__":
    uvicorn.run("app.main:app", reload=True)
