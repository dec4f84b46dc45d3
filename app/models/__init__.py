from sqlalchemy.orm import declarative_base

Base = declarative_base()

# largest value an INTEGER primary key can hold (signed 64-bit)
MAX_ROW_ID = 2**63 - 1

from app.models.user import User  # noqa: E402,F401
from app.models.event import Event  # noqa: E402,F401
from app.models.tickets import Ticket  # noqa: E402,F401
from app.models.payment import Payment  # noqa: E402,F401
from app.models.notification import Notification  # noqa: E402,F401
