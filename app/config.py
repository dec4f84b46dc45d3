from dotenv import load_dotenv
import os

load_dotenv()

class Settings:
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./tickezy.db")
    SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

    SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
    ALGORITHM = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    MAX_TICKETS_PER_PURCHASE = int(os.getenv("MAX_TICKETS_PER_PURCHASE", "10"))
    QR_BOX_SIZE = int(os.getenv("QR_BOX_SIZE", "6"))
    QR_BORDER = int(os.getenv("QR_BORDER", "2"))

settings = Settings()
