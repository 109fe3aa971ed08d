import os
from dotenv import load_dotenv

load_dotenv()

# --- JWT Configuration ---
JWT_SECRET = os.getenv("JWT_SECRET", "change-this-secret-key")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRY_HOURS = int(os.getenv("JWT_EXPIRY_HOURS", "720"))  # 30 days

# --- Database ---
# Default to local SQLite, override with DATABASE_URL for Postgres
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/habits.db")

# Fix for common SQLAlchemy issues with postgres:// vs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# --- HTTP ---
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Habits ---
HABIT_NAME_MAX_LENGTH = 80
