import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# Managed Postgres (Supabase) connection string; local SQLite file for development
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./dentistry.db")

# Cal.com Configuration
CALCOM_API_KEY = os.getenv("CALCOM_API_KEY")
CALCOM_API_URL = os.getenv("CALCOM_API_URL", "https://api.cal.com/v2")
# Signing secret configured on the Cal.com webhook; verification is skipped when unset
CALCOM_WEBHOOK_SECRET = os.getenv("CALCOM_WEBHOOK_SECRET")
# Attendee timezone used when a booking request does not carry one
CALCOM_DEFAULT_TIMEZONE = os.getenv("CALCOM_DEFAULT_TIMEZONE", "America/Sao_Paulo")

# Timezone used to render lastVisit / nextAppointment for the dashboard
DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE", "America/Sao_Paulo")

# Frontend base URL
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

# CORS origins (comma-separated)
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "ALLOWED_ORIGINS",
        f"https://dentistry.smartlanding.com.br,{FRONTEND_URL},http://localhost:3000",
    ).split(",")
    if origin.strip()
]
