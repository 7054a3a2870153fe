import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# When set, reservations live in SQL tables instead of the JSON file
DATABASE_URL = os.getenv("DATABASE_URL") or None

RESERVATIONS_FILE = os.getenv("RESERVATIONS_FILE", os.path.join("data", "reservations.json"))
PROPERTIES_FILE = os.getenv("PROPERTIES_FILE", os.path.join("data", "properties.json"))

ALLOWED_ORIGINS_RAW = os.getenv("ALLOWED_ORIGINS", "http://localhost:5173")

ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in ALLOWED_ORIGINS_RAW.split(",") if origin.strip()
]

HOSPITABLE_WEBHOOK_SECRET = os.getenv("HOSPITABLE_WEBHOOK_SECRET", "")

AGENT_TIMEOUT_SECONDS = float(os.getenv("AGENT_TIMEOUT_SECONDS", "6"))

ENABLE_DEBUG_ROUTES = os.getenv("ENABLE_DEBUG_ROUTES", "true").lower() == "true"
