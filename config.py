import os
import dotenv

# Load environment variables from .env file
dotenv.load_dotenv()

# Application Constants
APP_TITLE = "IWEMS"
AUTH_PATH = "/auth"

# Supabase Configuration
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")  # anon key, sent as `apikey` to the Auth API
SUPABASE_ACCESS_TOKEN = os.getenv("SUPABASE_ACCESS_TOKEN")  # management token for the MCP server
SUPABASE_PROJECT_ID = os.getenv("SUPABASE_PROJECT_ID")
AUTH_TIMEOUT_SECONDS = float(os.getenv("AUTH_TIMEOUT_SECONDS", "10"))

# Redis Configuration
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
REDIS_CACHE_ENABLED = os.getenv("REDIS_CACHE_ENABLED", "false").lower() == "true"
CATALOG_CACHE_TTL = int(os.getenv("CATALOG_CACHE_TTL", "300"))

# Self-service role switching is demo scaffolding; keep it off unless asked for.
ROLE_SWITCH_ENABLED = os.getenv("ROLE_SWITCH_ENABLED", "false").lower() == "true"

# Dashboard
ACTIVITY_FEED_LIMIT = int(os.getenv("ACTIVITY_FEED_LIMIT", "5"))
ACTIVITY_PER_KIND = int(os.getenv("ACTIVITY_PER_KIND", "3"))

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "false").lower() == "true"
LOG_FILE_PATH = os.getenv("LOG_FILE_PATH", "app.log")

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8765"))

# CORS Origins
CORS_ORIGINS = [
    "http://localhost",
    "http://localhost:5173",
    "http://127.0.0.1",
    "http://127.0.0.1:5173",
    "http://localhost:8080",
]
