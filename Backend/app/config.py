# app/config.py
import os
import urllib.parse
from dotenv import load_dotenv

load_dotenv()

# Database configuration (env defaults)
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_USER = os.getenv("DB_USER", "root")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")
DB_NAME = os.getenv("DB_NAME", "qc_tracker")
DB_PORT = int(os.getenv("DB_PORT", 3306))

_password_enc = urllib.parse.quote_plus(DB_PASSWORD)
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"mysql+pymysql://{DB_USER}:{_password_enc}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)

# Binary store: "local" keeps files under UPLOAD_DIR, "supabase" uses a storage bucket
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local").strip().lower()
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
IMAGE_BUCKET = os.getenv("IMAGE_BUCKET", "qc-images")
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/")
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_KEY = os.getenv("SUPABASE_SERVICE_KEY", "")
MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE", 5 * 1024 * 1024))

# Optional image annotation service; disabled when no key is configured
ANNOTATION_API_KEY = os.getenv("ANNOTATION_API_KEY", "")
ANNOTATION_MODEL = os.getenv("ANNOTATION_MODEL", "gemini-2.5-flash")
ANNOTATION_TIMEOUT = float(os.getenv("ANNOTATION_TIMEOUT", 30))

DEFAULT_ACTOR = os.getenv("DEFAULT_ACTOR", "Supervisor A")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
