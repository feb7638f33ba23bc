"""Environment variable configuration for the karaoke portal backend."""

import os

HOST = os.getenv("KARAOKE_HOST", "0.0.0.0")
PORT = int(os.getenv("KARAOKE_PORT", "8000"))
PROJECT_ROOT = os.getenv(
    "KARAOKE_PROJECT_ROOT",
    os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")),
)
TEMP_DIR = os.getenv("KARAOKE_TEMP_DIR", os.path.join(PROJECT_ROOT, "web_tmp"))
AUDIO_TTL_HOURS = int(os.getenv("KARAOKE_AUDIO_TTL_HOURS", "24"))
CORS_ORIGINS = os.getenv("KARAOKE_CORS_ORIGINS", "http://localhost:3000").split(",")
VERBOSE_ERRORS = os.getenv("KARAOKE_VERBOSE_ERRORS", "false").lower() in ("1", "true", "yes")
PUBLIC_ORIGIN = os.getenv("KARAOKE_PUBLIC_ORIGIN", "http://localhost:3000")

# Supabase
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY = os.getenv("SUPABASE_KEY", "")
SONGS_BUCKET = os.getenv("KARAOKE_SONGS_BUCKET", "songs")
SONGS_TABLE = os.getenv("KARAOKE_SONGS_TABLE", "songs")
MAX_UPLOAD_MB = int(os.getenv("KARAOKE_MAX_UPLOAD_MB", "100"))
ADMIN_EMAILS = [e.strip().lower() for e in os.getenv("KARAOKE_ADMIN_EMAILS", "").split(",") if e.strip()]

# Subscription pricing (IDR) and manual payment contacts
PRICE_BASIC = int(os.getenv("KARAOKE_PRICE_BASIC", "5000"))
PRICE_PREMIUM = int(os.getenv("KARAOKE_PRICE_PREMIUM", "15000"))
PRICE_VIP = int(os.getenv("KARAOKE_PRICE_VIP", "50000"))
WHATSAPP_NUMBER = os.getenv("KARAOKE_WHATSAPP_NUMBER", "081234567890")
GOPAY_NUMBER = os.getenv("KARAOKE_GOPAY_NUMBER", "081234567890")

# AI text providers
GROQ_API_KEY = os.getenv("GROQ_API_KEY", "")
GROQ_BASE_URL = os.getenv("GROQ_BASE_URL", "https://api.groq.com/openai/v1")
GROQ_MODEL = os.getenv("GROQ_MODEL", "mixtral-8x7b-32768")
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_BASE_URL = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash-exp")
OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY", "")
OPENROUTER_BASE_URL = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
OPENROUTER_MODEL = os.getenv("OPENROUTER_MODEL", "anthropic/claude-3.5-sonnet")

# AI voice provider
PLAYAI_API_KEY = os.getenv("PLAYAI_API_KEY", "")
PLAYAI_BASE_URL = os.getenv("PLAYAI_BASE_URL", "https://api.play.ai/api/v1")

AI_TIMEOUT_SECONDS = float(os.getenv("KARAOKE_AI_TIMEOUT", "60"))
