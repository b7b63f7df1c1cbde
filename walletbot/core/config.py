from functools import lru_cache
from pathlib import Path
from dotenv import load_dotenv
import os

load_dotenv(Path(__file__).resolve().parents[2] / ".env")

class Settings:
    # WhatsApp Cloud API settings
    META_TOKEN: str = os.getenv("META_BOT_TOKEN")
    PHONE_ID: str = os.getenv("META_NUMBER_ID")
    VERIFY_TOKEN: str = os.getenv("META_VERIFY_TOKEN")
    GRAPH_API_VERSION: str = os.getenv("META_VERSION", "v22.0")
    BASE_URL: str = f"https://graph.facebook.com/{GRAPH_API_VERSION}"

    # Ledger API settings (cards, transactions, user profiles)
    API_URL: str = os.getenv("API_URL", "http://localhost")
    API_PORT: str = os.getenv("API_PORT", "3000")
    API_VERSION: str = os.getenv("API_VERSION", "1")
    API_TOKEN: str = os.getenv("API_TOKEN", "")

    # Firebase Identity Toolkit (email/password accounts)
    FIREBASE_API_KEY: str = os.getenv("FIREBASE_API_KEY", "")
    IDENTITY_TOOLKIT_URL: str = "https://identitytoolkit.googleapis.com/v1"

    # Presentation
    BOT_TIMEZONE: str = os.getenv("BOT_TIMEZONE", "Asia/Baku")
    CURRENCY_SYMBOL: str = os.getenv("CURRENCY_SYMBOL", "₼")
    QUICKCHART_URL: str = os.getenv("QUICKCHART_URL", "https://quickchart.io/chart")

@lru_cache
def get_settings() -> Settings:
    return Settings()
