# clinic/core/config.py
from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Firebase web config, handed to the login page for the popup sign-in
    FIREBASE_API_KEY: str = ""
    FIREBASE_AUTH_DOMAIN: str = ""
    FIREBASE_PROJECT_ID: str = ""
    FIREBASE_STORAGE_BUCKET: str = ""
    FIREBASE_MESSAGING_SENDER_ID: str = ""
    FIREBASE_APP_ID: str = ""

    # Service account used by the Admin SDK
    FIREBASE_CREDENTIALS: str = "clinic/core/firebase_key.json"

    # How timestamps are shown (registration date, session date)
    DATE_FORMAT: str = "%d/%m/%Y"

    TIMER_TICK_SECONDS: float = 1.0

    CLINIC_DEBUG_MODE: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    def web_config(self) -> dict:
        """Firebase JS SDK config object."""
        return {
            "apiKey": self.FIREBASE_API_KEY,
            "authDomain": self.FIREBASE_AUTH_DOMAIN,
            "projectId": self.FIREBASE_PROJECT_ID,
            "storageBucket": self.FIREBASE_STORAGE_BUCKET,
            "messagingSenderId": self.FIREBASE_MESSAGING_SENDER_ID,
            "appId": self.FIREBASE_APP_ID,
        }


settings = Settings()
