import os  # lets us read environment variables (from the OS)
from functools import (
    lru_cache,  # tiny built-in cache; we use it to reuse one Settings object
)
from typing import List

from dotenv import load_dotenv  # loads variables from a local .env file
from pydantic import BaseModel  # Pydantic gives us a typed, validated settings class

load_dotenv()  # read .env and put those key=value pairs into environment variables


def _split_csv(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


class Settings(BaseModel):  # our typed container for config values
    # signs the bearer tokens handed out at login/register
    # change effect: every previously issued token stops validating
    secret_key: str = os.getenv("SECRET_KEY", "dev-secret-change")

    # database connection string; default is a SQLite file in the project folder
    # change effect: point to a different DB (e.g., Postgres) or file path
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./pocketbook.db")

    # "production" hides exception details in 500 responses
    environment: str = os.getenv("APP_ENV", "development")

    # how long a token stays valid, in seconds (default 30 days)
    token_max_age: int = int(os.getenv("TOKEN_MAX_AGE", str(30 * 24 * 3600)))

    # currency given to new users who don't pick one
    default_currency: str = os.getenv("DEFAULT_CURRENCY", "HKD")

    # browser origins allowed to call the API (the SPA dev server by default)
    cors_origins: List[str] = _split_csv(
        os.getenv("CORS_ORIGINS", "http://localhost:3000")
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache  # make sure Settings() is created once and reused (fast + consistent)
def get_settings() -> Settings:
    return Settings()  # build from env (already loaded by load_dotenv())
