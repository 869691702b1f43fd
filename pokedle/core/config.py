from typing import Literal

from dotenv import load_dotenv
from pydantic_settings import BaseSettings


class Config(BaseSettings):
    db_url: str = "sqlite+aiosqlite:///./pokedle.db"
    env: Literal["prod", "dev"] = "prod"
    echo_sql: bool = False
    cors_origins: list[str] = ["*"]

    # JWT & token settings
    # IMPORTANT: set in environment for production
    jwt_secret: str | None = None
    jwt_algorithm: str = "HS256"
    access_token_ttl_seconds: int = 15 * 60  # 15 minutes

    # Seed for the process-wide random source, unset in production
    rng_seed: int | None = None

    @property
    def is_dev(self) -> bool:
        return self.env == "dev"


load_dotenv()
settings = Config()
