from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Reconciliation settings loaded from environment variables.

    Environment variables can come from:
    - .env file next to the working directory
    - System environment

    Variable names follow docker-compose conventions:
    - POSTGRES_HOST, POSTGRES_PORT, etc. (for database)
    - TEXTURES_DIR, WEATHER_DIR (for local asset directories)
    """

    # Environment
    environment: str = "development"

    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "planner_user"
    postgres_password: str = "planner_pass"
    postgres_db: str = "planner"
    database_url: Optional[str] = Field(default=None, validate_default=True)
    db_schema: str = "world_planner"

    # Local sources
    catalog_path: str = "384390"
    textures_dir: str = "textures"
    weather_dir: str = "weather"
    texture_extension: str = ".png"
    catalog_min_items: int = 11000

    # Identifiers
    machine_id: int = 1
    regenerate_item_id_on_update: bool = True

    # Asset conflict repair: "fresh" or "prefer_hash_match"
    conflict_id_policy: str = "fresh"

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore extra env vars

    @field_validator('machine_id')
    @classmethod
    def check_machine_id(cls, v):
        """Snowflake machine ids are 10 bits wide"""
        if not 0 <= v <= 1023:
            raise ValueError(f"machine_id must be between 0 and 1023, got {v}")
        return v

    @field_validator('conflict_id_policy')
    @classmethod
    def check_conflict_policy(cls, v):
        v = v.lower()
        if v not in ("fresh", "prefer_hash_match"):
            raise ValueError(f"conflict_id_policy must be 'fresh' or 'prefer_hash_match', got {v!r}")
        return v

    @field_validator('database_url', mode='before')
    @classmethod
    def construct_database_url(cls, v, info):
        """Construct database URL from components if not explicitly set"""
        if v:
            return v

        data = info.data
        host = data.get('postgres_host', 'localhost')
        port = data.get('postgres_port', 5432)
        user = data.get('postgres_user', 'planner_user')
        password = data.get('postgres_password', 'planner_pass')
        db = data.get('postgres_db', 'planner')

        return f"postgresql://{user}:{password}@{host}:{port}/{db}"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
