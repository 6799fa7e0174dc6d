from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    # Only the bot needs it; the store and the tests run without one
    bot_token: str | None = Field(default=None, validation_alias="BOT_TOKEN")

    db_path: str = Field(default="data/liftlog.sqlite3", validation_alias="DB_PATH")
    database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")
    log_rotation: str = Field(default="10 MB", validation_alias="LOG_ROTATION")
    log_retention: str = Field(default="14 days", validation_alias="LOG_RETENTION")

    # Plan edits keep days/exercises missing from the submission unless this is on
    delete_removed_on_edit: bool = Field(default=False, validation_alias="DELETE_REMOVED_ON_EDIT")

    default_sets: int = Field(default=3, validation_alias="DEFAULT_SETS")
    default_reps: str = Field(default="8-12", validation_alias="DEFAULT_REPS")


settings = Settings()
