from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = Field(default="bizcards", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    csv_delimiter: str = Field(default=";", alias="CSV_DELIMITER")
    website_domain: str = Field(default="trakt.ru", alias="WEBSITE_DOMAIN")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
