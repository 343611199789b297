from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TROLLER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Caps on a single dice term, e.g. 100d1000 is the largest allowed roll.
    max_dice: int = 100
    max_sides: int = 1000

    # Longest number literal accepted, and longest total a roll may reach.
    max_literal_digits: int = 15
    max_result_digits: int = 100

    server_name: str = "troller"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


settings = Settings()
