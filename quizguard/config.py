"""
Quiz Guard Configuration Settings

Strike policy and timer defaults for the quiz security monitor.
"""
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Configuration for the quiz security service."""
    
    # API Settings
    APP_NAME: str = "Quiz Guard Service"
    DEBUG: bool = True
    PORT: int = 8002
    LOG_LEVEL: str = "INFO"
    
    # Quiz Settings
    DEFAULT_QUIZ_MINUTES: int = 30
    TICK_INTERVAL_SECONDS: float = Field(1.0, gt=0)
    
    # "three_strike" (warn twice, disqualify on the third)
    # or "zero_tolerance" (disqualify on the first violation)
    STRIKE_POLICY: Literal["three_strike", "zero_tolerance"] = "three_strike"
    
    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
