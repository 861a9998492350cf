from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List


class Settings(BaseSettings):
    # Application
    app_name: str = "Leave Desk"
    debug: bool = False
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Database
    database_url: str = "sqlite:///./leavedesk.db"

    # Sessions
    session_expire_minutes: int = 60 * 8  # one working day

    # Leave Policy
    annual_paid_allowance: int = 20

    # Employee Rules
    email_domain: str = "@pal.tech"
    min_password_length: int = 6

    # Bootstrap HR account
    hr_email: str = "hr@pal.tech"
    hr_password: str = "hr@pal"
    hr_name: str = "HR"
    hr_emp_id: str = "HR-001"

    class Config:
        env_file = ".env"
        extra = "allow"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
