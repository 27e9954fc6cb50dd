"""
Configuration Settings.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings."""

    # App info
    app_name: str = "IslamicAI Chat Memory"
    app_version: str = "1.0.0"
    debug: bool = True

    # Storage
    storage_type: str = "local"  # local, memory
    local_storage_path: str = "./data"
    chat_sessions_key: str = "islamicAI_chatSessions"
    max_sessions: int = 50
    recent_chats_limit: int = 10

    # Auto-save
    autosave_delay_seconds: float = 3.0

    # Remote assistant service
    assistant_base_url: str = "http://127.0.0.1:8787"
    assistant_timeout: float = 60.0
    assistant_api_key: Optional[str] = None

    # Conversation texts
    welcome_message: str = "Welcome to IslamicAI! How can I help you today?"
    error_message: str = "Sorry, there was an error. Please try again."

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
    ]

    # Logging configuration
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file_path: str = "./logs/chat_memory.log"
    log_file_enabled: bool = True
    log_console_enabled: bool = True
    log_json_format: bool = True  # JSON format for files, human-readable for console

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
