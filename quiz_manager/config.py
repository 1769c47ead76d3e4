"""
Configuration management using Pydantic Settings
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    
    # Database
    DATABASE_URL: str = "sqlite:///./quiz_management.db"
    
    # Redis
    REDIS_URL: str = "redis://redis:6379/0"
    CACHE_ENABLED: bool = True
    QUIZ_CACHE_TTL: int = 3600  # 1 hour
    
    # Application
    APP_NAME: str = "Quiz Management System"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    
    # Security
    BCRYPT_ROUNDS: int = 12
    DEFAULT_STUDENT_PASSWORD: str = "123456"  # assigned to CSV-imported students
    
    # Quiz Settings
    POINTS_PER_QUESTION: int = 10
    DEFAULT_TIME_LIMIT_MINUTES: int = 30
    COUNTDOWN_INTERVAL_SECONDS: float = 1.0
    
    # Logging
    LOG_LEVEL: str = "INFO"
    
    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
