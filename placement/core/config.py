from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    MONGODB_DATABASE: str = ""
    MONGODB_CLUSTER: str = ""

    GOOGLE_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_RATE_LIMIT_PER_MINUTE: int = 12
    GEMINI_RATE_LIMIT_PER_DAY: int = 1400

    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""

    # Upload validation
    MAX_RESUME_BYTES: int = 5 * 1024 * 1024
    MIN_RESUME_TEXT_LENGTH: int = 50

    # Stored-file download (retry with exponential backoff)
    FETCH_TIMEOUT_SECONDS: float = 30.0
    FETCH_MAX_ATTEMPTS: int = 3

    # Heuristic bonuses applied to an improved resume's estimated scores
    IMPROVEMENT_SCORE_BONUS: int = 15
    IMPROVEMENT_ATS_BONUS: int = 10

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
