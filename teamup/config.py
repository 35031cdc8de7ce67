from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    APP_NAME: str = Field(default="TeamUp API")
    APP_ORIGIN: str = Field(default="http://localhost:3000")
    LOG_LEVEL: str = Field(default="INFO")

    MONGO_URL: str = Field(default="mongodb://localhost:27017")
    MONGO_DB: str = Field(default="teamup")

    # "firebase" en production, "jwt" pour le développement local et les tests
    AUTH_PROVIDER: Literal["firebase", "jwt"] = Field(default="firebase")
    JWT_SECRET: str = Field(default="CHANGE_ME")
    ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60)

    FIREBASE_PROJECT_ID: str = Field(default="")
    FIREBASE_CREDENTIALS_FILE: str = Field(default="")

    LOGS_DIR: str = Field(default="logs")
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
