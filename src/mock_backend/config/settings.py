from typing import List
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # App Settings
    APP_NAME: str = "Mock Backend"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Document Store Settings
    DB_PATH: str = "db.json"
    ID_FIELD: str = "id"
    FOREIGN_KEY_SUFFIX: str = "Id"

    # Routing Settings
    API_PREFIX: str = "/api/v1"
    LOGIN_PATH: str = "/auth/login"

    # Auth Settings
    TOKEN_PREFIX: str = "mock-jwt-token-"
    USERS_COLLECTION: str = "users"

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    @property
    def login_route(self) -> str:
        """Full login path, prefix included"""
        return self.API_PREFIX.rstrip("/") + self.LOGIN_PATH


settings = Settings()
