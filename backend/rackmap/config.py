from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "RackMap"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: str = "*"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # HTTPS
    HTTPS_ONLY: bool = False

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PLACEMENT: str = "120/minute"

    # Racks
    MAX_RACK_SIZE: int = 200
    RACK_DEFAULT_SIZE: int = 42  # used when the location type defines no size
    RACK_DEFAULT_DIRECTION: str = "downwards"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
