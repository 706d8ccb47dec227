from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "KWANZA-POS"
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480
    DATABASE_URL: str = "sqlite+pysqlite:///./kwanza.db"
    DB_COMMAND_TIMEOUT_SEC: int = 60
    LOG_LEVEL: str = "INFO"
    ADMIN_NAME: str = "Administrador"
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "admin123"
    INVOICE_PREFIX: str = "FT"
    METRICS_ENABLED: bool = True
