from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_env: str = "dev"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_prefix: str = "/api/v1"
    service_name: str = "Church Registry"

    database_url: str = "postgresql+psycopg://app:app@db:5432/church_registry"
    database_echo: bool = False

    jwt_secret: str = "change-me"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days

    # Pagination
    default_page_size: int = 10
    max_page_size: int = 100

    # Middleware configuration
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR
    log_format: str = "json"  # json or text
    enable_request_logging: bool = True
    cors_origins: str = ""  # Comma-separated list of allowed origins
    enable_gzip: bool = True

    # Metrics configuration (EMF log lines)
    enable_metrics: bool = True
    metrics_namespace: str = ""  # defaults to service_name

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


settings = Settings()
