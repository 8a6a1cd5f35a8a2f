"""Application settings and configuration"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "go-project-usage"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "WARNING"

    # GitHub GraphQL API
    GITHUB_TOKEN: Optional[str] = None
    GITHUB_GRAPHQL_URL: str = "https://api.github.com/graphql"
    GITHUB_HOST: str = "github.com"  # first path segment of importers we keep

    # pkg.go.dev importers listing
    PKG_SITE_URL: str = "https://pkg.go.dev"
    IMPORTERS_TRUNCATION_LIMIT: int = 20000  # pkg.go.dev stops listing after this many

    # HTTP
    HTTP_TIMEOUT_SECONDS: float = 30.0
    RUN_TIMEOUT_SECONDS: float = 120.0  # deadline for a whole report run
    USER_AGENT: str = "go-project-usage/1.0"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env


settings = Settings()
