from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from REQINJECT_* environment variables.

    These tune how injection runs, not what is injected; the deployment
    itself is described by planner.types.DeploymentConfig.
    """

    model_config = SettingsConfigDict(
        env_prefix="REQINJECT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Hidden staging root, relative to the service directory.
    # Per-function staging dirs live at <staging_dir_name>/<module>.
    staging_dir_name: str = ".serverless"

    # Artifacts patched at once. 1 keeps the run strictly sequential.
    max_concurrency: int = 1

    # DEFLATE level for injected entries.
    compress_level: int = 9

    @field_validator("max_concurrency")
    @classmethod
    def check_max_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_concurrency must be at least 1")
        return v

    @field_validator("compress_level")
    @classmethod
    def check_compress_level(cls, v: int) -> int:
        if not 0 <= v <= 9:
            raise ValueError("compress_level must be between 0 and 9")
        return v


def get_settings() -> Settings:
    return Settings()
