"""Engine configuration."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Fixed at startup, not a setting.
ALLOWED_EXTENSIONS: tuple[str, ...] = (".txt", ".md", ".json", ".js")


class EngineSettings(BaseSettings):
    """Settings consumed when the engine is constructed.

    Values come from keyword arguments, then ``NETENTION_*`` environment
    variables, then ``.env``. Invalid values raise before the engine is built.
    """

    model_config = SettingsConfigDict(
        env_prefix="NETENTION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    concurrency_limit: int = Field(default=5, ge=1, description="Maximum number of simultaneously active tasks")
    use_persistence: bool = Field(default=False, description="Store notes in Neo4j instead of memory")
    auto_run: bool = Field(default=True, description="Start the scheduler when the server starts")
    use_planning_rules: bool = Field(
        default=False, description="Run the standard planning rules (sub-task and follow-up creation) around tasks"
    )

    sandbox_dir: Path = Field(default=Path("./safe_files"), description="Root of the file tool sandbox")

    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = ""

    http_timeout: float = Field(default=30.0, gt=0, description="Timeout in seconds for HTTP API tools")
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level
