from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, SecretStr
from functools import lru_cache

class Settings(BaseSettings):
    OPENAI_API_KEY: SecretStr = Field(..., description="OpenAI API Key")
    MODEL_ANALYSIS: str = "gpt-4o"
    REQUEST_TIMEOUT_SECONDS: float = Field(120.0, description="Timeout for the single analysis request")
    STRICT_RESULT_VALIDATION: bool = Field(True, description="Reject results with out-of-range score or wrong style count")
    REPORT_LANGUAGE: str = Field("English", description="Language the report text is written in")
    LOG_LEVEL: str = "INFO"

    # MLflow settings
    MLFLOW_TRACKING_URI: str = Field("http://127.0.0.1:5000", description="MLflow tracking server URI")
    MLFLOW_ENABLE_TRACING: bool = Field(False, description="Enable MLflow tracing")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

@lru_cache()
def get_settings() -> Settings:
    return Settings()
