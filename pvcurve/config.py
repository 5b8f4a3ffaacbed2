from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "PVCURVE_", "case_sensitive": False}

    # Logging
    log_level: str = "INFO"
    log_json: bool = False


settings = Settings()
