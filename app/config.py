from pydantic_settings import BaseSettings

DEFAULT_JWT_SECRET = "default-secret-key-for-development-only"


class Settings(BaseSettings):
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    temperature: float = 0.7

    default_provider: str = "openai"
    provider_timeout: float = 60.0
    profile_timeout: float = 5.0
    diagram_max_tokens: int = 1024
    # Rough characters-per-token ratio used to turn maxLength into a token budget
    openai_chars_per_token: int = 4
    gemini_chars_per_token: int = 4

    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60 * 24 * 7
    demo_user_id: str = "1"
    demo_user_email: str = "demo@example.com"
    demo_user_password: str = "demo123"

    profile_store_path: str = ""
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
