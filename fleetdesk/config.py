from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./data/fleet.sqlite3"
    api_key: str = ""  # empty = no auth check (local dev)
    data_dir: str = "./data"
    seed_demo_data: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:8000"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
