"""Server configuration."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "CRONICAS_"}

    db_path: str = "cronicas.db"
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    allowed_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    master_emails: list[str] = []  # accounts allowed to run master/admin operations
    session_ttl_seconds: int = 604800  # 7 days
    argon2_time_cost: int = 3
    argon2_memory_cost: int = 65536  # KiB
    mission_rewards_on_completion: bool = True
    default_team_max_members: int = 5
    public_ranking_limit: int = 10
    max_ranking_limit: int = 100
    seed_shop_catalog: bool = True
    default_shop_stock: int = 10


settings = Settings()
