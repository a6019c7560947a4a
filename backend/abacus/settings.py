"""Abacus configuration via environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class AbacusSettings(BaseSettings):
    model_config = {"env_prefix": "ABACUS_"}

    # JSON object file holding every persisted key (history and preferences)
    storage_path: str = Field(default="backend/data/abacus.json", min_length=1)
    log_dir: str = Field(default="backend/logs/abacus", min_length=1)
    mode_switch_cooldown_seconds: float = Field(default=0.5, gt=0)

    # Keep everything in memory; nothing survives a restart
    persist_in_memory: bool = False
