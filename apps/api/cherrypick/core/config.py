from pydantic import BaseModel
import os
from typing import Optional


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    api_port: int = int(os.getenv("API_PORT", "8080"))

    # Remote backend the client side talks to
    backend_url: str = os.getenv("BACKEND_URL", "http://localhost:8080/api")
    backend_timeout: float = float(os.getenv("BACKEND_TIMEOUT", "1.5"))
    health_timeout: float = float(os.getenv("HEALTH_TIMEOUT", "1.0"))

    # Classifier is only consulted when credentials are present unless forced
    classifier_enabled: bool = _env_flag(
        "CLASSIFIER_ENABLED",
        "true" if os.getenv("ANTHROPIC_API_KEY") else "false",
    )
    classifier_model: str = os.getenv("CLAUDE_CODE_MODEL", "claude-sonnet-4-20250514")
    classifier_timeout: float = float(os.getenv("CLASSIFIER_TIMEOUT", "30"))

    # Pacing delay per commit during local simulation
    simulation_delay: float = float(os.getenv("SIMULATION_DELAY", "0.4"))

    heuristic_metadata_match: bool = _env_flag("HEURISTIC_METADATA_MATCH", "true")

    # Optional local checkouts served by the backend instead of demo data
    source_repo_path: Optional[str] = os.getenv("SOURCE_REPO_PATH") or None
    target_repo_path: Optional[str] = os.getenv("TARGET_REPO_PATH") or None
    commit_limit: int = int(os.getenv("COMMIT_LIMIT", "50"))


settings = Settings()
