"""
Runtime configuration for the Lambda code.

Mirrors the CDK Settings dataclass: plain defaults, overridden from the
environment once per cold start.
"""

from dataclasses import dataclass
import os
from typing import Optional


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw in (None, ""):
        return default
    return int(raw)


@dataclass
class AppSettings:
    """Application settings with local-friendly defaults."""

    environment: str = "dev"

    # Database
    database_url: Optional[str] = None
    db_secret_arn: Optional[str] = None
    local_database_url: str = "sqlite:///banking_intel.db"

    # Bedrock
    bedrock_region: str = "eu-west-2"
    model_id: str = "anthropic.claude-3-haiku-20240307-v1:0"

    # Cognito
    cognito_client_id: str = ""

    # Batch limits
    risk_analysis_batch_cap: int = 20
    seed_batch_size: int = 50
    customer_fetch_limit: int = 1000

    # Cache
    cache_ttl_seconds: int = 300
    cache_max_size: int = 100

    # Reproducible sample data when set
    random_seed: Optional[int] = None

    @classmethod
    def from_environment(cls) -> "AppSettings":
        """Load settings from environment variables."""
        seed = os.environ.get("RANDOM_SEED")
        return cls(
            environment=os.environ.get("ENVIRONMENT", "dev"),
            database_url=os.environ.get("DATABASE_URL") or None,
            db_secret_arn=os.environ.get("DB_SECRET_ARN") or None,
            bedrock_region=(
                os.environ.get("BEDROCK_REGION")
                or os.environ.get("AWS_REGION")
                or "eu-west-2"
            ),
            model_id=os.environ.get("MODEL_ID", cls.model_id),
            cognito_client_id=os.environ.get("COGNITO_CLIENT_ID", ""),
            risk_analysis_batch_cap=_int_env("RISK_ANALYSIS_BATCH_CAP", 20),
            seed_batch_size=_int_env("SEED_BATCH_SIZE", 50),
            customer_fetch_limit=_int_env("CUSTOMER_FETCH_LIMIT", 1000),
            cache_ttl_seconds=_int_env("CACHE_TTL_SECONDS", 300),
            cache_max_size=_int_env("CACHE_MAX_SIZE", 100),
            random_seed=int(seed) if seed not in (None, "") else None,
        )
