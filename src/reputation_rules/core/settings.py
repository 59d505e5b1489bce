"""Application settings and configuration.

This module defines the voting policy parameters and storage options for the
reputation rules package. Settings are loaded from environment variables with
sensible defaults.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables.

    Every policy threshold consulted by the voting permission chain and the
    vote weight calculation lives here. Settings can be overridden via
    environment variables or .env files.
    """

    # Storage configuration
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")
    store_backend: Literal["redis", "memory"] = Field(default="redis", alias="STORE_BACKEND")
    key_prefix: str = Field(default="reputation", alias="REPUTATION_KEY_PREFIX")
    vote_log_serialize_writes: bool = Field(default=True, alias="VOTE_LOG_SERIALIZE_WRITES")

    # Extra vote weight granted by the voter's reputation
    upvote_extra_percentage: int = Field(default=5, ge=0, alias="UPVOTE_EXTRA_PERCENTAGE")
    max_upvote_weigh: int = Field(default=30, ge=0, alias="MAX_UPVOTE_WEIGH")
    downvote_extra_percentage: int = Field(default=5, ge=0, alias="DOWNVOTE_EXTRA_PERCENTAGE")
    max_downvote_weigh: int = Field(default=10, ge=0, alias="MAX_DOWNVOTE_WEIGH")

    # Category policy
    disabled_categories: list[int] = Field(default_factory=list, alias="DISABLED_CATEGORIES")

    # Upvote eligibility
    min_posts_to_upvote: int = Field(default=20, ge=0, alias="MIN_POSTS_TO_UPVOTE")
    min_days_to_upvote: int = Field(default=7, ge=0, alias="MIN_DAYS_TO_UPVOTE")

    # Downvote eligibility
    min_posts_to_downvote: int = Field(default=50, ge=0, alias="MIN_POSTS_TO_DOWNVOTE")
    min_days_to_downvote: int = Field(default=15, ge=0, alias="MIN_DAYS_TO_DOWNVOTE")
    min_reputation_to_downvote: int = Field(default=10, alias="MIN_REPUTATION_TO_DOWNVOTE")
    max_downvotes_per_day: int = Field(default=5, ge=0, alias="MAX_DOWNVOTES_PER_DAY")

    # Limits shared by both vote directions
    max_votes_per_user_in_thread: int = Field(
        default=5, ge=0, alias="MAX_VOTES_PER_USER_IN_THREAD"
    )
    max_votes_to_same_user_per_month: int = Field(
        default=10, ge=0, alias="MAX_VOTES_TO_SAME_USER_PER_MONTH"
    )
    max_votes_per_user_per_day: int = Field(
        default=30, ge=0, alias="MAX_VOTES_PER_USER_PER_DAY"
    )
    # 0 disables the post age check
    max_post_age_days: int = Field(default=0, ge=0, alias="MAX_POST_AGE_DAYS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def upvote_weight_params(self) -> tuple[int, int]:
        """Return ``(extra_percentage, max_weight)`` for upvotes."""
        return self.upvote_extra_percentage, self.max_upvote_weigh

    @property
    def downvote_weight_params(self) -> tuple[int, int]:
        """Return ``(extra_percentage, max_weight)`` for downvotes."""
        return self.downvote_extra_percentage, self.max_downvote_weigh


settings = Settings()


def get_settings() -> Settings:
    """Return the shared settings instance."""
    return settings
