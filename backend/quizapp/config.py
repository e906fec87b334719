# backend/quizapp/config.py

"""
Runtime settings, read from the environment (and a local .env file).
"""

import os
from dataclasses import dataclass, field
from typing import List, Tuple

from dotenv import load_dotenv

from quizapp.core.models import LeaderboardEntry


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _parse_seed(raw: str) -> Tuple[LeaderboardEntry, ...]:
    """Parse ``"Alice:4,Bob:3"`` into leaderboard entries."""
    entries = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        name, sep, score = chunk.rpartition(":")
        if not sep or not name.strip():
            raise ValueError(f"Bad leaderboard seed entry: {chunk!r}")
        entries.append(LeaderboardEntry(name=name.strip(), score=int(score)))
    return tuple(entries)


@dataclass
class Settings:
    openai_api_key: str = ""
    text_model: str = "gpt-4o-mini"
    image_model: str = "dall-e-3"
    image_size: str = "1024x1024"

    question_count: int = 5
    visual_image_count: int = 2
    option_count: int = 4
    leaderboard_size: int = 5
    leaderboard_seed: Tuple[LeaderboardEntry, ...] = ()

    # 0 disables the idle-session reaper
    session_ttl_seconds: int = 0
    reaper_interval_seconds: int = 60

    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    def __post_init__(self):
        if self.question_count < 1:
            raise ValueError("question_count must be at least 1")
        if not 0 <= self.visual_image_count <= self.question_count:
            raise ValueError("visual_image_count must be between 0 and question_count")
        if self.option_count < 2:
            raise ValueError("option_count must be at least 2")

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        origins = os.getenv("QUIZ_CORS_ORIGINS", "*")
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            text_model=os.getenv("QUIZ_TEXT_MODEL", "gpt-4o-mini"),
            image_model=os.getenv("QUIZ_IMAGE_MODEL", "dall-e-3"),
            image_size=os.getenv("QUIZ_IMAGE_SIZE", "1024x1024"),
            question_count=_int_env("QUIZ_QUESTION_COUNT", 5),
            visual_image_count=_int_env("QUIZ_VISUAL_IMAGE_COUNT", 2),
            option_count=_int_env("QUIZ_OPTION_COUNT", 4),
            leaderboard_size=_int_env("QUIZ_LEADERBOARD_SIZE", 5),
            leaderboard_seed=_parse_seed(os.getenv("QUIZ_LEADERBOARD_SEED", "")),
            session_ttl_seconds=_int_env("QUIZ_SESSION_TTL_SECONDS", 0),
            reaper_interval_seconds=_int_env("QUIZ_REAPER_INTERVAL_SECONDS", 60),
            log_level=os.getenv("QUIZ_LOG_LEVEL", "INFO").upper(),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )
