import os
from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class Settings:

    discord_token: str | None
    dev_guild_id: int | None
    log_level: str
    initial_extensions: Sequence[str]

    POSTGRES_DSN: str | None
    PGHOST: str
    PGPORT: int
    PGUSER: str | None
    PGPASSWORD: str | None
    PGDB: str | None

    google_api_key: str | None
    faq_sheet_a_id: str | None
    faq_sheet_a_range: str
    faq_sheet_b_id: str | None
    faq_sheet_b_range: str
    keyword_sheet_id: str | None
    keyword_sheet_range: str

    local_faq_path: str
    local_keyword_path: str

    faq_cache_ttl_s: float
    faq_min_score: float
    keyword_fuzzy_threshold: float
    containment_bonus: float
    answer_weight: float
    source_fetch_timeout_s: float


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name, default)
    if value is None:
        return None
    value = value.strip()
    return value if value else None


def _get_float(name: str, default: float) -> float:
    raw = _get_env(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from exc


def load_settings() -> Settings:
    token = _get_env("DISCORD_TOKEN")

    PGDSN = _get_env("PGDSN")
    PGHOST = _get_env("PGHOST")
    PGPORT = int(_get_env("PGPORT", "5432") or "5432")
    PGUSER = _get_env("PGUSER")
    PGPASSWORD = _get_env("PGPASSWORD")
    PGDB = _get_env("PGDB")

    dev_guild_raw = _get_env("DEV_GUILD_ID")
    dev_guild_id = int(dev_guild_raw) if dev_guild_raw else None

    log_level = _get_env("LOG_LEVEL", "INFO") or "INFO"

    initial_extensions = (
        "campusdesk.cogs.ask",
        "campusdesk.cogs.admin",
    )

    # Both FAQ feeds fall back to the shared sheet id.
    shared_sheet_id = _get_env("GOOGLE_SHEET_ID")

    ttl_ms = _get_float("FAQ_CACHE_TTL_MS", 5 * 60 * 1000)

    return Settings(
        discord_token=token,
        dev_guild_id=dev_guild_id,
        log_level=log_level,
        initial_extensions=initial_extensions,
        POSTGRES_DSN=PGDSN,
        PGHOST=PGHOST or "localhost",
        PGPORT=PGPORT,
        PGUSER=PGUSER,
        PGPASSWORD=PGPASSWORD,
        PGDB=PGDB,
        google_api_key=_get_env("GOOGLE_API_KEY"),
        faq_sheet_a_id=_get_env("FAQ_SHEET_A_ID") or shared_sheet_id,
        faq_sheet_a_range=_get_env("FAQ_SHEET_A_RANGE", "Sheet1!A:C") or "Sheet1!A:C",
        faq_sheet_b_id=_get_env("FAQ_SHEET_B_ID") or shared_sheet_id,
        faq_sheet_b_range=_get_env("FAQ_SHEET_B_RANGE", "A:C") or "A:C",
        keyword_sheet_id=_get_env("KEYWORD_SHEET_ID") or shared_sheet_id,
        keyword_sheet_range=_get_env("KEYWORD_SHEET_RANGE", "Keywords!A:B") or "Keywords!A:B",
        local_faq_path=_get_env("LOCAL_FAQ_PATH", "data/local_faqs.json") or "data/local_faqs.json",
        local_keyword_path=_get_env("LOCAL_KEYWORD_PATH", "data/keyword_faqs.json") or "data/keyword_faqs.json",
        faq_cache_ttl_s=ttl_ms / 1000.0,
        faq_min_score=_get_float("FAQ_MIN_SCORE", 0.5),
        keyword_fuzzy_threshold=_get_float("KEYWORD_FUZZY_THRESHOLD", 0.6),
        containment_bonus=_get_float("FAQ_CONTAINMENT_BONUS", 2.0),
        answer_weight=_get_float("FAQ_ANSWER_WEIGHT", 0.5),
        source_fetch_timeout_s=_get_float("SOURCE_FETCH_TIMEOUT", 10.0),
    )
