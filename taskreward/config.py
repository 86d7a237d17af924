import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class Config:
    jwt_secret: str
    database_url: str = "sqlite+aiosqlite:///taskreward.db"
    db_pool_size: int = 10
    tx_timeout: float = 5.0
    jwt_expiration_minutes: int = 60
    server_host: str = "0.0.0.0"
    server_port: int = 8080
    bot_token: str = ""
    admin_ids: frozenset[int] = frozenset()
    seed_tasks: int = 10
    log_level: str = "INFO"


def _parse_admins(raw: str) -> frozenset[int]:
    raw = (raw or "").strip()
    if not raw:
        return frozenset()
    return frozenset(int(x.strip()) for x in raw.split(",") if x.strip().isdigit())


def _num_env(env, name: str, default, cast=int):
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def load_config(env=None) -> Config:
    """Build the config from the process environment (and .env, if present)."""
    if env is None:
        load_dotenv()
        env = os.environ

    secret = env.get("JWT_SECRET", "").strip()
    if not secret:
        raise ValueError("JWT_SECRET is not set")

    return Config(
        jwt_secret=secret,
        database_url=env.get("DATABASE_URL") or Config.database_url,
        db_pool_size=_num_env(env, "DB_POOL_SIZE", Config.db_pool_size),
        tx_timeout=_num_env(env, "TX_TIMEOUT", Config.tx_timeout, float),
        jwt_expiration_minutes=_num_env(env, "JWT_EXPIRATION_MINUTES", Config.jwt_expiration_minutes),
        server_host=env.get("SERVER_HOST") or Config.server_host,
        server_port=_num_env(env, "SERVER_PORT", Config.server_port),
        bot_token=env.get("BOT_TOKEN", "").strip(),
        admin_ids=_parse_admins(env.get("ADMIN_IDS", "")),
        seed_tasks=_num_env(env, "SEED_TASKS", Config.seed_tasks),
        log_level=(env.get("LOG_LEVEL") or Config.log_level).upper(),
    )
