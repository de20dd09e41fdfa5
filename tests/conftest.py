import os

# Must run before xpot_draw.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("BONUS_SCHEDULER_ENABLED", "false")
