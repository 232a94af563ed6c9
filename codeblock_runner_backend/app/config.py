import os
from pathlib import Path

from dotenv import load_dotenv

# Load ../.env relative to this file so it works regardless of cwd
env_path = Path(__file__).resolve().parents[1] / ".env"
load_dotenv(dotenv_path=env_path, override=False)

COMPILER_EXPLORER_URL = os.getenv("COMPILER_EXPLORER_URL", "https://godbolt.org").rstrip("/")
COMPILER_EXPLORER_TIMEOUT = float(os.getenv("COMPILER_EXPLORER_TIMEOUT", "30"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# CORS 설정
# 기본 오리진 목록을 `.env`의 `CORS_ALLOW_ORIGINS`로 확장할 수 있다.
CORS_ORIGINS = [
    "http://localhost",
    "http://localhost:3000",
    "http://localhost:8080",
    "http://localhost:8000",
    "app://obsidian.md",
]

extra_origins = os.getenv("CORS_ALLOW_ORIGINS")
if extra_origins:
    CORS_ORIGINS.extend(o.strip() for o in extra_origins.split(",") if o.strip())
