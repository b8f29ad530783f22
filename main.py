"""
Entry point for the learnrank API service.

Run with:
    uvicorn main:app --port 8100
    python main.py
"""
import sys
from pathlib import Path

# Project root on the path so `src` and `config` resolve
sys.path.insert(0, str(Path(__file__).parent))

import uvicorn
from config import get_settings
from src.api.main import app

settings = get_settings()

if __name__ == "__main__":
    uvicorn.run(
        "src.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )
