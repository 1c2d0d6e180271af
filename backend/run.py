#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Creates missing tables on the configured database, then serves the app
with auto-reload. For local development only.
"""
from pathlib import Path
import logging
import os
import sys

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

import uvicorn

from app.core.logging import setup_logging
from app.database import Base, get_engine
import app.models  # noqa: F401

logger = logging.getLogger("run")

if __name__ == "__main__":
    setup_logging()
    Base.metadata.create_all(get_engine())
    logger.info("Starting development server at http://localhost:8000 (docs at /docs)")
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
