"""Application-wide constants for the Scheduler API."""

from __future__ import annotations

from datetime import timedelta

# API metadata
API_TITLE = "Scheduler API"
API_DESCRIPTION = "Multi-tenant scheduling API: availability windows for tutors and students"
API_VERSION = "1.0.0"
API_PREFIX = "/api/v1"

# Availability grain: every stored row covers exactly one block
BLOCK_MINUTES = 15
BLOCK_DURATION = timedelta(minutes=BLOCK_MINUTES)
ALIGNED_MINUTES = tuple(range(0, 60, BLOCK_MINUTES))

# Bulk write chunking (rows per INSERT .. ON CONFLICT statement)
DEFAULT_UPSERT_BATCH_SIZE = 500

# Operations slower than this are logged as warnings
SLOW_OPERATION_SECONDS = 1.0

# Frontend URLs
DEFAULT_DEV_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

# Error messages
ERROR_SELF_OR_ADMIN = "Can only access your own availability unless you are an admin"
ERROR_BATCH_SELF_ONLY = "Can only request your own availability unless you are an admin"
