#!/usr/bin/env python3
# backend/run.py
"""
Local development server for the session engine.

Defaults to the in-memory SQLite database; set IS_TESTING=false to serve
against DATABASE_URL instead.
"""
import logging
import os

os.environ.setdefault("IS_TESTING", "true")

import uvicorn

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    from tutorbook.init_db import init_db
    from tutorbook.main import app

    # In-memory SQLite lives in this process, so no reloader
    init_db()
    logger.info("Serving tutorbook session engine at http://localhost:8000 (docs at /docs)")
    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
