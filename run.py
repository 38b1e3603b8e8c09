#!/usr/bin/env python3
"""Run script for REST Academy."""

import os

import uvicorn
from dotenv import load_dotenv

load_dotenv()

if __name__ == "__main__":
    uvicorn.run(
        "restacademy.api.app:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "False").lower() == "true",
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
