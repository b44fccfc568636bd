# backend/archflow/config.py
"""Application configuration via environment variables."""

import os
from dotenv import load_dotenv

load_dotenv()

# Server
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# CORS
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if origin.strip()
]

# Compliance defaults (used when a request omits norm settings)
DEFAULT_COUNTRY = os.getenv("DEFAULT_COUNTRY", "US")
DEFAULT_CODES = [c.strip() for c in os.getenv("DEFAULT_CODES", "IBC,ADA").split(",") if c.strip()]

# Metrics defaults
MIN_CORRIDOR_WIDTH_FT = float(os.getenv("MIN_CORRIDOR_WIDTH_FT", "4"))

# Export defaults
DEFAULT_EXPORT_FORMATS = [
    f.strip() for f in os.getenv("DEFAULT_EXPORT_FORMATS", "svg,dxf,json").split(",") if f.strip()
]
