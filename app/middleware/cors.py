"""
CORS Configuration
Cross-Origin Resource Sharing settings for the marketing site and dashboard

SECURITY:
- Production: Only the public site origin
- Development: Site origin + localhost
- NO "null" origin (prevents file:// attacks)
"""
from fastapi.middleware.cors import CORSMiddleware as FastAPICORSMiddleware
from app.core.config import settings


def get_cors_middleware():
    """
    Returns configured CORS middleware with environment-based settings.

    SECURITY:
    - Production: Strict HTTPS-only origins
    - Dev/Staging: Include localhost for development
    - Never allows "null" origin (file:// protocol attacks)
    """
    site_origin = settings.site_url.rstrip("/")

    if settings.environment == "production":
        allowed_origins = [site_origin]
    else:
        allowed_origins = [
            site_origin,
            "http://localhost:3000",  # Next.js dev server
            "http://localhost:5173",  # Vite dev server
        ]

    return FastAPICORSMiddleware, {
        "allow_origins": allowed_origins,
        "allow_credentials": True,
        "allow_methods": ["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        "allow_headers": [
            "Content-Type",
            "Authorization",
            "X-Request-ID",
        ],
        "expose_headers": [
            "X-Request-ID",
            "X-Sample-Rate",
            "X-Channels",
            "X-Bit-Depth",
        ],
        "max_age": 600,  # Cache preflight requests for 10 minutes
    }
