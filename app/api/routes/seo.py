"""
Crawler Policy
"""
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from app.core.config import settings

router = APIRouter(tags=["seo"])

DISALLOWED_PATHS = ("/dashboard/", "/api/", "/login")


def robots_txt(site_url: str) -> str:
    lines = ["User-agent: *", "Allow: /"]
    lines += [f"Disallow: {path}" for path in DISALLOWED_PATHS]
    lines += ["", f"Sitemap: {site_url.rstrip('/')}/sitemap.xml"]
    return "\n".join(lines) + "\n"


@router.get("/robots.txt", response_class=PlainTextResponse)
async def robots():
    return robots_txt(settings.site_url)
