"""Normalisation des URLs vidéo (YouTube, Vimeo, Loom) en URL d'intégration"""

import re
from urllib.parse import urlparse

YOUTUBE_RE = re.compile(r"(?:youtube\.com/watch\?(?:[^#\s]*&)?v=|youtu\.be/)([^&\n?#]+)")
VIMEO_RE = re.compile(r"vimeo\.com/(\d+)")
LOOM_RE = re.compile(r"loom\.com/share/([a-zA-Z0-9]+)")

ALLOWED_SCHEMES = ("http", "https")


def get_embed_url(url: str) -> str:
    """
    URL collée par l'utilisateur → src d'iframe.
    Une URL d'un fournisseur inconnu est renvoyée telle quelle si elle est en http(s), sinon "".
    """
    if not url:
        return ""

    match = YOUTUBE_RE.search(url)
    if match:
        return f"https://www.youtube.com/embed/{match.group(1)}"

    match = VIMEO_RE.search(url)
    if match:
        return f"https://player.vimeo.com/video/{match.group(1)}"

    match = LOOM_RE.search(url)
    if match:
        return f"https://www.loom.com/embed/{match.group(1)}"

    # javascript:, data:, etc. ne deviennent jamais un src
    if urlparse(url).scheme.lower() not in ALLOWED_SCHEMES:
        return ""
    return url


def detect_video_platform(url: str) -> str:
    if "youtube.com" in url or "youtu.be" in url:
        return "youtube"
    if "vimeo.com" in url:
        return "vimeo"
    if "loom.com" in url:
        return "loom"
    return "other"
