# skyanki/attachments.py
from __future__ import annotations


def url_to_filename(url: str) -> str:
    """Stable attachment filename for a media URL.

    Dynamic audio URLs carry query parameters and end with ``...&text=<word>``;
    the word becomes the filename. Static image URLs already end with a real
    filename, so the path basename is used as is.
    """
    if "?" in url:
        return url.rsplit("=", 1)[-1] + ".mp3"
    return url.rsplit("/", 1)[-1]


def absolute_url(url: str) -> str:
    # cdn links come back protocol-relative ("//cdn-user.skyeng.ru/...")
    if url.startswith("//"):
        return "https:" + url
    return url
