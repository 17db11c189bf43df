from __future__ import annotations

import hashlib


def entry_id(url: str) -> str:
    # exact string, no normalisation: "http://a" and "http://a/" differ
    return hashlib.sha1(url.encode("utf-8")).hexdigest()
