from __future__ import annotations

import hashlib
import os
from pathlib import Path


ALLOWED_EXTS = {".jpg", ".jpeg", ".png", ".webp"}


def ensure_image_path(path: str | os.PathLike[str]) -> Path:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Image not found: {p}")
    if p.suffix.lower() not in ALLOWED_EXTS:
        raise ValueError(f"Unsupported image type {p.suffix}. Supported: {sorted(ALLOWED_EXTS)}")
    return p


def sha256_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def get_cache_dir() -> Path:
    env = os.environ.get("LANDMARK_LOCATE_CACHE")
    if env:
        d = Path(env)
    else:
        d = Path.home() / ".cache" / "landmark-locate"
    d.mkdir(parents=True, exist_ok=True)
    return d
