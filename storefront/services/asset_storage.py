"""Local storage for AI-generated product images."""

from pathlib import Path
from typing import Optional
from uuid import uuid4

# Base storage path for generated assets
ASSET_STORAGE_PATH = Path(__file__).parent.parent.parent / "storage" / "generated"

MIME_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/webp": ".webp",
}


def ensure_asset_directory(store_id: str) -> Path:
    store_dir = ASSET_STORAGE_PATH / store_id
    store_dir.mkdir(parents=True, exist_ok=True)
    return store_dir


def get_asset_path(store_id: str, filename: str) -> Optional[Path]:
    """Path of a stored asset, or None if it does not exist.

    Rejects filenames that would escape the store directory.
    """
    for part in (store_id, filename):
        if not part or "/" in part or "\\" in part or part.startswith("."):
            return None
    path = ASSET_STORAGE_PATH / store_id / filename
    return path if path.is_file() else None


def get_asset_url(store_id: str, filename: str, api_base: str = "/api/v1") -> str:
    return f"{api_base}/media/generated/{store_id}/{filename}"


def save_asset(store_id: str, data: bytes, mime_type: str, prefix: str = "asset") -> str:
    """Write image bytes and return the public URL of the file."""
    ext = MIME_EXTENSIONS.get(mime_type, ".png")
    filename = f"{prefix}_{uuid4().hex}{ext}"
    store_dir = ensure_asset_directory(store_id)

    with open(store_dir / filename, "wb") as f:
        f.write(data)

    return get_asset_url(store_id, filename)
