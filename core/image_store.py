"""
Copies uploaded images into the upload directory and builds display URLs
"""
import os
import shutil
import uuid

from core.config import UPLOAD_DIR, IMAGE_HOST

ALLOWED_EXTENSIONS = ("png", "jpg", "jpeg", "webp")


def save_image(src_path: str, upload_dir: str = None) -> str:
    """
    Copy an uploaded file into the upload directory.

    Returns the stored reference ("/uploads/<unique name>") that menu items
    keep in their `image` column.
    """
    upload_dir = upload_dir or UPLOAD_DIR
    ext = os.path.splitext(src_path)[1].lower().lstrip(".")
    if ext not in ALLOWED_EXTENSIONS:
        raise ValueError(f"Unsupported image type: .{ext}")
    os.makedirs(upload_dir, exist_ok=True)
    filename = f"{uuid.uuid4().hex}.{ext}"
    shutil.copy(src_path, os.path.join(upload_dir, filename))
    return f"/uploads/{filename}"


def local_path(image_ref: str, upload_dir: str = None) -> str:
    """Filesystem path of a stored reference, for previews."""
    return os.path.join(upload_dir or UPLOAD_DIR, os.path.basename(image_ref))


def full_image_url(image_ref: str, host: str = None) -> str:
    """Full URL for an image reference; full URLs pass through unchanged."""
    if not image_ref:
        return ""
    host = (host or IMAGE_HOST).rstrip("/")
    if image_ref.startswith("http"):
        return image_ref
    if image_ref.startswith("/uploads/"):
        return f"{host}{image_ref}"
    return f"{host}/uploads/{image_ref}"


def delete_image(image_ref: str, upload_dir: str = None):
    """Remove a stored upload; references outside the upload directory are left alone."""
    if not image_ref or image_ref.startswith("http"):
        return
    path = local_path(image_ref, upload_dir)
    if os.path.exists(path):
        os.remove(path)
