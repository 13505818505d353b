# app/core/storage_utils.py
import uuid

from supabase import Client


def upload_to_storage(
    client: Client,
    bucket: str,
    path: str,
    file_bytes: bytes,
    content_type: str,
) -> None:
    """
    Upload raw bytes to Supabase Storage.

    Customer designs are never overwritten: every upload gets a fresh
    random filename, so 'upsert' stays off and a name clash is an error.

    Args:
        path: Full object path inside the bucket.
              Example: "<user_id>/<uuid>.png"
        file_bytes: File content in bytes.
        content_type: MIME type stored alongside the object.

    Raises:
        Any exception raised by Supabase client if upload fails.
    """
    client.storage.from_(bucket).upload(
        path,
        file_bytes,
        {
            "content-type": content_type,
            "cache-control": "3600",
            "upsert": "false",
        },
    )


def delete_from_storage(client: Client, bucket: str, path: str) -> None:
    """
    Delete a file from Supabase Storage by its object path.

    Example path (relative to bucket):
        '<user_id>/<uuid>.png'
    """
    # Supabase Python client expects a list of paths.
    client.storage.from_(bucket).remove([path])


def public_url(client: Client, bucket: str, path: str) -> str:
    """Return the publicly fetchable URL of an object in the bucket."""
    return client.storage.from_(bucket).get_public_url(path)


def file_extension(filename: str, default: str = "png") -> str:
    """
    Extension of an uploaded filename, without the dot.

    "portrait.final.JPG" -> "JPG"; "portrait" -> default
    """
    if "." not in filename:
        return default
    ext = filename.rsplit(".", 1)[1]
    return ext or default


def generate_filename(ext: str) -> str:
    """
    Generate a random filename using UUID4.

    Args:
        ext: File extension without dot (e.g. "png", "jpg")

    Returns:
        A filename like "<uuid4>.png"
    """
    return f"{uuid.uuid4()}.{ext}"
