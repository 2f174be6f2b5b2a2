import os
from pydantic import BaseModel
from typing import Optional

class Settings(BaseModel):
    """for reading environment-driven configuration.

    Values have sensible defaults for LocalStack-based development.
    """
    aws_access_key_id: str = os.getenv("AWS_ACCESS_KEY_ID", "test")
    aws_secret_access_key: str = os.getenv("AWS_SECRET_ACCESS_KEY", "test")
    aws_region: str = os.getenv("AWS_REGION", "us-east-1")
    aws_endpoint_url: Optional[str] = os.getenv("AWS_ENDPOINT_URL")
    products_table: str = os.getenv("PRODUCTS_TABLE", "products")
    tags_table: str = os.getenv("TAGS_TABLE", "tags")
    # Static root served under /public; thumbnails live in a fixed subdirectory
    public_dir: str = os.getenv(
        "PUBLIC_DIR",
        os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), "public"),
    )
    thumbnails_pathname: str = os.getenv("THUMBNAILS_PATHNAME", "uploads/product-thumbnails")
    max_thumbnail_bytes: int = int(os.getenv("MAX_THUMBNAIL_BYTES", str(1024 * 1024)))
    thumbnail_size_px: int = int(os.getenv("THUMBNAIL_SIZE_PX", "100"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()
