from typing import Any, Awaitable, Callable, Dict, List, Optional
import posixpath
import time
from io import BytesIO
import structlog
from fastapi.concurrency import run_in_threadpool
from PIL import Image
from starlette.requests import Request

from ..aws.records import ProductRepository
from ..core.config import settings
from ..core.errors import UploadValidationError
from ..core.models import UploadedFilePart
from ..storage.files import LocalFileStore, best_effort_delete
from ..storage.multipart import extract_files

"""Upload, replace and delete product thumbnails.

Files live under ``<public root>/<thumbnails_pathname>/`` and the product
record keeps the path relative to the public root. The old file is removed
before the new one is written and nothing is transactional, so a failure in
between can leave a record pointing at a missing file.
"""

logger = structlog.get_logger()

ALLOWED_THUMBNAIL_CONTENT_TYPES = {"image/jpeg", "image/png"}

Extractor = Callable[..., Awaitable[List[UploadedFilePart]]]


def _epoch_millis() -> int:
    return int(time.time() * 1000)


def make_thumbnail_filename(product_id: str) -> str:
    return f"{product_id}_thumbnail_{_epoch_millis()}.jpg"


def resize_image(data: bytes, size_px: int) -> bytes:
    """Resize to an exact `size_px` square (aspect ratio is not kept) as JPEG."""
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            resized = img.convert("RGB").resize((size_px, size_px))
    except Exception as e:
        raise UploadValidationError("invalid_image_data") from e
    buf = BytesIO()
    resized.save(buf, format="JPEG")
    return buf.getvalue()


class ThumbnailService:
    def __init__(
        self,
        *,
        products: ProductRepository,
        files: LocalFileStore,
        extractor: Extractor = extract_files,
        thumbnails_pathname: Optional[str] = None,
        max_bytes: Optional[int] = None,
        size_px: Optional[int] = None,
    ):
        self.products = products
        self.files = files
        self.extractor = extractor
        self.thumbnails_pathname = thumbnails_pathname or settings.thumbnails_pathname
        self.max_bytes = max_bytes if max_bytes is not None else settings.max_thumbnail_bytes
        self.size_px = size_px or settings.thumbnail_size_px

    def _validate(self, parts: List[UploadedFilePart]) -> UploadedFilePart:
        if not parts:
            raise UploadValidationError("no_file_provided")
        part = parts[0]
        if part.content_type not in ALLOWED_THUMBNAIL_CONTENT_TYPES:
            raise UploadValidationError("unsupported_image_type")
        if part.size > self.max_bytes:
            raise UploadValidationError("file_too_large")
        return part

    async def _discard(self, reference: str) -> bool:
        try:
            path = self.files.resolve(reference)
        except OSError as e:
            logger.warning("file cleanup failed", reference=reference, error=str(e))
            return False
        return await run_in_threadpool(best_effort_delete, self.files, path)

    async def upload_thumbnail(self, product_id: str, request: Request) -> str:
        """Store the first uploaded image as the product thumbnail.

        Returns the reference path saved on the product.
        """
        product: Dict[str, Any] = await run_in_threadpool(self.products.find_by_id, product_id)

        parts = await self.extractor(request, read_limit=self.max_bytes)
        part = self._validate(parts)
        logger.info(
            "thumbnail received",
            product_id=product_id,
            filename=part.filename,
            content_type=part.content_type,
            size=part.size,
        )

        # Decode first so a corrupt upload never costs the product its old file
        resized = await run_in_threadpool(resize_image, part.data, self.size_px)

        if product.get("thumbnail"):
            await self._discard(product["thumbnail"])

        reference = posixpath.join(self.thumbnails_pathname, make_thumbnail_filename(product_id))
        full_path = self.files.resolve(reference)
        await run_in_threadpool(self.files.store, full_path, resized)

        product["thumbnail"] = reference
        await run_in_threadpool(self.products.update, product)
        logger.info("thumbnail updated", product_id=product_id, thumbnail=reference)
        return reference

    async def delete_thumbnail(self, product_id: str) -> None:
        product = await run_in_threadpool(self.products.find_by_id, product_id)
        if not product.get("thumbnail"):
            return

        await self._discard(product["thumbnail"])
        product["thumbnail"] = ""
        await run_in_threadpool(self.products.update, product)
        logger.info("thumbnail removed", product_id=product_id)

    async def delete_product(self, product_id: str) -> None:
        """Delete the product record, cleaning up its thumbnail file first."""
        product = await run_in_threadpool(self.products.find_by_id, product_id)
        if product.get("thumbnail"):
            await self._discard(product["thumbnail"])
        await run_in_threadpool(self.products.delete_by_id, product_id)
