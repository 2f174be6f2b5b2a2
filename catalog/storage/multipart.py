from typing import List, Optional
import structlog
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import Request

from ..core.errors import UploadParseError
from ..core.models import UploadedFilePart

logger = structlog.get_logger()


async def extract_files(request: Request, read_limit: Optional[int] = None) -> List[UploadedFilePart]:
    """Read every file part out of a multipart/form-data request.

    The whole body is consumed before returning. Plain form fields are
    skipped and a body without files gives an empty list; deciding whether
    that is an error is up to the caller.

    Only the first file part has its bytes loaded, and only when its size is
    within `read_limit`; the other parts carry their size and no data.
    """
    try:
        form = await request.form()
    except (MultiPartException, HTTPException) as e:
        # Starlette raises HTTPException instead when running inside an app
        message = getattr(e, "detail", None) or getattr(e, "message", None) or str(e)
        raise UploadParseError(f"invalid_multipart_body {message}") from e

    parts: List[UploadedFilePart] = []
    try:
        for field, value in form.multi_items():
            if not isinstance(value, UploadFile):
                continue
            size = value.size
            data = b""
            wanted = not parts
            if wanted and (size is None or read_limit is None or size <= read_limit):
                data = await value.read()
                size = len(data)
            parts.append(
                UploadedFilePart(
                    filename=value.filename,
                    content_type=value.content_type or "application/octet-stream",
                    size=size if size is not None else 0,
                    data=data,
                )
            )
            logger.debug("file part extracted", field=field, filename=value.filename, size=size, loaded=bool(data))
    finally:
        await form.close()
    return parts
