"""Exceptions raised by the catalog services.

They subclass the builtins the routers already translate: ``KeyError`` maps
to 404, ``ValueError`` to 400, anything else to 500.
"""


class RecordNotFound(KeyError):
    def __init__(self, table: str, record_id: str):
        super().__init__("not_found")
        self.table = table
        self.record_id = record_id

    def __str__(self) -> str:
        return "not_found"


class ProductNotFound(RecordNotFound):
    def __init__(self, product_id: str):
        super().__init__("products", product_id)


class UploadValidationError(ValueError):
    """The uploaded file is missing, of the wrong type or too large."""


class UploadParseError(ValueError):
    """The request body could not be decoded as multipart/form-data."""


class FileStoreError(OSError):
    """Writing to (or resolving a path in) the file store failed."""
