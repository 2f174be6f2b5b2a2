from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from .core.config import settings
from .core.logging import setup_logging
from .routers.products import router as products_router
from .routers.tags import router as tags_router

logger = setup_logging()

tags_metadata = [
    {
        "name": "products",
        "description": (
            "CRUD over products plus thumbnail management.\n\n"
            "- Filters are JSON objects passed in the `filter` / `where` query params.\n"
            "- Thumbnails: JPEG/PNG up to 1MB, resized to 100x100 and stored as JPEG."
        ),
    },
    {"name": "tags", "description": "Minimal CRUD over tags."},
]

app = FastAPI(
    title="Product Catalog Service",
    description=(
        "How to Use:\n\n"
        "1) Create a product: POST /products with a JSON body (`name` is required).\n"
        "2) Attach a thumbnail: POST /products/{id}/thumbnail with a JPG/PNG file as multipart form-data.\n"
        "3) Fetch the image: GET /public/<thumbnail> using the path stored on the product.\n"
        "4) Remove it: DELETE /products/{id}/thumbnail, or delete the whole product.\n"
    ),
    openapi_tags=tags_metadata,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.include_router(products_router)
app.include_router(tags_router)

app.mount("/public", StaticFiles(directory=settings.public_dir, check_dir=False), name="public")
logger.info("app configured", public_dir=settings.public_dir)
