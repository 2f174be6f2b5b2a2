from fastapi import APIRouter, Depends, HTTPException, Query, Request
from typing import Any, Dict, List, Optional
import json
import structlog
from ..core.config import settings
from ..core.models import CountResponse, Product, ProductCreate, ProductPatch
from ..aws.records import ProductRepository, product_repository
from ..services.thumbnails import ThumbnailService
from ..storage.files import LocalFileStore

logger = structlog.get_logger()

router = APIRouter(prefix="/products", tags=["products"])


def get_products() -> ProductRepository:
    return product_repository()


def get_thumbnails(products: ProductRepository = Depends(get_products)) -> ThumbnailService:
    return ThumbnailService(products=products, files=LocalFileStore(settings.public_dir))


def parse_json_param(raw: Optional[str], name: str) -> Optional[Dict[str, Any]]:
    """Decode a JSON object passed as a query string value."""
    if not raw:
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        raise ValueError(f"invalid_{name}_json")
    if not isinstance(value, dict):
        raise ValueError(f"{name}_must_be_object")
    return value


@router.post("", response_model=Product, summary="Create a product")
def create_product(
    product: ProductCreate,
    products: ProductRepository = Depends(get_products),
):
    try:
        return products.create(product.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"create_failed {e}")


@router.get("/count", response_model=CountResponse, summary="Count products")
def count_products(
    where: Optional[str] = Query(None, description='JSON object, e.g. {"name":"mug"}'),
    products: ProductRepository = Depends(get_products),
):
    try:
        return CountResponse(count=products.count(parse_json_param(where, "where")))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"count_failed {e}")


@router.get(
    "",
    response_model=List[Product],
    summary="List products",
    description=(
        "`filter` is a JSON object with optional `where` (field equality, or operators "
        "such as `gt`, `lte`, `neq`, `inq`, `between`), "
        "`order` (e.g. \"price DESC\"), `skip` and `limit`."
    ),
)
def list_products(
    filter: Optional[str] = Query(None, description="JSON filter object"),
    products: ProductRepository = Depends(get_products),
):
    try:
        return products.find(parse_json_param(filter, "filter"))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"list_failed {e}")


@router.patch("", response_model=CountResponse, summary="Update all matching products")
def update_products(
    patch: ProductPatch,
    where: Optional[str] = Query(None, description='JSON where object, e.g. {"price":{"gt":10}}'),
    products: ProductRepository = Depends(get_products),
):
    try:
        count = products.update_all(patch.model_dump(exclude_unset=True), parse_json_param(where, "where"))
        return CountResponse(count=count)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"update_failed {e}")


@router.get("/{product_id}", response_model=Product, summary="Get a product")
def get_product(product_id: str, products: ProductRepository = Depends(get_products)):
    try:
        return products.find_by_id(product_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="not_found")
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"get_failed {e}")


@router.patch("/{product_id}", status_code=204, summary="Partially update a product")
def patch_product(
    product_id: str,
    patch: ProductPatch,
    products: ProductRepository = Depends(get_products),
):
    try:
        products.update_by_id(product_id, patch.model_dump(exclude_unset=True))
    except KeyError:
        raise HTTPException(status_code=404, detail="not_found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"update_failed {e}")


@router.put("/{product_id}", status_code=204, summary="Replace a product")
def replace_product(
    product_id: str,
    product: ProductCreate,
    products: ProductRepository = Depends(get_products),
):
    try:
        products.replace_by_id(product_id, product.model_dump())
    except KeyError:
        raise HTTPException(status_code=404, detail="not_found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"replace_failed {e}")


@router.delete(
    "/{product_id}",
    status_code=204,
    summary="Delete a product",
    description="Removes the record and, best effort, its thumbnail file.",
)
async def delete_product(product_id: str, thumbnails: ThumbnailService = Depends(get_thumbnails)):
    try:
        await thumbnails.delete_product(product_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="not_found")
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"delete_failed {e}")


@router.post(
    "/{product_id}/thumbnail",
    response_model=str,
    summary="Upload a product thumbnail (JPEG/PNG)",
    description=(
        "Send one image as multipart form-data (any field name). The image must be "
        "JPEG or PNG and at most 1MB; it is resized to 100x100 and stored as JPEG.\n\n"
        "Returns the thumbnail path relative to the public root; it is served "
        "under `/public/<path>`."
    ),
)
async def upload_thumbnail(
    product_id: str,
    request: Request,
    thumbnails: ThumbnailService = Depends(get_thumbnails),
):
    try:
        return await thumbnails.upload_thumbnail(product_id, request)
    except KeyError:
        raise HTTPException(status_code=404, detail="not_found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("thumbnail upload failed", product_id=product_id, error=str(e))
        raise HTTPException(status_code=500, detail=f"upload_failed {e}")


@router.delete("/{product_id}/thumbnail", status_code=204, summary="Delete a product thumbnail")
async def delete_thumbnail(product_id: str, thumbnails: ThumbnailService = Depends(get_thumbnails)):
    try:
        await thumbnails.delete_thumbnail(product_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="not_found")
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"delete_failed {e}")
