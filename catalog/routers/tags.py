from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional
from ..core.models import Tag, TagCreate
from ..aws.records import TagRepository, tag_repository
from .products import parse_json_param

router = APIRouter(prefix="/tags", tags=["tags"])


def get_tags() -> TagRepository:
    return tag_repository()


@router.post("", response_model=Tag, summary="Create a tag")
def create_tag(tag: TagCreate, tags: TagRepository = Depends(get_tags)):
    try:
        return tags.create(tag.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"create_failed {e}")


@router.get("", response_model=List[Tag], summary="List tags")
def list_tags(
    filter: Optional[str] = Query(None, description="JSON filter object"),
    tags: TagRepository = Depends(get_tags),
):
    try:
        return tags.find(parse_json_param(filter, "filter"))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"list_failed {e}")


@router.get("/{tag_id}", response_model=Tag, summary="Get a tag")
def get_tag(tag_id: str, tags: TagRepository = Depends(get_tags)):
    try:
        return tags.find_by_id(tag_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="not_found")


@router.delete("/{tag_id}", status_code=204, summary="Delete a tag")
def delete_tag(tag_id: str, tags: TagRepository = Depends(get_tags)):
    try:
        tags.delete_by_id(tag_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="not_found")
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"delete_failed {e}")
