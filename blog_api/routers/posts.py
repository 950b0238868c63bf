from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.database import get_db
from blog_api.dependencies import PaginationParams, get_current_user, get_optional_user
from blog_api.responses import success
from blog_api.schemas import PostCreate, PostUpdate, TokenClaim
from blog_api.services import post_service

router = APIRouter(prefix="/api/posts", tags=["posts"])


@router.get("", dependencies=[Depends(get_optional_user)])
async def list_posts(
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    page = await post_service.get_posts(
        db, pagination.page, pagination.limit, pagination.published, pagination.author_id
    )
    return success("Posts retrieved successfully", page.model_dump(by_alias=True))


@router.get("/{post_id}", dependencies=[Depends(get_optional_user)])
async def get_post(post_id: int, db: AsyncSession = Depends(get_db)):
    post = await post_service.get_post(db, post_id)
    return success("Post retrieved successfully", {"post": post})


@router.post("", status_code=201)
async def create_post(
    data: PostCreate,
    claim: TokenClaim = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.create_post(db, data, claim.subject_id)
    return success("Post created successfully", {"post": post})


@router.put("/{post_id}")
async def update_post(
    post_id: int,
    data: PostUpdate,
    claim: TokenClaim = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.update_post(db, post_id, data, claim.subject_id)
    return success("Post updated successfully", {"post": post})


@router.delete("/{post_id}")
async def delete_post(
    post_id: int,
    claim: TokenClaim = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await post_service.delete_post(db, post_id, claim.subject_id)
    return success("Post deleted successfully")
