from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.database import get_db
from blog_api.dependencies import get_current_user, get_optional_user
from blog_api.responses import success
from blog_api.schemas import CommentCreate, CommentUpdate, TokenClaim
from blog_api.services import comment_service

router = APIRouter(prefix="/api/comments", tags=["comments"])


@router.post("/{post_id}", status_code=201)
async def create_comment(
    post_id: int,
    data: CommentCreate,
    claim: TokenClaim = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    comment = await comment_service.create_comment(db, data, post_id, claim.subject_id)
    return success("Comment created successfully", {"comment": comment})


@router.get("/post/{post_id}", dependencies=[Depends(get_optional_user)])
async def list_post_comments(post_id: int, db: AsyncSession = Depends(get_db)):
    comments = await comment_service.get_comments_by_post(db, post_id)
    return success("Comments retrieved successfully", {"comments": comments})


@router.get("/{comment_id}", dependencies=[Depends(get_optional_user)])
async def get_comment(comment_id: int, db: AsyncSession = Depends(get_db)):
    comment = await comment_service.get_comment(db, comment_id)
    return success("Comment retrieved successfully", {"comment": comment})


@router.put("/{comment_id}")
async def update_comment(
    comment_id: int,
    data: CommentUpdate,
    claim: TokenClaim = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    comment = await comment_service.update_comment(db, comment_id, data, claim.subject_id)
    return success("Comment updated successfully", {"comment": comment})


@router.delete("/{comment_id}")
async def delete_comment(
    comment_id: int,
    claim: TokenClaim = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await comment_service.delete_comment(db, comment_id, claim.subject_id)
    return success("Comment deleted successfully")
