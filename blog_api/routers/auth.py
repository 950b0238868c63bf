from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.database import get_db
from blog_api.dependencies import get_current_user
from blog_api.responses import success
from blog_api.schemas import TokenClaim, TokenPayload, UserLogin, UserRegister
from blog_api.security import token_service
from blog_api.services import auth_service

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _issue_for(user: dict) -> str:
    return token_service.issue(TokenPayload(subject_id=user["id"], email=user["email"]))


@router.post("/register", status_code=201)
async def register(data: UserRegister, db: AsyncSession = Depends(get_db)):
    user = await auth_service.register_user(db, data)
    return success("User registered successfully", {"user": user, "token": _issue_for(user)})


@router.post("/login")
async def login(data: UserLogin, db: AsyncSession = Depends(get_db)):
    user = await auth_service.login_user(db, data)
    return success("Login successful", {"user": user, "token": _issue_for(user)})


@router.get("/profile")
async def profile(
    claim: TokenClaim = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await auth_service.get_user_by_id(db, claim.subject_id)
    return success("Profile retrieved successfully", {"user": user})
