from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from postboard.api.deps import get_current_claims
from postboard.database import get_session
from postboard.services import posts as post_service
from postboard.services.credentials import TokenClaims
from postboard.services.posts import PostView

router = APIRouter(prefix="/posts", tags=["posts"])


class CreatePostRequest(BaseModel):
    content: str = ""


class PostResponse(BaseModel):
    success: bool = True
    message: str = "Post created successfully"
    post: PostView


class PostListResponse(BaseModel):
    success: bool = True
    posts: list[PostView]


@router.post("/create", response_model=PostResponse, status_code=201)
async def create_post(
    body: CreatePostRequest,
    session: Session = Depends(get_session),
    claims: TokenClaims = Depends(get_current_claims),
):
    post = post_service.create_post(session, claims.user_id, body.content)
    return PostResponse(post=post)


@router.get("/all", response_model=PostListResponse)
async def list_all_posts(
    session: Session = Depends(get_session),
    _claims: TokenClaims = Depends(get_current_claims),
):
    return PostListResponse(posts=post_service.list_all_posts(session))


@router.get("/user/{user_id}", response_model=PostListResponse)
async def list_user_posts(
    user_id: int,
    session: Session = Depends(get_session),
    _claims: TokenClaims = Depends(get_current_claims),
):
    return PostListResponse(posts=post_service.list_posts_by_user(session, user_id))
