from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from postboard.api.deps import get_current_claims
from postboard.database import get_session
from postboard.services import credentials
from postboard.services.credentials import PublicUser, TokenClaims

router = APIRouter(prefix="/auth", tags=["auth"])


class CredentialsRequest(BaseModel):
    username: str = ""
    password: str = ""


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    token: str
    user: PublicUser


class VerifyResponse(BaseModel):
    success: bool = True
    user: PublicUser


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(body: CredentialsRequest, session: Session = Depends(get_session)):
    result = credentials.register(session, body.username, body.password)
    return AuthResponse(
        message="User created successfully", token=result.token, user=result.user
    )


@router.post("/login", response_model=AuthResponse)
async def login(body: CredentialsRequest, session: Session = Depends(get_session)):
    result = credentials.login(session, body.username, body.password)
    return AuthResponse(message="Login successful", token=result.token, user=result.user)


@router.get("/verify", response_model=VerifyResponse)
async def verify(claims: TokenClaims = Depends(get_current_claims)):
    return VerifyResponse(user=PublicUser(id=claims.user_id, username=claims.username))
