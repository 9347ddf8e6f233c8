from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Header

from ...dependencies import get_current_user_optional
from ....core.firebase import verify_firebase_token, provider_from_token
from ....models.user import User
from ..schemas import TokenVerificationResponse, UserResponse

router = APIRouter()


@router.post("/verify-token", response_model=TokenVerificationResponse)
async def verify_token(authorization: str = Header(...)):
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header")

    token = authorization.split(" ", 1)[1]
    decoded_token = verify_firebase_token(token)
    if not decoded_token:
        raise HTTPException(status_code=401, detail="Invalid token")

    provider_uid = decoded_token.get("uid")
    if not provider_uid:
        raise HTTPException(status_code=401, detail="Invalid token data")

    return TokenVerificationResponse(
        valid=True,
        provider_uid=provider_uid,
        email=decoded_token.get("email"),
        name=decoded_token.get("name"),
        provider=provider_from_token(decoded_token)
    )


@router.get("/me", response_model=Optional[UserResponse])
async def get_current_user(
    current_user: Optional[User] = Depends(get_current_user_optional)
):
    if not current_user:
        return None

    return UserResponse(
        user_id=current_user.user_id,
        email=current_user.email,
        full_name=current_user.full_name,
        provider=current_user.provider
    )
