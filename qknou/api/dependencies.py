from typing import Optional

import structlog
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from fastapi import Depends, Request, HTTPException
from sqlalchemy.orm import Session

from ..core.database import get_db
from ..core.firebase import verify_firebase_token, get_or_create_user, provider_from_token
from ..services.exam_service import ExamService
from ..services.exam_crawler_service import ExamCrawlerService
from ..services.crawl_orchestrator import CrawlOrchestrator
from ..models.user import User
from ..config import get_settings

logger = structlog.get_logger(__name__)

security = HTTPBearer(auto_error=False)

ANONYMOUS_USER_ID = "anonymous-user"


def get_exam_service(db: Session = Depends(get_db)) -> ExamService:
    return ExamService(db)


def get_exam_crawler_service(db: Session = Depends(get_db)) -> ExamCrawlerService:
    return ExamCrawlerService(db)


def get_crawl_orchestrator(db: Session = Depends(get_db)) -> CrawlOrchestrator:
    return CrawlOrchestrator(db)


async def get_current_user_required(
    request: Request,
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> User:
    settings = get_settings()

    user = await get_current_user_optional(request, db, credentials)

    if not user and settings.demo_mode:
        return await get_or_create_local_user(db, settings.demo_user_id, "Demo User")

    if not user:
        raise HTTPException(
            status_code=401,
            detail="Authentication required. Please provide a valid bearer token."
        )
    return user


async def get_current_user_optional(
    request: Request,
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[User]:
    if not credentials or not credentials.credentials:
        return None

    decoded_token = verify_firebase_token(credentials.credentials)
    if not decoded_token:
        return None

    provider_uid = decoded_token.get("uid")
    if not provider_uid:
        return None

    email = decoded_token.get("email")
    try:
        return await get_or_create_user(
            db=db,
            provider_uid=provider_uid,
            email=email,
            full_name=decoded_token.get("name", email),
            provider=provider_from_token(decoded_token)
        )
    except Exception as e:
        logger.error("Failed to resolve authenticated user", provider_uid=provider_uid, error=str(e))
        return None


async def get_or_create_local_user(db: Session, user_id: str, full_name: str) -> User:
    """Users standing in for a real account in demo mode or when auth is switched off"""
    existing_user = db.query(User).filter(User.user_id == user_id).first()
    if existing_user:
        return existing_user

    user = User(
        user_id=user_id,
        provider_uid=f"local-{user_id}",
        provider="local",
        full_name=full_name
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


async def get_current_user_conditional(
    request: Request,
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> User:
    """
    Conditional authentication dependency that enforces auth based on settings.
    - If authentication_enabled=True: requires valid auth (like get_current_user_required)
    - If authentication_enabled=False: returns anonymous user without requiring auth
    """
    settings = get_settings()

    if not settings.authentication_enabled:
        return await get_or_create_local_user(db, ANONYMOUS_USER_ID, "Anonymous User")

    return await get_current_user_required(request, db, credentials)
