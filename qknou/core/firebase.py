import os
from typing import Optional, Dict, Any

import firebase_admin
import structlog
from firebase_admin import auth, credentials
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..models.user import User

logger = structlog.get_logger(__name__)

_firebase_app = None


def initialize_firebase():
    global _firebase_app
    if _firebase_app is None:
        settings = get_settings()
        try:
            path = settings.firebase_service_account_path
            if path and os.path.exists(path):
                cred = credentials.Certificate(path)
            else:
                cred = credentials.ApplicationDefault()

            options = {'projectId': settings.firebase_project_id} if settings.firebase_project_id else None
            _firebase_app = firebase_admin.initialize_app(cred, options)
        except Exception as e:
            logger.error("Firebase initialization failed", error=str(e))
            return None
    return _firebase_app


def verify_firebase_token(token: str) -> Optional[Dict[str, Any]]:
    try:
        app = initialize_firebase()
        if not app:
            logger.warning("Firebase app not initialized")
            return None
        return auth.verify_id_token(token, app=app)
    except Exception as e:
        logger.warning("Token verification failed", error=str(e))
        return None


def provider_from_token(decoded_token: Dict[str, Any]) -> str:
    """Map the sign-in provider recorded by Firebase to the short provider name we store."""
    sign_in_provider = (decoded_token.get("firebase") or {}).get("sign_in_provider", "")
    if sign_in_provider == "google.com":
        return "google"
    if "kakao" in sign_in_provider:
        return "kakao"
    return "firebase"


async def get_or_create_user(
    db: Session,
    provider_uid: str,
    email: Optional[str],
    full_name: Optional[str],
    provider: str = "firebase"
) -> User:
    user = db.query(User).filter(User.provider_uid == provider_uid).first()
    if user:
        return user

    try:
        user = User(
            user_id=provider_uid,
            provider_uid=provider_uid,
            provider=provider,
            email=email,
            full_name=full_name
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("User created", user_id=user.user_id, provider=provider)
        return user
    except IntegrityError:
        db.rollback()
        user = db.query(User).filter(User.provider_uid == provider_uid).first()
        if user is None:
            raise
        return user
