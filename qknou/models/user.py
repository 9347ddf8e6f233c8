import uuid
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func

from ..core.database import Base

def generate_uuid():
    return str(uuid.uuid4())

class User(Base):
    __tablename__ = "users"

    user_id = Column(String, primary_key=True, index=True, default=generate_uuid)
    provider_uid = Column(String, nullable=False, unique=True, index=True)
    provider = Column(String(50), nullable=False, default="firebase")
    email = Column(String, nullable=True, index=True)
    full_name = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
