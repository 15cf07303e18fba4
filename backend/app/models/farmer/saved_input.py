# backend/app/models/farmer/saved_input.py

from sqlalchemy import Column, String, Text, DateTime
import uuid
from datetime import datetime, timezone

from app.core.database import Base


def gen_uuid():
    return str(uuid.uuid4())


def utcnow():
    # naive UTC, SQLite drops tzinfo anyway
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ============================================================
# SAVED ESTIMATOR INPUT (form pre-fill)
# ============================================================
class SavedEstimationInput(Base):
    __tablename__ = "saved_estimation_inputs"

    id = Column(String(36), primary_key=True, default=gen_uuid)
    storage_key = Column(String(255), nullable=False, unique=True, index=True)

    payload = Column(Text, nullable=False)  # EstimationInput as JSON (camelCase)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
