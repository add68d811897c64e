# backend/booking_engine/deps.py
#
# Identity is established upstream: the gateway authenticates the caller and
# forwards only the normalized user id as X-User-Id.

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from .database import get_db
from .errors import NotFound
from .models import Business


def get_current_user_id(x_user_id: int | None = Header(None)) -> int:
    if x_user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return x_user_id


def get_my_business(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Business:
    business = (
        db.query(Business)
        .filter(Business.owner_id == user_id, Business.is_active.is_(True))
        .first()
    )
    if not business:
        raise NotFound("You do not own a business")
    return business
