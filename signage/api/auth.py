from fastapi import APIRouter, Depends
from signage.models.user import User
from signage.schemas.user import UserOut
from signage.services.auth import get_current_user

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/user", response_model=UserOut)
def current_user(user: User = Depends(get_current_user)):
    return user
