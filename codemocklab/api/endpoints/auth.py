from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ...core.auth import SESSION_COOKIE, get_current_user
from ...core.config import get_settings
from ...core.logger import logger
from ...db.session import get_db
from ...models.user import User
from ...schemas.auth import TokenResponse, UserCreate, UserLogin, UserResponse
from ...services.auth_service import AuthService

router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=201)
def register(user_data: UserCreate, db: Session = Depends(get_db)):
    return AuthService.register_user(db, user_data)


@router.post("/login", response_model=TokenResponse)
def login(user_data: UserLogin, response: Response, db: Session = Depends(get_db)):
    settings = get_settings()
    user = AuthService.authenticate_user(db, user_data)
    access_token = AuthService.create_access_token({"sub": str(user.id)})

    # session cookie for the web frontend; API clients use the bearer token
    response.set_cookie(
        SESSION_COOKIE,
        access_token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    logger.info(f"User {user.id} logged in")

    return TokenResponse(
        access_token=access_token, user=UserResponse.model_validate(user)
    )


@router.post("/logout", status_code=204)
def logout(response: Response):
    response.delete_cookie(SESSION_COOKIE, path="/")


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    return current_user
