from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from ..db.session import get_db
from ..services.auth_service import AuthService
from ..models.user import User
from ..utils.exceptions import UnauthorizedError

bearer_scheme = HTTPBearer(auto_error=False)

# cookie set by the web frontend after sign-in
SESSION_COOKIE = "access_token"


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    token = credentials.credentials if credentials else request.cookies.get(SESSION_COOKIE)
    if not token:
        raise UnauthorizedError()

    payload = AuthService.verify_token(token)
    user_id = payload.get("sub")
    if user_id is None:
        raise UnauthorizedError()

    try:
        user = db.query(User).filter(User.id == int(user_id)).first()
    except (TypeError, ValueError):
        raise UnauthorizedError()
    if user is None or not user.is_active:
        raise UnauthorizedError("用户不存在")

    return user
