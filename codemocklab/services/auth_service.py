from datetime import datetime, timedelta
from jose import JWTError, jwt
from sqlalchemy.orm import Session
from ..models.user import User
from ..core.config import get_settings
from ..core.logger import get_logger
from ..schemas.auth import UserCreate, UserLogin
from ..utils.exceptions import ForbiddenError, InvalidInputError, UnauthorizedError
import pytz

logger = get_logger(__name__)
UTC = pytz.utc


class AuthService:
    # ------------------------------------------------------------------
    # tokens, signed with the session provider's shared secret
    # ------------------------------------------------------------------
    @staticmethod
    def create_access_token(data: dict) -> str:
        settings = get_settings()
        to_encode = data.copy()
        to_encode["exp"] = datetime.now(UTC) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )
        return jwt.encode(
            to_encode, settings.NEXTAUTH_SECRET, algorithm=settings.ALGORITHM
        )

    @staticmethod
    def verify_token(token: str) -> dict:
        settings = get_settings()
        try:
            return jwt.decode(
                token, settings.NEXTAUTH_SECRET, algorithms=[settings.ALGORITHM]
            )
        except JWTError:
            raise UnauthorizedError("登录已过期，请重新登录")

    # ------------------------------------------------------------------
    # users
    # ------------------------------------------------------------------
    @staticmethod
    def register_user(db: Session, user_data: UserCreate) -> User:
        email = user_data.email.lower()
        if db.query(User).filter(User.email == email).first():
            raise InvalidInputError("该邮箱已注册", code="EMAIL_ALREADY_REGISTERED")
        user = User(
            name=user_data.name,
            email=email,
            password_hash=User.hash_password(user_data.password),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"Registered user {user.id}")
        return user

    @staticmethod
    def authenticate_user(db: Session, user_data: UserLogin) -> User:
        user = db.query(User).filter(User.email == user_data.email.lower()).first()
        if not user or not user.verify_password(user_data.password):
            raise UnauthorizedError("邮箱或密码错误")
        if not user.is_active:
            raise ForbiddenError("账号已被停用")
        return user
