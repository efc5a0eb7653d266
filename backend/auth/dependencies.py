import jwt
from fastapi import Depends, Request, status
from sqlalchemy.orm import Session

from backend.auth import jwt_handler
from backend.core import config
from backend.core.errors import AuthenticationError
from backend.database import get_db
from backend.models.user import User


def _unauthorized(message: str) -> AuthenticationError:
    return AuthenticationError(message, status_code=status.HTTP_401_UNAUTHORIZED)


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    token = request.cookies.get(config.SESSION_COOKIE_NAME)
    if not token:
        raise _unauthorized("Not authenticated")

    try:
        payload = jwt_handler.decode_access_token(token)
    except jwt.PyJWTError as exc:
        raise _unauthorized("Invalid token") from exc

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError) as exc:
        raise _unauthorized("Invalid token subject") from exc

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise _unauthorized("User not found")
    return user
