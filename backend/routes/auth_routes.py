import logging
import re
from typing import Any

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend import mailer
from backend.auth import jwt_handler, passwords
from backend.auth.dependencies import get_current_user
from backend.core.errors import (
    GENERIC_ERROR_MESSAGE,
    AppError,
    AuthenticationError,
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from backend.database import get_db
from backend.models.student import Student
from backend.models.user import User

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)

WHITESPACE_PATTERN = re.compile(r'\s')
NAME_PATTERN = re.compile(r'[A-Za-z\s]*')
BCRYPT_MAX_PASSWORD_BYTES = 72
DEFAULT_ROLE = 'student'


class SignupRequest(BaseModel):
    # Loosely typed so the credential checks in validate_signup run before
    # any per-field type problem is reported.
    username: Any = None
    email: Any = None
    password: Any = None
    first_name: Any = Field(default=None, alias='firstName')
    last_name: Any = Field(default=None, alias='lastName')
    year_level_type: Any = Field(default=None, alias='yearLevelType')
    strand_id: Any = Field(default=None, alias='strandId')
    course_id: Any = Field(default=None, alias='courseId')
    tesda_course_id: Any = Field(default=None, alias='tesdaCourseId')

    class Config:
        populate_by_name = True


class LoginRequest(BaseModel):
    email: str
    password: str


class ForgotPasswordRequest(BaseModel):
    email: Any = None


def contains_whitespace(value: Any) -> bool:
    return isinstance(value, str) and WHITESPACE_PATTERN.search(value) is not None


def is_valid_name(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and NAME_PATTERN.fullmatch(value) is not None


def is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def parse_optional_int(value: Any, label: str) -> int | None:
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise ValidationError(f'{label} must be an integer.')
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    try:
        return int(value.strip())
    except (AttributeError, ValueError) as exc:
        raise ValidationError(f'{label} must be an integer.') from exc


def validate_signup(data: SignupRequest) -> dict:
    """Check a signup payload and return the Student column values.

    The whitespace check comes first so it wins over every other problem
    with the payload, including fields of the wrong JSON type.
    """
    if contains_whitespace(data.email) or contains_whitespace(data.password):
        raise ValidationError('Email and password cannot contain spaces.')

    if not is_valid_name(data.first_name) or not is_valid_name(data.last_name):
        raise ValidationError('First name and last name can only contain letters and spaces.')

    required = (data.username, data.email, data.password, data.first_name, data.last_name)
    if any(is_blank(value) for value in required):
        raise ValidationError('Username, email, password, first name and last name are required.')

    if len(data.password.encode('utf-8')) > BCRYPT_MAX_PASSWORD_BYTES:
        raise ValidationError(f'Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes long.')

    year_level_type = data.year_level_type
    if year_level_type is not None and not isinstance(year_level_type, str):
        year_level_type = str(year_level_type)

    return {
        'first_name': data.first_name,
        'last_name': data.last_name,
        'year_level_type': year_level_type,
        'strand_id': parse_optional_int(data.strand_id, 'strandId'),
        'course_id': parse_optional_int(data.course_id, 'courseId'),
        'tesda_course_id': parse_optional_int(data.tesda_course_id, 'tesdaCourseId'),
    }


@router.post('/signup', status_code=status.HTTP_201_CREATED)
def signup(data: SignupRequest, response: Response, db: Session = Depends(get_db)):
    student_data = validate_signup(data)

    try:
        existing_user = db.query(User).filter(
            or_(User.username == data.username, User.email == data.email),
        ).first()
        if existing_user:
            raise ConflictError('User already exists!')

        user = User(
            username=data.username,
            email=data.email,
            hashed_password=passwords.hash_password(data.password),
            role=DEFAULT_ROLE,
        )
        db.add(user)
        db.flush()

        db.add(Student(user_id=user.id, **student_data))
        db.commit()
        db.refresh(user)

        jwt_handler.set_session_cookie(response, user.id, user.role)
    except AppError:
        raise
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError('User already exists!') from exc
    except Exception as exc:
        db.rollback()
        logger.exception('Error during signup')
        raise InternalError(GENERIC_ERROR_MESSAGE) from exc

    logger.info('Created student account %s (user id %s)', user.username, user.id)

    return {
        'success': True,
        'message': 'User created successfully!',
        'username': user.username,
        'fullName': f"{data.first_name} {data.last_name}",
        'email': user.email,
        'role': user.role,
    }


@router.post('/login')
def login(data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == data.email).first()
    if user is None:
        raise AuthenticationError('The email or password you entered is incorrect.')

    if not passwords.verify_password(data.password, user.hashed_password):
        raise AuthenticationError('Wrong password!')

    jwt_handler.set_session_cookie(response, user.id, user.role)
    logger.info('User %s logged in', user.id)

    return {
        'success': True,
        'message': 'User logged in successfully!',
        'userId': user.id,
        'username': user.username,
        'email': user.email,
        'role': user.role,
    }


@router.post('/forgot-password')
def forgot_password(data: ForgotPasswordRequest, db: Session = Depends(get_db)):
    if is_blank(data.email):
        raise ValidationError('Email is required.', field='message')

    try:
        user = db.query(User).filter(User.email == data.email).first()
        if user is None:
            raise NotFoundError('User with this email does not exist', field='message')

        new_password = passwords.generate_temporary_password()
        user.hashed_password = passwords.hash_password(new_password)
        db.commit()

        mailer.send_new_password_email(user.email, new_password)
    except AppError:
        raise
    except Exception as exc:
        db.rollback()
        logger.exception('Error in forgot password')
        raise InternalError('Server error', field='message') from exc

    return {'message': 'New password sent to your email.'}


@router.post('/logout')
def logout(response: Response):
    jwt_handler.clear_session_cookie(response)
    return {'message': 'Logged out successfully'}


@router.get('/me')
def me(current_user: User = Depends(get_current_user)):
    return {
        'userId': current_user.id,
        'username': current_user.username,
        'email': current_user.email,
        'role': current_user.role,
    }
