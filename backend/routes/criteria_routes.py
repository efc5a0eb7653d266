import logging

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core.errors import InternalError, NotFoundError
from backend.database import get_db
from backend.models.criteria import Criteria
from backend.models.event import Event

router = APIRouter(tags=['criteria'])

logger = logging.getLogger(__name__)

DEFAULT_MAX_SCORE = 10


def _normalize_name(value: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError('Criteria name is required.')
    return normalized


def _validate_max_score(value: int) -> int:
    if value <= 0:
        raise ValueError('Max score must be a positive integer.')
    return value


class CreateCriteriaRequest(BaseModel):
    criteria_name: str
    max_score: int = DEFAULT_MAX_SCORE

    @field_validator('criteria_name')
    @classmethod
    def validate_criteria_name(cls, value: str) -> str:
        return _normalize_name(value)

    @field_validator('max_score')
    @classmethod
    def validate_max_score(cls, value: int) -> int:
        return _validate_max_score(value)


class UpdateCriteriaRequest(BaseModel):
    criteria_id: int | None = None
    event_id: int | None = None
    criteria_name: str
    max_score: int

    @field_validator('criteria_name')
    @classmethod
    def validate_criteria_name(cls, value: str) -> str:
        return _normalize_name(value)

    @field_validator('max_score')
    @classmethod
    def validate_max_score(cls, value: int) -> int:
        return _validate_max_score(value)


class CriteriaResponse(BaseModel):
    criteria_id: int
    event_id: int
    criteria_name: str
    max_score: int


def to_response(criteria: Criteria) -> CriteriaResponse:
    return CriteriaResponse(
        criteria_id=criteria.id,
        event_id=criteria.event_id,
        criteria_name=criteria.name,
        max_score=criteria.max_score,
    )


def get_event_or_404(event_id: int, db: Session) -> Event:
    event = db.query(Event).filter(Event.id == event_id).first()
    if event is None:
        raise NotFoundError('Event not found.')
    return event


def get_criteria_or_404(criteria_id: int, db: Session) -> Criteria:
    criteria = db.query(Criteria).filter(Criteria.id == criteria_id).first()
    if criteria is None:
        raise NotFoundError('Criteria not found.')
    return criteria


def _store_unavailable(exc: SQLAlchemyError) -> InternalError:
    logger.exception('Criteria store operation failed', exc_info=exc)
    return InternalError('Database unavailable. Verify DATABASE_URL.')


@router.get('/criteria/{event_id}', response_model=list[CriteriaResponse])
def list_criteria(event_id: int, db: Session = Depends(get_db)):
    try:
        get_event_or_404(event_id, db)
        criteria = db.query(Criteria).filter(
            Criteria.event_id == event_id,
        ).order_by(Criteria.id.asc()).all()

        return [to_response(item) for item in criteria]
    except SQLAlchemyError as exc:
        raise _store_unavailable(exc) from exc


@router.post('/criteria/{event_id}', status_code=status.HTTP_201_CREATED)
def create_criteria(event_id: int, data: CreateCriteriaRequest, db: Session = Depends(get_db)):
    try:
        get_event_or_404(event_id, db)

        criteria = Criteria(
            event_id=event_id,
            name=data.criteria_name,
            max_score=data.max_score,
        )
        db.add(criteria)
        db.commit()
        db.refresh(criteria)
    except SQLAlchemyError as exc:
        db.rollback()
        raise _store_unavailable(exc) from exc

    logger.info('Added criteria %s to event %s', criteria.id, event_id)

    return {
        'message': 'Criteria added successfully!',
        'criteria': {
            'id': criteria.id,
            'name': criteria.name,
            'max_score': criteria.max_score,
        },
    }


@router.put('/criteria/update/{criteria_id}', response_model=CriteriaResponse)
def update_criteria(criteria_id: int, data: UpdateCriteriaRequest, db: Session = Depends(get_db)):
    try:
        criteria = get_criteria_or_404(criteria_id, db)

        # Last write wins; concurrent edits are not detected.
        criteria.name = data.criteria_name
        criteria.max_score = data.max_score
        db.commit()
        db.refresh(criteria)

        return to_response(criteria)
    except SQLAlchemyError as exc:
        db.rollback()
        raise _store_unavailable(exc) from exc


@router.delete('/criteria/delete/{criteria_id}')
def delete_criteria(criteria_id: int, db: Session = Depends(get_db)):
    try:
        criteria = get_criteria_or_404(criteria_id, db)

        db.delete(criteria)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise _store_unavailable(exc) from exc

    logger.info('Deleted criteria %s', criteria_id)

    return {'message': 'Criteria deleted successfully!'}
