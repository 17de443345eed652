from __future__ import annotations

from typing import Optional, Type, TypeVar

from fastapi import Depends, Header, Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from sqlmodel import Session

from ..config import settings
from ..database import get_session

M = TypeVar("M", bound=BaseModel)


def get_db_session(session: Session = Depends(get_session)) -> Session:
    return session


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Identify the caller; authentication lives in front of this service."""
    return (x_user_id or "").strip() or settings.default_user_id


def get_lifecycle(request: Request):
    return request.app.state.lifecycle


def get_analyzer(request: Request):
    return request.app.state.analyzer


def build_filters(model: Type[M], /, **values) -> M:
    """Validate query parameters collected by a dependency into ``model``."""
    try:
        return model(**values)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False)) from exc
