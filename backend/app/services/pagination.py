from __future__ import annotations

from typing import Any, List, Tuple

from sqlalchemy import func
from sqlmodel import Session, select


def paginate(session: Session, statement: Any, page: int, limit: int) -> Tuple[List[Any], int]:
    """Run ``statement`` for one page and return the rows with the exact total."""
    total = session.exec(select(func.count()).select_from(statement.order_by(None).subquery())).one()
    rows = session.exec(statement.offset((page - 1) * limit).limit(limit)).all()
    return list(rows), int(total)
