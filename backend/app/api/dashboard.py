from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlmodel import Session

from ..schemas import Catalog, OrganizationSummary
from ..services import DashboardService
from .deps import get_db_session

router = APIRouter(tags=["dashboard"])


def _get_service(session: Session = Depends(get_db_session)) -> DashboardService:
    return DashboardService(session)


@router.get("/dashboard", response_model=OrganizationSummary)
def organization_summary(service: DashboardService = Depends(_get_service)) -> OrganizationSummary:
    return service.organization_summary()


@router.get("/catalog", response_model=Catalog)
def catalog(service: DashboardService = Depends(_get_service)) -> Catalog:
    return service.catalog()
