from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from staffboard.core.allocation import get_allocation_service
from staffboard.allocation import AllocationService
from staffboard.db.session import get_db

router = APIRouter(tags=["health"])


@router.get("/health")
def health(
    db: Session = Depends(get_db),
    service: AllocationService = Depends(get_allocation_service),
):
    # Simple DB ping
    db.execute(text("SELECT 1"))
    return {"status": "ok", "ledger_assignments": len(service.ledger)}
