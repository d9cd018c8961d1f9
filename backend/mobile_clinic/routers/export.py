from datetime import date

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from mobile_clinic.db.session import get_db
from mobile_clinic.deps import require_action
from mobile_clinic.services.referral_export import export_referrals

router = APIRouter(prefix="/export", tags=["export"])


@router.get("/referrals-by-date")
def referrals_by_date(
    visit_date: date = Query(..., alias="date"),
    export_format: str = Query(default="pdf", alias="format"),
    db: Session = Depends(get_db),
    _identity=Depends(require_action("referrals.read")),
):
    content, media_type, filename = export_referrals(db, visit_date, export_format)
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return Response(content=content, media_type=media_type, headers=headers)
