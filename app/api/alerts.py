"""Saved-search alert endpoints. Every route is scoped to the caller."""

import logging

from fastapi import APIRouter, HTTPException, Response, status

from app.api.deps import CurrentUser, DbSession
from app.models.alert import Alert
from app.schemas.alert import AlertCreate, AlertOut, AlertToggle
from app.services.alerts import AlertStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/alerts", tags=["Alerts"])


@router.get("", response_model=list[AlertOut])
async def list_alerts(user: CurrentUser, db: DbSession) -> list[Alert]:
    return await AlertStore(db).for_user(user.id)


@router.post("", response_model=AlertOut, status_code=status.HTTP_201_CREATED)
async def create_alert(payload: AlertCreate, user: CurrentUser, db: DbSession) -> Alert:
    return await AlertStore(db).create(user.id, payload)


@router.patch("/{alert_id}", response_model=AlertOut)
async def toggle_alert(alert_id: int, payload: AlertToggle, user: CurrentUser, db: DbSession) -> Alert:
    alert = await AlertStore(db).set_active(alert_id, user.id, payload.is_active)
    if alert is None:
        raise HTTPException(status_code=404, detail="Alert not found")
    return alert


@router.delete("/{alert_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_alert(alert_id: int, user: CurrentUser, db: DbSession) -> Response:
    if not await AlertStore(db).delete(alert_id, user.id):
        raise HTTPException(status_code=404, detail="Alert not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
