"""Alert store, alert matcher and notification dispatch.

When a listing goes live, every active alert is checked against it and the
owners of matching alerts are messaged on WhatsApp. Dispatch is best effort:
a failure for one alert is logged and the loop moves on, and nothing here
ever raises to the caller. An alert paused while a run is in flight may
still be notified for a listing matched before the pause.
"""

import logging
import uuid
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.matching import listing_matches_alert
from app.db.session import session_scope
from app.models.alert import Alert
from app.models.user import User
from app.schemas.alert import AlertCreate
from app.schemas.listing import ListingOut
from app.services.whatsapp import WhatsAppNotifier
from app.utils.phone import is_notifiable

logger = logging.getLogger(__name__)


class AlertStore:
    """Database access for alerts. Writes are scoped to the owning user."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def create(self, user_id: uuid.UUID, data: AlertCreate) -> Alert:
        alert = Alert(user_id=user_id, **data.model_dump())
        self._db.add(alert)
        await self._db.flush()
        await self._db.refresh(alert)
        logger.info(f"Created alert: id={alert.id}, user_id={user_id}")
        return alert

    async def for_user(self, user_id: uuid.UUID) -> list[Alert]:
        result = await self._db.execute(
            select(Alert).where(Alert.user_id == user_id).order_by(Alert.created_at.desc(), Alert.id.desc())
        )
        return list(result.scalars().all())

    async def delete(self, alert_id: int, user_id: uuid.UUID) -> bool:
        result = await self._db.execute(
            delete(Alert).where(Alert.id == alert_id, Alert.user_id == user_id)
        )
        return result.rowcount > 0

    async def set_active(self, alert_id: int, user_id: uuid.UUID, is_active: bool) -> Alert | None:
        result = await self._db.execute(
            select(Alert).where(Alert.id == alert_id, Alert.user_id == user_id)
        )
        alert = result.scalar_one_or_none()
        if alert is None:
            return None

        alert.is_active = is_active
        await self._db.flush()
        await self._db.refresh(alert)
        return alert

    async def list_active(self) -> list[Alert]:
        """Every active alert. Full scan; fine while alert counts stay small."""
        result = await self._db.execute(select(Alert).where(Alert.is_active.is_(True)))
        return list(result.scalars().all())

    async def get_owner(self, alert: Alert) -> User | None:
        return await self._db.get(User, alert.user_id)


def _text(value: Any) -> str:
    return str(getattr(value, "value", value))


def format_alert_message(listing: Any, site_name: str = "AutoNinja") -> str:
    """WhatsApp text announcing a listing that matched an alert."""
    return (
        "🚗 New Car Alert!\n\n"
        f"{listing.year} {listing.make} {listing.model}\n"
        f"💰 Price: €{listing.price:,}\n"
        f"📍 Location: {listing.location}\n"
        f"🔢 Mileage: {listing.mileage:,} {_text(listing.mileage_unit)}\n\n"
        f"View it now on {site_name}!"
    )


class AlertMatcher:
    """Matches one listing against all active alerts and notifies owners."""

    def __init__(
        self,
        alert_store: AlertStore,
        notifier: WhatsAppNotifier,
        site_name: str = "AutoNinja",
    ) -> None:
        self._alerts = alert_store
        self._notifier = notifier
        self._site_name = site_name

    async def find_matches(self, listing: Any) -> list[Alert]:
        """Active alerts matched by ``listing``. Store errors propagate."""
        active_alerts = await self._alerts.list_active()
        return [alert for alert in active_alerts if listing_matches_alert(listing, alert)]

    async def check_and_notify(self, listing: Any) -> int:
        """Notify owners of alerts matched by ``listing``.

        Returns:
            Number of notifications handed to the channel successfully.
        """
        try:
            matches = await self.find_matches(listing)
        except Exception as e:
            logger.exception(f"Error checking alert matches for listing {listing.id}: {e}")
            return 0

        logger.info(f"Listing {listing.id} matched {len(matches)} active alert(s)")

        sent = 0
        message = format_alert_message(listing, self._site_name)

        for alert in matches:
            try:
                if not alert.notify_via_whatsapp:
                    continue

                user = await self._alerts.get_owner(alert)
                if user is None or not is_notifiable(user.phone_number):
                    logger.debug(f"Alert {alert.id}: owner has no usable phone number, skipping")
                    continue

                await self._notifier.send_text_message(user.phone_number, message)
                sent += 1
                logger.info(f"Alert sent to user {user.id} for listing {listing.id} (alert {alert.id})")
            except Exception as e:
                logger.error(f"Failed to send alert {alert.id} for listing {listing.id}: {e}")

        return sent


async def dispatch_listing_alerts(listing: ListingOut, notifier: WhatsAppNotifier) -> int:
    """Background entry point: run the matcher in its own database session.

    Never raises; a failure to even open the session is logged and counted
    as zero notifications sent.
    """
    settings = get_settings()
    try:
        async with session_scope() as db:
            matcher = AlertMatcher(AlertStore(db), notifier, settings.public_site_name)
            return await matcher.check_and_notify(listing)
    except Exception as e:
        logger.exception(f"Alert dispatch failed for listing {listing.id}: {e}")
        return 0
