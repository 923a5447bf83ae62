"""Membership lifecycle events and best-effort notification fan-out.

Delivery transports (SMTP, Slack) live outside this service; channels here are
protocols with logging defaults. A failing channel never affects the outcome of
the membership change that produced the event.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable
from uuid import UUID

from vulcan_api.common.logging import log_context
from vulcan_api.settings import NotificationSettings
from vulcan_db.models import Membership, MembershipType, Role

logger = logging.getLogger(__name__)

MEMBERSHIP_CREATED = "membership.created"
MEMBERSHIP_UPDATED = "membership.updated"
MEMBERSHIP_REMOVED = "membership.removed"

_NOTIFICATION_VERBS = {
    MEMBERSHIP_CREATED: "create",
    MEMBERSHIP_UPDATED: "update",
    MEMBERSHIP_REMOVED: "remove",
}


@dataclass(frozen=True, slots=True)
class MembershipEvent:
    """Snapshot of a membership change, taken once the change is persisted."""

    name: str
    record_id: UUID
    membership_type: MembershipType
    membership_id: UUID
    user_id: UUID
    role: Role
    actor_id: UUID

    @classmethod
    def from_membership(cls, name: str, membership: Membership, *, actor_id: UUID) -> MembershipEvent:
        if name not in _NOTIFICATION_VERBS:
            raise ValueError(f"Unknown membership event: {name!r}")
        return cls(
            name=name,
            record_id=membership.id,
            membership_type=MembershipType(membership.membership_type),
            membership_id=membership.membership_id,
            user_id=membership.user_id,
            role=Role(membership.role),
            actor_id=actor_id,
        )

    @property
    def notification_type(self) -> str:
        """Channel-facing name, e.g. ``create_project_membership``."""

        verb = _NOTIFICATION_VERBS[self.name]
        return f"{verb}_{self.membership_type.value.lower()}_membership"


@runtime_checkable
class NotificationChannel(Protocol):
    def send(self, event: MembershipEvent) -> None: ...


class LoggingMailChannel:
    """Records the welcome mail that a mail transport would send."""

    def send(self, event: MembershipEvent) -> None:
        logger.info(
            "notification.mail.welcome_user",
            extra=log_context(
                user_id=event.user_id,
                membership_id=event.record_id,
                membership_type=event.membership_type.value,
                target_id=str(event.membership_id),
            ),
        )


class LoggingChatChannel:
    def send(self, event: MembershipEvent) -> None:
        logger.info(
            "notification.chat.sent",
            extra=log_context(
                user_id=event.user_id,
                membership_id=event.record_id,
                notification_type=event.notification_type,
                role=event.role.value,
            ),
        )


class MembershipNotifier:
    """Route membership events to the channels enabled in ``settings``."""

    def __init__(
        self,
        settings: NotificationSettings,
        *,
        mail: NotificationChannel | None = None,
        chat: NotificationChannel | None = None,
    ) -> None:
        self._settings = settings
        self._mail = mail or LoggingMailChannel()
        self._chat = chat or LoggingChatChannel()

    @property
    def settings(self) -> NotificationSettings:
        return self._settings

    def dispatch(self, event: MembershipEvent) -> None:
        if event.name == MEMBERSHIP_CREATED and self._settings.smtp_enabled:
            self._deliver("mail", self._mail, event)
        if self._settings.slack_enabled:
            self._deliver("chat", self._chat, event)

    def _deliver(self, channel_name: str, channel: NotificationChannel, event: MembershipEvent) -> None:
        try:
            channel.send(event)
        except Exception:
            logger.exception(
                "notification.dispatch.failed",
                extra=log_context(
                    membership_id=event.record_id,
                    channel=channel_name,
                    event=event.name,
                ),
            )


__all__ = [
    "MEMBERSHIP_CREATED",
    "MEMBERSHIP_REMOVED",
    "MEMBERSHIP_UPDATED",
    "LoggingChatChannel",
    "LoggingMailChannel",
    "MembershipEvent",
    "MembershipNotifier",
    "NotificationChannel",
]
