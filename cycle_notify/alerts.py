from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, Iterable

from .expiry import evaluate, is_alert_worthy
from .models import AlertGroup, Item, User

logger = logging.getLogger(__name__)


def build_directory(users: Iterable[User]) -> Dict[str, str]:
    """Map user id -> notify email, for users who configured one."""
    directory: Dict[str, str] = {}
    for user in users:
        if user.notify_email and user.notify_email.strip():
            directory[user.id] = user.notify_email.strip()
    return directory


def group_alerts(items: Iterable[Item], directory: Dict[str, str], now: datetime) -> Dict[str, AlertGroup]:
    """
    Collect alert-worthy items per owner.

    Items whose owner has no notify email are skipped before evaluation.
    Order within a group follows the input order.
    """
    groups: Dict[str, AlertGroup] = {}
    for item in items:
        email = directory.get(item.user_id)
        if not email:
            continue
        result = evaluate(item, now)
        if not is_alert_worthy(result.days_left):
            continue
        group = groups.get(item.user_id)
        if group is None:
            group = AlertGroup(user_id=item.user_id, email=email)
            groups[item.user_id] = group
        group.items.append(result)
        logger.debug("Item %s for user %s: days_left=%s", item.id, item.user_id, result.days_left)
    return groups
