from __future__ import annotations

from typing import List, Tuple

from .config import DEFAULT_DETAILS_URL
from .models import AlertGroup, ExpiryResult
from .utils import format_local_date

EXPIRED_COLOR = "red"
REMAINING_COLOR = "orange"


def build_email_subject(group: AlertGroup) -> str:
    return f"【提醒】{len(group.items)} 个物品即将过期"


def format_status(result: ExpiryResult) -> str:
    if result.is_expired():
        return f"已过期 {abs(result.days_left)} 天"
    return f"剩余 {result.days_left} 天"


def build_email_body(group: AlertGroup, details_url: str = DEFAULT_DETAILS_URL) -> Tuple[str, str]:
    lines: List[str] = ["Cycle 物品提醒", "", "你好，你有以下物品需要关注：", ""]
    html_parts: List[str] = ["<h2>Cycle 物品提醒</h2><p>你好，你有以下物品需要关注：</p><ul>"]

    for result in group.items:
        status = format_status(result)
        date_str = format_local_date(result.expiry_date)
        color = EXPIRED_COLOR if result.is_expired() else REMAINING_COLOR
        lines.append(f"- {result.name}: {status} ({date_str} 到期)")
        html_parts.append(
            f"<li><strong>{_escape_html(result.name)}</strong>: "
            f'<span style="color:{color}">{status}</span> ({date_str} 到期)</li>'
        )

    lines.append("")
    lines.append(f"查看详情: {details_url}")
    html_parts.append(f'</ul><p><a href="{_escape_attr(details_url)}">点击查看详情</a></p>')

    return "\n".join(lines), "".join(html_parts)


def _escape_html(s: str) -> str:
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _escape_attr(s: str) -> str:
    return _escape_html(s).replace('"', "&quot;")
