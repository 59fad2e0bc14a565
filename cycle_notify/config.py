from __future__ import annotations

import os
from dataclasses import dataclass

# --------------------------------
# 配置项

# 提醒窗口（剩余天数，含两端）
ALERT_WINDOW_MIN_DAYS = -7
ALERT_WINDOW_MAX_DAYS = 3

# Supabase 表名
DEFAULT_ITEMS_TABLE = "cycle_items"

# 分页大小
USERS_PER_PAGE = 50
USERS_MAX_PAGES = 200
ITEMS_PAGE_SIZE = 1000

# 发件人（必须是已验证的域名邮箱）
DEFAULT_FROM_EMAIL = "notify@gimago.cn"
DEFAULT_FROM_NAME = "Cycle"

# 邮件中的详情链接
DEFAULT_DETAILS_URL = "https://tools.gimago.cn/cycle"
# --------------------------------


@dataclass
class Settings:
    supabase_url: str | None
    supabase_service_key: str | None
    resend_api_key: str | None
    brevo_api_key: str | None
    sendgrid_api_key: str | None
    from_email: str = DEFAULT_FROM_EMAIL
    from_name: str = DEFAULT_FROM_NAME
    details_url: str = DEFAULT_DETAILS_URL
    items_table: str = DEFAULT_ITEMS_TABLE

    @staticmethod
    def from_env(env: dict[str, str] | None = None) -> "Settings":
        """Read settings from the environment.

        Credentials are not validated here; a missing Supabase credential
        surfaces as an AuthenticationError on the first privileged call and a
        missing mail key as a MailError when the first email is due.
        """
        e = env if env is not None else os.environ

        def optional(name: str) -> str | None:
            value = e.get(name)
            if value is None or not value.strip():
                return None
            return value.strip()

        def optional_with_default(name: str, default: str) -> str:
            return optional(name) or default

        return Settings(
            supabase_url=optional("SUPABASE_URL"),
            supabase_service_key=optional("SUPABASE_SERVICE_KEY"),
            resend_api_key=optional("RESEND_API_KEY"),
            brevo_api_key=optional("BREVO_API_KEY"),
            sendgrid_api_key=optional("SENDGRID_API_KEY"),
            from_email=optional_with_default("FROM_EMAIL", DEFAULT_FROM_EMAIL),
            from_name=optional_with_default("FROM_NAME", DEFAULT_FROM_NAME),
            details_url=optional_with_default("DETAILS_URL", DEFAULT_DETAILS_URL),
            items_table=optional_with_default("CYCLE_ITEMS_TABLE", DEFAULT_ITEMS_TABLE),
        )
