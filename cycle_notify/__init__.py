"""Daily expiry reminders for cycle items."""

__all__ = [
    "config",
    "models",
    "supabase_client",
    "expiry",
    "alerts",
    "mailer",
    "email_formatter",
    "orchestrator",
]
