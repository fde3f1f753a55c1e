import logging

from insightdesk.core.config import settings

# Category name -> settings flag that switches that category's breadcrumbs.
_CATEGORY_SWITCHES = {
    "identity": "FLOW_LOGS_IDENTITY_ENABLED",
    "insight": "FLOW_LOGS_INSIGHT_ENABLED",
}


def flow_logs_enabled(category: str | None = None) -> bool:
    if not settings.FLOW_LOGS_ENABLED:
        return False
    switch = _CATEGORY_SWITCHES.get(category or "")
    return True if switch is None else bool(getattr(settings, switch))


def flow_info(
    logger: logging.Logger,
    msg: str,
    *args,
    category: str | None = None,
    **kwargs,
) -> None:
    """Info-level breadcrumb that can be muted per category from settings."""
    if not flow_logs_enabled(category):
        return
    logger.info(msg, *args, **kwargs)
