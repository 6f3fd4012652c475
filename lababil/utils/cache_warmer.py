"""Startup warm-up of the dashboard state"""
import logging

logger = logging.getLogger(__name__)


async def warm_state(context) -> None:
    """Migrate leftover local data, then load every collection"""
    if not context.redis.ping():
        logger.warning("Redis not reachable; offline fallback unavailable")

    await context.migration.run_if_needed()
    await context.state.load_all()

    state = context.state
    logger.info(
        "Warmed state with %d products, %d sales, %d purchases, %d categories",
        len(state.products), len(state.sales), len(state.purchases), len(state.categories),
    )

    for alert in context.reports.low_stock():
        logger.warning("Low stock alert: %s (Stock: %d)", alert.name, alert.stock)
