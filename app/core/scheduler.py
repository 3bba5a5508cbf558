from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.jobstores.redis import RedisJobStore
from app.config.constants import CLOSE_SLOTS_INTERVAL_MINUTES, REMINDER_DAY_OF_WEEK, REMINDER_HOUR_UTC
from app.core.config import settings
import logging
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


async def close_past_slots_job():
    """
    Periodic job closing slots whose start is long past.
    Runs every CLOSE_SLOTS_INTERVAL_MINUTES.
    """
    from app.db.session import AsyncSessionLocal
    from app.services.event_service import EventService

    try:
        async with AsyncSessionLocal() as session:
            closed = await EventService(session).close_past_slots()
            logger.info(f"close_past_slots_job closed {closed} slots")
    except Exception as e:
        logger.exception(f"close_past_slots_job failed: {e}")


async def weekend_reminder_job():
    """Friday morning reminder fan-out to this weekend's confirmed attendees."""
    from app.services.reminder_service import send_weekend_reminders_job

    try:
        result = await send_weekend_reminders_job()
        logger.info(f"weekend_reminder_job result: {result}")
    except Exception as e:
        logger.exception(f"weekend_reminder_job failed: {e}")

# Configure Redis Job Store
redis_url_str = str(settings.REDIS_URL)
parsed_redis = urlparse(redis_url_str)

# RedisJobStore initiates Redis(db=..., **kwargs), so pass the URL parts as kwargs
redis_kwargs = {
    'host': parsed_redis.hostname or 'localhost',
    'port': parsed_redis.port or 6379,
    'password': parsed_redis.password,
}

# DB is typically path '/0' -> 0
db_val = 0
if parsed_redis.path and parsed_redis.path != '/':
    try:
        db_val = int(parsed_redis.path.lstrip('/'))
    except ValueError:
        pass

jobstores = {
    'default': RedisJobStore(
        jobs_key='weekend_match:jobs',
        run_times_key='weekend_match:run_times',
        db=db_val,
        **redis_kwargs
    )
}

scheduler = AsyncIOScheduler(jobstores=jobstores, timezone="UTC")

async def start_scheduler():
    """Start the scheduler."""
    if not scheduler.running:
        scheduler.add_job(
            weekend_reminder_job,
            'cron',
            day_of_week=REMINDER_DAY_OF_WEEK,
            hour=REMINDER_HOUR_UTC,
            minute=0,
            id='weekend_reminder_job',
            replace_existing=True
        )
        scheduler.add_job(
            close_past_slots_job,
            'interval',
            minutes=CLOSE_SLOTS_INTERVAL_MINUTES,
            id='close_past_slots_job',
            replace_existing=True
        )

        scheduler.start()
        logger.info("APScheduler started.")

async def shutdown_scheduler():
    """Shutdown the scheduler."""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("APScheduler shut down.")
