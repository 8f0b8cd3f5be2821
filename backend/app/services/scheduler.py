"""Scheduler service for cron jobs using APScheduler."""
import logging
import os
import multiprocessing
from datetime import date
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
import redis.asyncio as redis

from app.config import settings
from app.database import AsyncSessionLocal
from app.services.currency import get_currency_normalizer
from app.services.email_service import EmailService
from app.services.payouts import CreatorPayoutCalculator, PayoutRun, month_date_range
from app.services.revenue import RevenueAggregator
from app.services.shopify_client import ShopifyOrderSource

logger = logging.getLogger(__name__)

# Initialize scheduler
scheduler = AsyncIOScheduler()

# Redis client for distributed locking
redis_client = None

# Only one uvicorn worker runs the cron jobs
SCHEDULER_PROCESSES = ("MainProcess", "SpawnProcess-1")

MONTHLY_PAYOUTS_LOCK_TIMEOUT = 3600


async def get_redis_client():
    """Get or create Redis client."""
    global redis_client
    if redis_client is None:
        redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)
    return redis_client


async def acquire_lock(lock_name: str, timeout: int = 300) -> bool:
    """
    Acquire a distributed lock using Redis.

    Args:
        lock_name: Name of the lock
        timeout: Lock timeout in seconds

    Returns:
        True if lock acquired, False otherwise
    """
    try:
        client = await get_redis_client()
        # SET NX EX: only set if not exists, with expiry
        result = await client.set(f"posterhub:lock:{lock_name}", "1", nx=True, ex=timeout)
        return result is not None
    except Exception as e:
        logger.error(f"Failed to acquire lock {lock_name}: {e}")
        return False


async def release_lock(lock_name: str):
    """Release a distributed lock."""
    try:
        client = await get_redis_client()
        await client.delete(f"posterhub:lock:{lock_name}")
    except Exception as e:
        logger.error(f"Failed to release lock {lock_name}: {e}")


async def run_monthly_payouts(today: Optional[date] = None) -> Optional[PayoutRun]:
    """Record last month's payouts for every approved creator.

    Returns None when another instance holds the lock or the run fails.
    """
    lock_name = "monthly_payouts"

    if not await acquire_lock(lock_name, timeout=MONTHLY_PAYOUTS_LOCK_TIMEOUT):
        logger.info(f"Skipping {lock_name} - another instance is running")
        return None

    try:
        period_start, period_end = month_date_range(today=today)
        logger.info(f"Running monthly payouts job for {period_start} to {period_end}")
        async with AsyncSessionLocal() as session:
            calculator = CreatorPayoutCalculator(
                session,
                RevenueAggregator(ShopifyOrderSource()),
                get_currency_normalizer(),
                notifier=EmailService.send_payout_created_email,
            )
            run = await calculator.run(period_start, period_end)
        logger.info(f"Monthly payouts job created {run.created_count} payouts")
        return run

    except Exception as e:
        logger.error(f"Error in run_monthly_payouts: {e}")
        return None
    finally:
        await release_lock(lock_name)


def start_scheduler():
    """Start the APScheduler with the monthly payout job."""
    if not settings.PAYOUT_SCHEDULER_ENABLED:
        logger.info("Payout scheduler disabled")
        return

    current_pid = os.getpid()
    current_process_name = multiprocessing.current_process().name
    if current_process_name not in SCHEDULER_PROCESSES:
        logger.info(f"Skipping scheduler on {current_process_name} (PID: {current_pid})")
        return

    # 02:00 UTC on the first of the month, after the previous month's orders settle
    scheduler.add_job(
        run_monthly_payouts,
        trigger=CronTrigger(day=1, hour=2, minute=0),
        id="run_monthly_payouts",
        name="Run monthly creator payouts",
        replace_existing=True
    )

    scheduler.start()
    logger.info(f"Scheduler started on {current_process_name} (PID: {current_pid})")


def stop_scheduler():
    """Stop the APScheduler."""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler stopped")
    else:
        logger.info("Scheduler was not running")
