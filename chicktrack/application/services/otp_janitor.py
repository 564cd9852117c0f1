import asyncio
import logging
from typing import Callable, ContextManager

from ..ports.otp_store import OtpStore

logger = logging.getLogger(__name__)


class OtpJanitor:
    """Deletes expired codes. Verification already checks expiry lazily."""

    def __init__(self, store_scope: Callable[[], ContextManager[OtpStore]], interval_seconds: int):
        self.store_scope = store_scope
        self.interval_seconds = interval_seconds

    def run_once(self) -> int:
        with self.store_scope() as store:
            removed = store.purge_expired()
        if removed:
            logger.info(f"Purged {removed} expired OTP code(s)")
        return removed

    async def run_forever(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await asyncio.to_thread(self.run_once)
            except Exception:
                logger.exception("OTP janitor pass failed")
