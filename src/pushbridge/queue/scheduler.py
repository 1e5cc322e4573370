"""Scheduler: reconciles countdown timers against the message store.

The store is the source of truth. Every tick the timer set is diffed
against it: timers for vanished keys are cancelled, missing timers are
armed from each message's due time. If a tick arrives noticeably later
than the cadence allows, every timer is thrown away and rebuilt, since the
loop (and the timers) evidently did not run on time.
"""

import asyncio
import logging
import time
from collections.abc import Callable

from pushbridge.queue.store import MessageStore
from pushbridge.queue.timers import TimerSet
from pushbridge.queue.types import Notifier, QueuedMessage

logger = logging.getLogger(__name__)

DEFAULT_UPDATE_INTERVAL = 5.0
DEFAULT_DRIFT_TOLERANCE = 0.1

# Heartbeat every 60 ticks (~5 min at 5s interval)
HEARTBEAT_INTERVAL = 60


class Scheduler:
    """Owns the timer set and delivers messages when their timers fire.

    Example:
        store = MessageStore(QueuePersistence(Path("message_db.json")))
        scheduler = Scheduler(store, PushoverNotifier(token, user))
        await scheduler.start()
    """

    def __init__(
        self,
        store: MessageStore,
        notifier: Notifier,
        update_interval: float = DEFAULT_UPDATE_INTERVAL,
        drift_tolerance: float = DEFAULT_DRIFT_TOLERANCE,
        clock: Callable[[], float] = time.time,
    ):
        self._store = store
        self._notifier = notifier
        self._update_interval = update_interval
        self._drift_tolerance = drift_tolerance
        self._clock = clock
        self._timers = TimerSet()
        self._last_tick = clock()
        self._running = False
        self._task: asyncio.Task | None = None
        self._deliveries: set[asyncio.Task] = set()
        self._tick_count = 0

        # A replaced entry must never be delivered by its old timer.
        store.on_upsert(self._timers.cancel)

    @property
    def store(self) -> MessageStore:
        return self._store

    @property
    def timers(self) -> TimerSet:
        return self._timers

    @property
    def last_tick(self) -> float:
        return self._last_tick

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._last_tick = self._clock()
        logger.info(
            "scheduler_started",
            extra={
                "scheduler.update_interval": self._update_interval,
                "queue.count": len(self._store),
            },
        )
        self._task = asyncio.create_task(self._run_loop())

    async def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._timers.cancel_all()
        await self.drain()
        logger.info("scheduler_stopped")

    async def drain(self) -> None:
        """Wait for in-flight deliveries to finish."""
        while self._deliveries:
            await asyncio.gather(*list(self._deliveries), return_exceptions=True)

    async def _run_loop(self) -> None:
        while self._running:
            self._tick_count += 1
            if self._tick_count % HEARTBEAT_INTERVAL == 0:
                logger.info(
                    "scheduler_heartbeat",
                    extra={
                        "scheduler.tick_count": self._tick_count,
                        "queue.count": len(self._store),
                        "scheduler.timer_count": len(self._timers),
                    },
                )
            self.tick()
            await asyncio.sleep(self._update_interval)

    def tick(self) -> None:
        """Run one reconciliation pass. Never raises."""
        try:
            self._reconcile()
        except Exception as e:
            logger.error("reconcile_error", extra={"error.message": str(e)})

    def _reconcile(self) -> None:
        now = self._clock()
        if now - self._last_tick > self._update_interval + self._drift_tolerance:
            cancelled = self._timers.cancel_all()
            logger.warning(
                "timers_drifted",
                extra={
                    "scheduler.elapsed": round(now - self._last_tick, 3),
                    "scheduler.cancelled": cancelled,
                },
            )

        try:
            messages = self._store.snapshot()
            store_keys = set(messages)
            timer_keys = self._timers.keys()

            for key in timer_keys - store_keys:
                self._timers.cancel(key)

            for key in store_keys - timer_keys:
                self._arm(messages[key])
        finally:
            self._last_tick = self._clock()

    def _arm(self, message: QueuedMessage) -> None:
        # One unschedulable record must not keep the rest from being armed
        try:
            delay = message.seconds_until_due(self._clock())
            self._timers.schedule(message.key, delay, self._make_callback(message))
        except Exception as e:
            logger.error(
                "timer_arm_failed",
                extra={"queue.key": message.key, "error.message": str(e)},
            )
            return
        logger.debug(f"Timer armed for {message.key} in {delay:.3f}s")

    def _make_callback(self, message: QueuedMessage) -> Callable[[], None]:
        def fire() -> None:
            self._fire(message)

        return fire

    def _fire(self, message: QueuedMessage) -> None:
        key = message.key
        logger.info(
            "message_due",
            extra={
                "queue.key": key,
                "queue.message_preview": message.message[:50],
            },
        )
        try:
            task = asyncio.get_running_loop().create_task(self._deliver(message))
            self._deliveries.add(task)
            task.add_done_callback(self._deliveries.discard)
        except Exception as e:
            logger.error(
                "timer_fire_error",
                extra={"queue.key": key, "error.message": str(e)},
            )
        finally:
            # Removed whatever the delivery outcome; there is no retry.
            self._timers.discard(key)
            self._store.remove(key)

    async def _deliver(self, message: QueuedMessage) -> None:
        try:
            delivered = await self._notifier.deliver(message)
        except Exception as e:
            logger.error(
                "notification_failed",
                extra={"queue.key": message.key, "error.message": str(e)},
            )
            return
        if delivered:
            logger.info("notification_sent", extra={"queue.key": message.key})
        else:
            logger.warning("notification_failed", extra={"queue.key": message.key})
