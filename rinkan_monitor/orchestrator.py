"""
Main application orchestrator for the Rinkan Monitor.

This module runs the poll-filter-notify tick on a fixed schedule, carries
the watermark between ticks, and manages startup and graceful shutdown.
"""

import asyncio
import inspect
import signal
import sys
import time
from collections import deque
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional, Union

from .components.alert_formatter import AlertFormatter
from .components.keyword_filter import KeywordFilter
from .components.message_dispatcher import DiscordDispatcher
from .components.product_poller import ProductPoller, SearchAPIError
from .components.query_builder import QueryParameters, build_query_parameters
from .interfaces import (
    IAlertFormatter,
    IMessageDispatcher,
    IProductFilter,
    IProductPoller,
)
from .models.config import Configuration, WatermarkPolicy
from .models.delivery import DeliveryResult
from .models.product import Product
from .models.tick import MonitorState, TickOutcome, TickResult
from .services.config_manager import ConfigurationManager
from .utils.error_handling import (
    ErrorCategory,
    ErrorSeverity,
    get_error_tracker,
    with_error_handling,
)
from .utils.logging import get_logger

TickListener = Callable[[TickResult], Union[None, Awaitable[None]]]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MonitorOrchestrator:
    """
    Coordinates the monitor components and the tick schedule.

    Ticks run strictly one at a time: the loop waits for a tick to finish
    before scheduling the next one, and a tick requested while another is
    in progress is skipped.
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        clock: Callable[[], datetime] = utc_now,
        history_size: int = 50,
    ):
        """
        Initialize the orchestrator.

        Args:
            config_path: Path to configuration file. If None, uses default paths.
            clock: Returns the current timezone-aware time
            history_size: Number of recent tick results to keep
        """
        self.logger = get_logger("orchestrator")
        self.error_tracker = get_error_tracker()

        self.config_path = config_path
        self._clock = clock
        self._running = False
        self._shutdown_event = asyncio.Event()
        self._shutdown_complete = False
        self._tick_in_progress = False

        # Component instances
        self._config: Optional[Configuration] = None
        self._query: Optional[QueryParameters] = None
        self._poller: Optional[IProductPoller] = None
        self._keyword_filter: Optional[IProductFilter] = None
        self._alert_formatter: Optional[IAlertFormatter] = None
        self._dispatcher: Optional[IMessageDispatcher] = None

        # Monitor state
        self._state = MonitorState()
        self._startup_time: Optional[datetime] = None
        self._recent_ticks: Deque[TickResult] = deque(maxlen=history_size)
        self._tick_listeners: List[TickListener] = []
        self._tick_counts: Dict[str, int] = {outcome.value: 0 for outcome in TickOutcome}
        self._total_notified = 0

    @property
    def state(self) -> MonitorState:
        return self._state

    @with_error_handling(
        component="orchestrator",
        category=ErrorCategory.CONFIGURATION,
        severity=ErrorSeverity.CRITICAL,
        fallback_value=False,
        suppress_exceptions=True,
    )
    async def initialize(self) -> bool:
        """
        Load configuration and build all components.

        Returns:
            True if initialization successful, False otherwise.
        """
        self.logger.info("Initializing Rinkan Monitor...")

        config_manager = ConfigurationManager(self.config_path)
        config = config_manager.load_config()
        self.logger.info(
            "Configuration loaded and validated",
            extra={"config_path": config_manager.config_path},
        )

        self.initialize_components(config)

        self._startup_time = self._clock()
        self.logger.info("System initialization completed successfully")
        return True

    def initialize_components(self, config: Configuration) -> None:
        """Build components from a validated configuration."""
        settings = config.monitor

        self._config = config
        self._query = build_query_parameters(config)

        self._poller = ProductPoller(
            self._query,
            timeout=settings.request_timeout,
            pagination_enabled=settings.pagination_enabled,
            max_pages=settings.max_pages,
            api_timezone=settings.api_timezone,
        )
        self._keyword_filter = KeywordFilter(
            config.keywords, search_delegated=self._query.search_delegated
        )
        self._alert_formatter = AlertFormatter()
        self._dispatcher = DiscordDispatcher(
            config.discord_webhook_url, timeout=settings.request_timeout
        )

        self._state = self.initial_state(settings.initial_watermark)

        self.logger.info(
            "Components initialized",
            extra={
                "mode": "search-delegated"
                if self._query.search_delegated
                else "local-filter",
                "tick_interval": settings.tick_interval,
                "pagination_enabled": settings.pagination_enabled,
                "initial_watermark": settings.initial_watermark.value,
                "notification_delay": settings.notification_delay,
            },
        )

    def initial_state(self, policy: WatermarkPolicy) -> MonitorState:
        """Create the startup state for the given watermark policy."""
        if policy == WatermarkPolicy.NOW:
            return MonitorState(watermark=self._clock())
        return MonitorState(watermark=None)

    def add_tick_listener(self, listener: TickListener) -> None:
        """Register a callback that receives every TickResult."""
        self._tick_listeners.append(listener)

    async def run_tick(self, state: MonitorState) -> TickResult:
        """
        Run one poll-filter-notify cycle.

        Never raises: failures are logged and reported through the result,
        and the returned state keeps the previous watermark.

        Args:
            state: State carried over from the previous tick

        Returns:
            TickResult whose ``state`` is the input for the next tick
        """
        current_date = self._clock()

        if self._tick_in_progress:
            self.logger.warning("Tick already in progress, skipping")
            result = TickResult(
                outcome=TickOutcome.SKIPPED,
                started_at=current_date,
                finished_at=current_date,
                state=state,
                watermark_before=state.watermark,
            )
            await self._publish(result)
            return result

        self._tick_in_progress = True
        result = TickResult(
            outcome=TickOutcome.SUCCESS,
            started_at=current_date,
            finished_at=current_date,
            state=state,
            watermark_before=state.watermark,
        )

        try:
            loop = asyncio.get_running_loop()
            poll = await loop.run_in_executor(
                None, self._poller.collect_new_products, state.watermark
            )
            result.pages_fetched = poll.pages_fetched
            result.candidates = len(poll.products)
            result.skipped = poll.skipped
            result.truncated = poll.truncated

            for product in poll.products:
                # Announced on an earlier tick while dated after its start
                if product.product_code in state.ahead_codes:
                    continue

                if not self._keyword_filter.matches(product):
                    continue

                if not product.is_newer_than(state.watermark):
                    continue

                # Space out sends to stay under the webhook rate limit
                if result.matched > 0:
                    await asyncio.sleep(self._config.monitor.notification_delay)

                result.matched += 1
                delivery = await self._notify(product)
                if delivery.success:
                    result.notified += 1
                else:
                    result.failed_notifications.append(product.product_code)

            if poll.truncated:
                self.logger.warning(
                    "max_pages reached before the watermark; older new listings "
                    "were not fetched this tick",
                    extra={
                        "max_pages": self._config.monitor.max_pages,
                        "watermark_before": state.watermark,
                        "oldest_fetched": poll.oldest_created_at,
                    },
                )

            # Listings dated after the tick start stay newer than the
            # watermark, so their codes are carried to the next tick
            next_state = state.advance(current_date)
            result.state = state.advance(
                current_date,
                ahead_codes=[
                    product.product_code
                    for product in poll.products
                    if product.is_newer_than(next_state.watermark)
                ],
            )

        except Exception as e:
            result.outcome = TickOutcome.FAILED
            result.error_message = str(e)
            result.state = state

            status_code = getattr(e, "status_code", None)
            self.logger.error(
                f"Monitor error: {e}",
                extra={"status_code": status_code},
                exc_info=not isinstance(e, SearchAPIError),
            )
            self.error_tracker.record_error(
                component="orchestrator",
                category=ErrorCategory.NETWORK
                if isinstance(e, SearchAPIError)
                else ErrorCategory.SYSTEM,
                severity=ErrorSeverity.MEDIUM,
                message=f"Tick failed: {e}",
                exception=e,
                context={"status_code": status_code},
            )

        finally:
            self._tick_in_progress = False
            result.finished_at = self._clock()

        await self._publish(result)
        return result

    async def _notify(self, product: Product) -> DeliveryResult:
        """Format and send one alert; failures never escape."""
        try:
            alert = self._alert_formatter.format_alert(product)
            loop = asyncio.get_running_loop()
            delivery = await loop.run_in_executor(
                None, self._dispatcher.send_alert, alert
            )
        except Exception as e:
            delivery = DeliveryResult(
                success=False,
                delivery_time=utc_now(),
                error_message=f"Failed to deliver alert: {e}"[:500],
            )

        if delivery.success:
            self.logger.info(
                "Alert sent successfully",
                extra={
                    "product_code": product.product_code,
                    "model_name": product.model_name,
                },
            )
        else:
            self.logger.error(
                f"Webhook error: {delivery.error_message}",
                extra={
                    "product_code": product.product_code,
                    "status_code": delivery.status_code,
                },
            )
            self.error_tracker.record_error(
                component="message_dispatcher",
                category=ErrorCategory.MESSAGE_DELIVERY,
                severity=ErrorSeverity.LOW,
                message=delivery.error_message or "Unknown delivery error",
                context={"product_code": product.product_code},
            )

        return delivery

    async def _publish(self, result: TickResult) -> None:
        """Record a tick result and hand it to listeners."""
        self._recent_ticks.append(result)
        self._tick_counts[result.outcome.value] += 1
        self._total_notified += result.notified

        if result.outcome == TickOutcome.SUCCESS:
            self.logger.info("Tick completed", extra=result.to_dict())
        elif result.outcome == TickOutcome.FAILED:
            self.logger.warning("Tick failed", extra=result.to_dict())

        for listener in self._tick_listeners:
            try:
                outcome = listener(result)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as e:
                self.logger.error(f"Tick listener failed: {e}", exc_info=True)

    async def start(self) -> None:
        """Run ticks at a fixed rate until shutdown."""
        if self._running:
            self.logger.warning("System is already running")
            return

        self._running = True
        tick_interval = self._config.monitor.tick_interval
        self.logger.info(
            "Starting monitor loop", extra={"tick_interval": tick_interval}
        )

        try:
            while self._running and not self._shutdown_event.is_set():
                tick_started = time.monotonic()

                result = await self.run_tick(self._state)
                self._state = result.state

                # Fixed rate: subtract the time the tick itself took
                elapsed = time.monotonic() - tick_started
                wait_time = max(0.0, tick_interval - elapsed)

                try:
                    await asyncio.wait_for(
                        self._shutdown_event.wait(), timeout=wait_time
                    )
                except asyncio.TimeoutError:
                    pass
        finally:
            self._running = False

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()
        if sys.platform != "win32":
            for signum in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(signum, self._on_signal, signum)
        else:
            signal.signal(
                signal.SIGINT,
                lambda s, frame: loop.call_soon_threadsafe(self._on_signal, s),
            )

    def _on_signal(self, signum: int) -> None:
        self.logger.info(
            "Received shutdown signal, initiating graceful shutdown",
            extra={"signal": signum},
        )
        # The loop in start() exits and run() then calls shutdown()
        self._running = False
        self._shutdown_event.set()

    async def shutdown(self) -> None:
        """Stop the tick loop after the current tick finishes."""
        if self._shutdown_complete:
            return
        self._shutdown_complete = True

        self.logger.info("Initiating graceful shutdown...")
        self._running = False
        self._shutdown_event.set()

        uptime = self._clock() - self._startup_time if self._startup_time else None
        self.logger.info(
            f"System shutdown complete. Uptime: {uptime}",
            extra={"tick_counts": self._tick_counts.copy()},
        )

    def get_system_status(self) -> Dict[str, Any]:
        """Get current system status information."""
        last_tick = self._recent_ticks[-1] if self._recent_ticks else None
        return {
            "running": self._running,
            "startup_time": self._startup_time.isoformat()
            if self._startup_time
            else None,
            "watermark": self._state.watermark.isoformat()
            if self._state.watermark
            else None,
            "tick_in_progress": self._tick_in_progress,
            "tick_counts": self._tick_counts.copy(),
            "total_notified": self._total_notified,
            "last_tick": last_tick.to_dict() if last_tick else None,
            "error_stats": self.error_tracker.get_error_stats(),
            "config_loaded": self._config is not None,
        }

    async def run(self) -> bool:
        """
        Run the complete application lifecycle.

        Returns:
            False if initialization failed, True after a clean shutdown.
        """
        try:
            if not await self.initialize():
                self.logger.error("System initialization failed")
                return False

            self._setup_signal_handlers()
            await self.start()
            return True

        finally:
            await self.shutdown()
