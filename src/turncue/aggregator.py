"""Readiness aggregator: poll device services until all are ready."""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from pydantic import ValidationError

from turncue._subscription import LocationSubscription
from turncue._timer import PeriodicTimer
from turncue.config import ReadinessConfig
from turncue.exceptions import AggregatorStateError, PermissionPermanentlyDenied, PlatformQueryFailure
from turncue.models.platform import BondedDevice, ConnectivityResult, LocationPermission
from turncue.models.readiness import ReadinessState, Signal
from turncue.platform import PlatformServices
from turncue.state.events import SignalUpdate
from turncue.state.store import ReadinessStore, StateListener

_logger = logging.getLogger(__name__)

T = TypeVar("T")

ReadyCallback = Callable[[], Awaitable[None] | None]


class _CheckFailed(Exception):
    """A check concluded ``False`` for a known reason."""


class ReadinessAggregator:
    """Aggregate four platform checks into a single readiness gate.

    Usage::

        async with ReadinessAggregator(services, on_ready=go_home) as agg:
            agg.subscribe(render)
            await agg.wait_ready()

    Every ``poll_interval`` seconds a tick checks network, location,
    Bluetooth adapter and vest pairing, in that order. Once all four
    are true the timer stops and ``on_ready`` runs after
    ``ready_delay`` seconds. The aggregator is single-use.
    """

    def __init__(
        self,
        services: PlatformServices,
        config: ReadinessConfig | None = None,
        *,
        on_ready: ReadyCallback | None = None,
        store: ReadinessStore | None = None,
    ) -> None:
        self._services = services
        self._config = config if config is not None else ReadinessConfig()
        self._on_ready = on_ready
        self._store = store if store is not None else ReadinessStore()

        self._timer: PeriodicTimer | None = None
        self._subscription: LocationSubscription | None = None
        self._startup_check: asyncio.Task[bool] | None = None
        self._ready_task: asyncio.Task[None] | None = None
        self._permission_prompt: asyncio.Task[Any] | None = None
        self._ready_done = asyncio.Event()

        self._started = False
        self._stopped = False
        self._ready_fired = False
        self._permission_denied_forever = False
        self._subscriptions_opened = 0

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ReadinessAggregator:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

    # ------------------------------------------------------------------
    # Public state
    # ------------------------------------------------------------------

    @property
    def config(self) -> ReadinessConfig:
        return self._config

    @property
    def store(self) -> ReadinessStore:
        return self._store

    @property
    def state(self) -> ReadinessState:
        return self._store.state

    @property
    def is_ready(self) -> bool:
        """Whether the readiness gate has opened (before the grace delay)."""
        return self._ready_fired

    @property
    def is_running(self) -> bool:
        return self._timer is not None and self._timer.is_active

    @property
    def subscription(self) -> LocationSubscription | None:
        return self._subscription

    @property
    def subscriptions_opened(self) -> int:
        """How many location subscriptions this aggregator has opened."""
        return self._subscriptions_opened

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener for readiness snapshot changes."""
        return self._store.subscribe(listener)

    async def wait_ready(self) -> None:
        """Wait until the ``on_ready`` callback has run.

        Also returns once ``stop()`` has run, whether or not the
        callback was reached.
        """
        await self._ready_done.wait()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start polling and run one immediate location check."""
        if self._stopped:
            raise AggregatorStateError("Aggregator was stopped; create a new one")
        if self._started:
            raise AggregatorStateError("Aggregator already started")
        self._started = True

        loop = asyncio.get_running_loop()
        self._timer = PeriodicTimer(self._config.poll_interval, self.tick, name="turncue-readiness-timer")
        self._timer.start()
        self._startup_check = loop.create_task(self.check_location(), name="turncue-startup-location-check")
        _logger.debug("Readiness polling started (interval %.1fs)", self._config.poll_interval)

    async def stop(self) -> None:
        """Release the timer, the location subscription and pending work.

        Safe to call more than once, including from ``on_ready``.
        """
        if self._stopped:
            return
        self._stopped = True

        current = asyncio.current_task()
        timer = self._timer
        if timer is not None:
            timer.cancel()

        self._cancel_subscription()

        pending: list[asyncio.Task[Any]] = []
        for task in (self._startup_check, self._ready_task, self._permission_prompt):
            if task is not None and task is not current and not task.done():
                task.cancel()
                pending.append(task)

        if timer is not None:
            await timer.wait_closed()
        for task in pending:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        # A ready task cancelled before its first step never reaches its
        # finally block.
        if self._ready_task is not current:
            self._ready_done.set()
        _logger.debug("Readiness polling stopped")

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    async def tick(self) -> None:
        """Re-evaluate all four signals and open the gate when all hold.

        Normally driven by the timer. Checks run one after another;
        none of them can raise out of here.
        """
        if self._ready_fired or self._stopped:
            return

        await self._run_check(Signal.NETWORK, self._check_network)
        startup = self._startup_check
        if startup is not None and not startup.done() and startup is not asyncio.current_task():
            # Let the start-up result land first so it cannot overwrite this tick's.
            await asyncio.wait([startup])
        await self.check_location()
        await self._run_check(Signal.BLUETOOTH_ADAPTER, self._check_bluetooth_adapter)
        await self._run_check(Signal.PERIPHERAL_PAIRED, self._check_peripheral_paired)

        if self._ready_fired or self._stopped:
            return
        if self._store.state.is_ready:
            self._open_gate()

    def _open_gate(self) -> None:
        self._ready_fired = True
        if self._timer is not None:
            self._timer.cancel()
        _logger.info("All readiness signals up; proceeding in %.1fs", self._config.ready_delay)
        self._ready_task = asyncio.get_running_loop().create_task(self._proceed(), name="turncue-ready")

    async def _proceed(self) -> None:
        try:
            await asyncio.sleep(self._config.ready_delay)
            callback = self._on_ready
            if callback is None:
                return
            try:
                result = callback()
                if inspect.isawaitable(result):
                    await result
            except Exception:
                _logger.exception("on_ready callback failed")
        finally:
            self._ready_done.set()

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    async def _run_check(self, signal: Signal, check: Callable[[], Awaitable[bool]]) -> bool:
        reason: str | None = None
        try:
            value = await check()
        except PlatformQueryFailure as exc:
            _logger.debug("%s check failed: %s", signal.value, exc, exc_info=True)
            value = False
            reason = "timeout" if exc.timed_out else "query failed"
        except PermissionPermanentlyDenied:
            value = False
            reason = "permission denied forever"
        except _CheckFailed as exc:
            value = False
            reason = str(exc)
        self._store.apply(SignalUpdate(signal=signal, value=value, reason=reason))
        return value

    async def _query(self, capability: str, call: Callable[[], Awaitable[T]], *, timeout: float | None = None) -> T:
        """Await a platform call with a timeout, folding errors into PlatformQueryFailure."""
        limit = timeout if timeout is not None else self._config.check_timeout
        try:
            return await asyncio.wait_for(call(), limit)
        except TimeoutError as exc:
            raise PlatformQueryFailure(
                f"{capability} did not answer within {limit:.1f}s",
                capability=capability,
                timed_out=True,
            ) from exc
        except Exception as exc:
            raise PlatformQueryFailure(f"{capability} failed: {exc}", capability=capability) from exc

    async def _check_network(self) -> bool:
        raw = await self._query("connectivity", self._services.connectivity.check_connectivity)
        result = ConnectivityResult(raw)
        if not result.is_connected:
            raise _CheckFailed("no connection")
        return True

    async def _check_bluetooth_adapter(self) -> bool:
        enabled = await self._query("bluetooth.is_enabled", self._services.bluetooth.is_enabled)
        if enabled is None:
            raise _CheckFailed("adapter state unknown")
        if not enabled:
            raise _CheckFailed("adapter off")
        return True

    async def _check_peripheral_paired(self) -> bool:
        devices = await self._query("bluetooth.bonded_devices", self._services.bluetooth.get_bonded_devices)
        target = self._config.peripheral_name
        try:
            items = list(devices)
        except TypeError as exc:
            raise PlatformQueryFailure(
                f"bluetooth.bonded_devices returned {type(devices).__name__}", capability="bluetooth.bonded_devices"
            ) from exc
        for item in items:
            try:
                device = item if isinstance(item, BondedDevice) else BondedDevice.model_validate(item)
            except ValidationError:
                _logger.debug("Skipping malformed bonded device %r", item, exc_info=True)
                continue
            if device.name == target:
                return True
        raise _CheckFailed(f"{target} not bonded")

    async def check_location(self) -> bool:
        """Run the location procedure and record the ``location`` signal.

        Opens the location subscription when the service is enabled and
        permission is granted. Returns the resulting signal value.
        """
        value = await self._run_check(Signal.LOCATION, self._check_location)
        # After the gate opens the subscription lives until stop().
        if not value and self._config.cancel_subscription_on_location_loss and not self._ready_fired:
            self._cancel_subscription()
        return value

    async def _check_location(self) -> bool:
        location = self._services.location

        enabled = await self._query("location.service_enabled", location.is_location_service_enabled)
        if not enabled:
            raise _CheckFailed("service disabled")

        permission = LocationPermission(await self._query("location.permission", location.check_permission))
        if permission is LocationPermission.DENIED and not self._permission_denied_forever:
            permission = LocationPermission(await self._request_permission())
            if permission is LocationPermission.DENIED:
                raise _CheckFailed("permission denied")

        if permission is LocationPermission.DENIED_FOREVER or (
            self._permission_denied_forever and not permission.is_granted
        ):
            if not self._permission_denied_forever:
                self._permission_denied_forever = True
                _logger.warning("Location permission permanently denied; change it in the system settings")
            raise PermissionPermanentlyDenied("location permission denied forever")

        if not permission.is_granted:
            raise _CheckFailed(f"permission {permission.value}")

        if self._stopped:
            return True
        self._ensure_subscription()
        return True

    async def _request_permission(self) -> Any:
        # One prompt at a time: concurrent location checks share the answer.
        prompt = self._permission_prompt
        if prompt is None or prompt.done():
            prompt = asyncio.get_running_loop().create_task(
                self._query(
                    "location.request_permission",
                    self._services.location.request_permission,
                    timeout=self._config.permission_timeout,
                ),
                name="turncue-permission-prompt",
            )
            prompt.add_done_callback(_retrieve_exception)
            self._permission_prompt = prompt
        return await asyncio.shield(prompt)

    # ------------------------------------------------------------------
    # Location subscription
    # ------------------------------------------------------------------

    def _ensure_subscription(self) -> None:
        # No await between the check and the assignment: concurrent
        # location checks cannot both open a subscription.
        if self._subscription is not None and self._subscription.active:
            return
        try:
            stream = self._services.location.position_stream()
        except Exception as exc:
            raise PlatformQueryFailure(
                f"location.position_stream failed: {exc}", capability="location.position_stream"
            ) from exc
        self._subscription = LocationSubscription(stream)
        self._subscriptions_opened += 1
        _logger.info("Location subscription opened")

    def _cancel_subscription(self) -> None:
        subscription = self._subscription
        self._subscription = None
        if subscription is not None:
            subscription.cancel()


def _retrieve_exception(task: asyncio.Task[Any]) -> None:
    if not task.cancelled():
        task.exception()
