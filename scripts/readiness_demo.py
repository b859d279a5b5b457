#!/usr/bin/env python3
"""Run the readiness aggregator against simulated device services.

Each simulated service comes up after its own delay, so you can watch
the status tiles turn green one by one until the aggregator proceeds.

Usage
-----
::

    python scripts/readiness_demo.py
    python scripts/readiness_demo.py --http-probe --debug
    python scripts/readiness_demo.py --pair-after 6 --peripheral TURN_CUE

Options::

    --network-after S     Seconds until the simulated network is up
    --location-after S    Seconds until location service is enabled
    --bluetooth-after S   Seconds until the adapter is switched on
    --pair-after S        Seconds until the vest shows up as bonded
    --deny-forever        Simulate a permanently denied location permission
    --http-probe          Use the real HTTP connectivity probe
    --peripheral NAME     Bonded name of the simulated vest
    --timeout S           Give up after S seconds
    --debug               Enable DEBUG logging
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from collections.abc import AsyncIterator
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from turncue import (  # noqa: E402
    BondedDevice,
    ConnectivityProvider,
    ConnectivityResult,
    HttpConnectivityProbe,
    LocationPermission,
    PlatformServices,
    Position,
    ReadinessAggregator,
    ReadinessConfig,
    ReadinessState,
    Signal,
)


class SimulatedDevice:
    """Connectivity, location and Bluetooth providers driven by a clock."""

    def __init__(self, args: argparse.Namespace) -> None:
        self._t0 = time.monotonic()
        self._args = args
        self.prompts = 0

    def _after(self, seconds: float) -> bool:
        return time.monotonic() - self._t0 >= seconds

    async def check_connectivity(self) -> ConnectivityResult:
        return ConnectivityResult.WIFI if self._after(self._args.network_after) else ConnectivityResult.NONE

    async def is_location_service_enabled(self) -> bool:
        return self._after(self._args.location_after)

    async def check_permission(self) -> LocationPermission:
        if self._args.deny_forever:
            return LocationPermission.DENIED_FOREVER
        return LocationPermission.WHILE_IN_USE if self.prompts else LocationPermission.DENIED

    async def request_permission(self) -> LocationPermission:
        self.prompts += 1
        print("  [prompt] location permission requested -> granted")
        return LocationPermission.WHILE_IN_USE

    def position_stream(self) -> AsyncIterator[Position]:
        return self._positions()

    async def _positions(self) -> AsyncIterator[Position]:
        lat = 52.3676
        while True:
            yield Position(latitude=lat, longitude=4.9041, accuracy=8.0)
            lat += 0.0001
            await asyncio.sleep(1.0)

    async def is_enabled(self) -> bool | None:
        return self._after(self._args.bluetooth_after)

    async def get_bonded_devices(self) -> list[BondedDevice]:
        devices = [BondedDevice(name="Headphones", address="AA:BB:CC:00:00:01")]
        if self._after(self._args.pair_after):
            devices.append(BondedDevice(name=self._args.peripheral, address="AA:BB:CC:00:00:02"))
        return devices


def _render(state: ReadinessState) -> None:
    print("-" * 44)
    for title, ok in state.status_lines():
        print(f"  {title:<32} {'OK' if ok else '--'}")


async def run(args: argparse.Namespace) -> int:
    config = ReadinessConfig.from_env()
    device = SimulatedDevice(args)
    proceeded = asyncio.Event()

    def go_home() -> None:
        print("=> proceeding to home screen")
        proceeded.set()

    async def _run_with(connectivity: ConnectivityProvider) -> int:
        services = PlatformServices(connectivity=connectivity, location=device, bluetooth=device)
        async with ReadinessAggregator(services, config, on_ready=go_home) as agg:
            agg.subscribe(_render)
            _render(agg.state)
            try:
                await asyncio.wait_for(proceeded.wait(), args.timeout)
            except TimeoutError:
                print(f"Not ready after {args.timeout:.0f}s:")
                for signal in Signal:
                    update = agg.store.last_update(signal)
                    reason = update.reason if update is not None and update.reason else "ok"
                    print(f"  {signal.value:<20} {reason}")
                return 1
            subscription = agg.subscription
            if subscription is not None:
                print(f"Location updates received: {subscription.updates}")
        return 0

    if args.http_probe:
        async with HttpConnectivityProbe(config) as probe:
            return await _run_with(probe)
    return await _run_with(device)


def main() -> None:
    parser = argparse.ArgumentParser(description="Simulate the TurnCue start-up readiness checks")
    parser.add_argument("--network-after", type=float, default=1.0)
    parser.add_argument("--location-after", type=float, default=3.0)
    parser.add_argument("--bluetooth-after", type=float, default=4.0)
    parser.add_argument("--pair-after", type=float, default=6.0)
    parser.add_argument("--deny-forever", action="store_true")
    parser.add_argument("--http-probe", action="store_true")
    parser.add_argument("--peripheral", default="TURN_CUE")
    parser.add_argument("--timeout", type=float, default=30.0)
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args()

    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
