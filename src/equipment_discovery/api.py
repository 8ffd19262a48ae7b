"""
HTTP API and service entry point.

Routes (all JSON):
    POST /api/network-discovery/scan          start a background scan
    POST /api/network-discovery/scan/{ip}     discover one address
    GET  /api/network-discovery/test-snmp/{ip}
    GET  /api/network-discovery/status
    GET  /api/health
"""

from __future__ import annotations

import asyncio
import logging
import signal
from pathlib import Path
from typing import Optional

from aiohttp import web

from .config import DiscoveryConfig, load_config, load_config_from_env
from .discovery_service import DiscoveryService
from .exceptions import InvalidRangeError
from .scheduler import ScanScheduler

logger = logging.getLogger(__name__)

API_PREFIX = "/api/network-discovery"


class DiscoveryApi:
    """aiohttp handlers over a DiscoveryService."""

    def __init__(
        self,
        service: DiscoveryService,
        scheduler: Optional[ScanScheduler] = None,
    ):
        self.service = service
        self.scheduler = scheduler

    def add_routes(self, app: web.Application) -> None:
        app.router.add_post(f"{API_PREFIX}/scan", self._handle_start_scan)
        app.router.add_post(f"{API_PREFIX}/scan/{{ip_address}}", self._handle_scan_one)
        app.router.add_get(f"{API_PREFIX}/test-snmp/{{ip_address}}", self._handle_test_snmp)
        app.router.add_get(f"{API_PREFIX}/status", self._handle_status)
        app.router.add_get("/api/health", self._handle_health)

    async def _handle_start_scan(self, request: web.Request) -> web.Response:
        """Handle POST /api/network-discovery/scan."""
        try:
            self.service.start_scan(triggered_by="api")
        except Exception as e:
            logger.error(f"Failed to start network discovery: {e}")
            return web.json_response(
                {"message": f"Failed to start network discovery: {e}", "success": False},
                status=400,
            )
        return web.json_response({"message": "Network discovery started", "success": True})

    async def _handle_scan_one(self, request: web.Request) -> web.Response:
        """Handle POST /api/network-discovery/scan/{ip_address}."""
        ip_address = request.match_info["ip_address"]
        try:
            equipment = await self.service.scan_one(ip_address)
        except InvalidRangeError as e:
            return web.json_response(
                {"status": "error", "message": str(e)},
                status=400,
            )
        except Exception as e:
            logger.error(f"Single device scan of {ip_address} failed: {e}")
            return web.json_response(
                {"status": "error", "message": str(e)},
                status=400,
            )

        if equipment is None:
            return web.json_response(
                {"status": "error", "message": f"No SNMP response from {ip_address}"},
                status=404,
            )
        return web.json_response(equipment.to_dict())

    async def _handle_test_snmp(self, request: web.Request) -> web.Response:
        """Handle GET /api/network-discovery/test-snmp/{ip_address}."""
        ip_address = request.match_info["ip_address"]
        try:
            reachable = await self.service.test_connectivity(ip_address)
        except InvalidRangeError as e:
            return web.json_response(
                {"status": "error", "message": str(e)},
                status=400,
            )
        return web.json_response({"ipAddress": ip_address, "reachable": reachable})

    async def _handle_status(self, request: web.Request) -> web.Response:
        """Handle GET /api/network-discovery/status."""
        if self.scheduler is not None:
            status = self.scheduler.status()
        else:
            status = self.service.get_status()
        return web.json_response(status.to_dict())

    async def _handle_health(self, request: web.Request) -> web.Response:
        """Handle GET /api/health."""
        report = self.service.last_report
        return web.json_response({
            "status": "ok",
            "service": "equipment-discovery",
            "equipment": len(self.service.store.list_equipment()),
            "scheduler_running": bool(self.scheduler and self.scheduler.running),
            "last_scan": report.started_at.isoformat() if report else None,
            "last_scan_devices": report.devices_found if report else None,
        })


def create_app(
    service: DiscoveryService,
    scheduler: Optional[ScanScheduler] = None,
) -> web.Application:
    """Build the aiohttp application."""
    app = web.Application()
    DiscoveryApi(service, scheduler).add_routes(app)
    return app


async def run_service(config: DiscoveryConfig, shutdown_event: asyncio.Event) -> None:
    """Run API server and scheduler until shutdown_event is set."""
    service = DiscoveryService(config)
    scheduler = ScanScheduler(
        service,
        interval_seconds=config.scan_interval_seconds,
    )

    runner = web.AppRunner(create_app(service, scheduler))
    await runner.setup()
    site = web.TCPSite(runner, config.api_host, config.api_port)
    await site.start()
    logger.info(f"API server started on {config.api_host}:{config.api_port}")

    scheduler.start()
    try:
        await shutdown_event.wait()
    finally:
        await scheduler.stop()
        await runner.cleanup()
        logger.info("Equipment discovery service stopped")


def main():
    """Entry point for equipment-discovery service."""
    import argparse

    parser = argparse.ArgumentParser(description="Equipment Discovery Service")
    parser.add_argument("--config", type=str, help="Path to config file")
    parser.add_argument("--host", type=str, help="API host")
    parser.add_argument("--port", type=int, help="API port")
    parser.add_argument("--log-level", type=str, help="Log level")
    args = parser.parse_args()

    # Load configuration
    if args.config:
        config = load_config(Path(args.config))
    else:
        config = load_config_from_env()

    # Override with CLI args
    if args.host:
        config.api_host = args.host
    if args.port:
        config.api_port = args.port
    if args.log_level:
        config.log_level = args.log_level

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info(
        f"Starting Equipment Discovery Service "
        f"(subnets={config.subnet_ranges}, enabled={config.enabled})"
    )

    # Handle signals
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    shutdown_event = asyncio.Event()

    def signal_handler():
        logger.info("Received shutdown signal")
        shutdown_event.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, signal_handler)

    try:
        loop.run_until_complete(run_service(config, shutdown_event))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        loop.close()


if __name__ == "__main__":
    main()
