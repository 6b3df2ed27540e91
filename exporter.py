#!/usr/bin/env python3
"""
Pinout Exporter - Prometheus exporter for Raspberry Pi GPIO pinout status.

Supports:
- raspi-gpio based pin level / function select / pull collection
- Central config server with local fallback
- Dynamic config reload via HTTP endpoint
- Prometheus metrics exposition
"""
import json
import logging
import os
import socket
import time
import threading
from http.server import HTTPServer, BaseHTTPRequestHandler
from threading import Lock
from datetime import datetime
from typing import Dict, Iterable, List

from prometheus_client import REGISTRY, start_http_server
from prometheus_client.core import GaugeMetricFamily

from config_loader import ConfigLoader
from pinout import BaseCollector, MetricPoint, build_collector


# Global state
current_config = None
current_collector = None
config_loader_instance = None
reload_flag = False

# Health check state
start_time = None
last_collection_time = None
last_collection_error = None

# Thread-safety locks
config_lock = Lock()
# One raspi-gpio invocation at a time
collect_lock = Lock()

# Setup logging
logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def points_to_families(points: Iterable[MetricPoint], hostname: str) -> List[GaugeMetricFamily]:
    """
    Convert accumulated points to Prometheus gauge families.

    Each numeric field becomes a gauge named <measurement>_<field>. Tags and
    string fields become labels. Labels missing on a point are left empty so
    every sample of a family shares the same label names.

    Args:
        points: Points emitted during one collection cycle
        hostname: Value of the hostname label

    Returns:
        List of gauge families, one per measurement/field pair
    """
    samples: Dict[str, List] = {}
    label_names: Dict[str, set] = {}

    for point in points:
        labels = dict(point.tags)
        for key, value in point.fields.items():
            if not _is_number(value):
                labels[key] = str(value)
        labels["hostname"] = hostname

        for key, value in point.fields.items():
            if not _is_number(value):
                continue
            name = f"{point.measurement}_{key}"
            samples.setdefault(name, []).append((labels, value))
            label_names.setdefault(name, set()).update(labels)

    families = []
    for name, entries in samples.items():
        names = sorted(label_names[name])
        gauge = GaugeMetricFamily(name, f"Metric: {name}", labels=names)
        for labels, value in entries:
            gauge.add_metric([labels.get(n, "") for n in names], value)
        families.append(gauge)
    return families


class OnDemandCollector:
    """
    Custom Prometheus collector that collects metrics on-demand.
    Every scrape of /metrics runs one collection cycle.
    """

    def __init__(self):
        self.hostname = socket.gethostname()

    def describe(self):
        """Keep REGISTRY.register() from running a collection cycle"""
        return []

    def collect(self):
        """Called by Prometheus when scraping /metrics"""
        global last_collection_time, last_collection_error

        collector = current_collector
        if not collector:
            return

        with collect_lock:
            points = collector.safe_gather()
            error = collector.last_error

        if error is not None:
            last_collection_error = str(error)
            return

        last_collection_time = datetime.now()
        last_collection_error = None

        if not points:
            logger.warning("No pins reported by raspi-gpio")
            return

        yield from points_to_families(points, self.hostname)


class CombinedHandler(BaseHTTPRequestHandler):
    """
    Management API.
    GET  /health - Collector status
    POST /reload - Trigger a config reload
    """

    def do_GET(self):
        if self.path == '/health':
            self._handle_health()
        else:
            self._not_found()

    def do_POST(self):
        global reload_flag

        if self.path == '/reload':
            reload_flag = True
            logger.info("🔄 Config reload triggered via HTTP")

            self.send_response(200)
            self.send_header('Content-Type', 'text/plain')
            self.end_headers()
            self.wfile.write(b'Config reload triggered\n')
        else:
            self._not_found()

    def _not_found(self):
        self.send_response(404)
        self.send_header('Content-Type', 'text/plain')
        self.end_headers()
        self.wfile.write(b'Not Found\n')

    def _handle_health(self):
        """Handle GET /health endpoint for device status"""
        try:
            self.send_response(200)
            self.send_header('Content-Type', 'application/json')
            self.end_headers()
            self.wfile.write(json.dumps(health_status(), indent=2).encode())

        except Exception as e:
            logger.error(f"Error handling /health: {e}")
            self.send_error(500, f"Internal server error: {e}")

    def log_message(self, format, *args):
        """Suppress default HTTP request logs"""
        pass


def health_status() -> dict:
    """Build the /health response body."""
    with config_lock:
        gpins = list((current_config or {}).get("gpins") or [])

    uptime_seconds = 0
    if start_time:
        uptime_seconds = int((datetime.now() - start_time).total_seconds())

    if last_collection_error:
        status = "degraded"
    elif last_collection_time:
        status = "healthy"
    else:
        status = "starting"

    return {
        "status": status,
        "device_id": socket.gethostname(),
        "uptime_seconds": uptime_seconds,
        "last_collection": last_collection_time.isoformat() if last_collection_time else None,
        "last_error": last_collection_error,
        "gpins": gpins,
    }


def start_reload_server(port: int):
    """
    Start HTTP server for the management endpoints in a separate thread.

    Args:
        port: Port to listen on (e.g., 9101)
    """
    server = HTTPServer(('0.0.0.0', port), CombinedHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    logger.info(f"🔄 Management API started on :{port}")
    logger.info(f"   - GET  :{port}/health - Health check status")
    logger.info(f"   - POST :{port}/reload - Trigger config reload")
    return server


def initialize_collector(config: dict) -> BaseCollector:
    """
    Initialize the pinout collector from config.

    Args:
        config: Configuration dictionary

    Returns:
        Initialized collector instance
    """
    try:
        collector = build_collector(config)
        logger.info(f"✅ Collector initialized: {collector.__class__.__name__}")
        return collector
    except Exception as e:
        logger.error(f"❌ Failed to initialize collector: {e}")
        raise


def apply_new_config(new_config: dict):
    """
    Apply new configuration and reinitialize collector if the pin filter changed.

    Args:
        new_config: New configuration dictionary
    """
    global current_config, current_collector

    old_gpins = (current_config or {}).get("gpins") or []
    new_gpins = new_config.get("gpins") or []

    if old_gpins != new_gpins:
        logger.info(f"Pin filter changed: {old_gpins or 'all'} → {new_gpins or 'all'}")

        try:
            current_collector = initialize_collector(new_config)
        except Exception as e:
            logger.error(f"❌ Failed to reinitialize collector: {e}")
            logger.warning("Keeping old collector")
            return

    for key in ("port", "reload_port"):
        if (current_config or {}).get(key) != new_config.get(key):
            logger.warning(f"{key} changed, restart the exporter to apply it")

    with config_lock:
        current_config = new_config
    logger.info("✅ Configuration updated")


def main():
    """Main exporter entry point"""
    global current_config, current_collector, config_loader_instance, reload_flag
    global start_time

    logger.info("🚀 Pinout Exporter starting...")
    start_time = datetime.now()

    # Load initial configuration
    config_loader_instance = ConfigLoader()
    current_config = config_loader_instance.load()
    logger.info(f"Configuration: {current_config}")

    current_collector = initialize_collector(current_config)

    REGISTRY.register(OnDemandCollector())
    logger.info("✅ On-demand collector registered")

    metrics_port = current_config.get("port", 9100)
    start_http_server(metrics_port)
    logger.info(f"📊 Prometheus metrics endpoint started on :{metrics_port}/metrics")

    reload_port = current_config.get("reload_port", 9101)
    start_reload_server(reload_port)

    logger.info("✅ Exporter fully initialized - waiting for scrape requests")

    # Keep main thread alive and handle reload requests
    while True:
        if reload_flag:
            try:
                logger.info("🔄 Reloading configuration...")
                new_config = config_loader_instance.load()
                apply_new_config(new_config)
            except Exception as e:
                logger.error(f"❌ Config reload failed: {e}")
            finally:
                reload_flag = False

        time.sleep(1)  # Check reload flag every second


def run():
    try:
        main()
    except KeyboardInterrupt:
        logger.info("Exporter stopped by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        raise SystemExit(1)


if __name__ == "__main__":
    run()
