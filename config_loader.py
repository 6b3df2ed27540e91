"""
Configuration loader with central API support and local fallback.
"""
import requests
import yaml
import socket
import logging
import os
from typing import Dict
from threading import Thread


class ConfigLoader:
    """
    Load configuration from central Config API server with local fallback.

    Priority:
    1. Try to fetch from central Config API server (with timeout)
    2. If fails, load from local config.yaml

    Environment variables:
    - CONFIG_SERVER_URL: Central config server URL (default: http://localhost:8080)
    - CONFIG_TIMEOUT: Request timeout in seconds (default: 5)
    - LOCAL_CONFIG_PATH: Path to local config file (default: ./config.yaml)
    """

    def __init__(self):
        self.config_server_url = os.getenv(
            "CONFIG_SERVER_URL",
            "http://localhost:8080"
        )
        self.local_config_path = os.getenv(
            "LOCAL_CONFIG_PATH",
            "./config.yaml"
        )
        self.timeout = int(os.getenv("CONFIG_TIMEOUT", "5"))
        self.device_id = socket.gethostname()
        self.logger = logging.getLogger(self.__class__.__name__)

    def load(self) -> Dict:
        """
        Load configuration with central API + local fallback.

        Returns:
            Validated configuration dictionary

        Raises:
            RuntimeError: If both central and local config loading fail
            ValueError: If the loaded config has an invalid gpins value
        """
        config = None

        try:
            config = self._fetch_from_server()
            if config:
                self.logger.info("✅ Loaded config from central server")
        except Exception as e:
            self.logger.warning(f"⚠️ Failed to fetch from central server: {e}")

        if not config:
            try:
                config = self._load_local_config()
            except Exception as e:
                self.logger.error(f"❌ Failed to load local config: {e}")
                raise RuntimeError(
                    "No config available - both central server and local config failed"
                )
            self.logger.info("✅ Loaded local fallback config")

            self.logger.info("📤 Registering device to server...")
            self.sync_to_server(config)

        return validate_config(config)

    def _fetch_from_server(self) -> Dict:
        """
        Fetch configuration from central Config API server.

        Raises:
            Exception: If request fails or server returns error
        """
        url = f"{self.config_server_url}/config/{self.device_id}"
        self.logger.info(f"Fetching config from {url}")

        response = requests.get(url, timeout=self.timeout)
        response.raise_for_status()

        config = response.json()
        self.logger.debug(f"Received config: {config}")
        return config

    def _load_local_config(self) -> Dict:
        """
        Load configuration from local config.yaml file.

        Raises:
            Exception: If file doesn't exist or parsing fails
        """
        self.logger.info(f"Loading config from {self.local_config_path}")

        with open(self.local_config_path, 'r') as f:
            config = yaml.safe_load(f)

        if not config:
            raise ValueError("Local config file is empty")

        self.logger.debug(f"Loaded local config: {config}")
        return config

    def sync_to_server(self, config: Dict) -> None:
        """
        Asynchronously register the device configuration on the Config Server.
        Runs in a background thread; failures are logged only.
        """
        thread = Thread(
            target=self._sync_worker,
            args=(config, self.device_id),
            daemon=True,
            name="ConfigSyncThread"
        )
        thread.start()
        self.logger.debug(f"Started background sync to server for {self.device_id}")

    def _sync_worker(self, config: Dict, device_id: str) -> None:
        try:
            url = f"{self.config_server_url}/config/{device_id}"
            self.logger.debug(f"Syncing config to {url}")

            response = requests.put(
                url,
                json=config,
                timeout=self.timeout
            )

            if response.ok:
                self.logger.info("Successfully synced config to server")
            else:
                self.logger.warning(
                    f"Server sync failed: HTTP {response.status_code} - {response.text}"
                )

        except requests.exceptions.Timeout:
            self.logger.warning(f"Server sync timeout (>{self.timeout}s)")
        except requests.exceptions.ConnectionError as e:
            self.logger.warning(f"Server sync connection error: {e}")
        except Exception as e:
            self.logger.error(f"Server sync error: {e}")


def validate_config(config: Dict) -> Dict:
    """
    Check the pin filter of a configuration.

    `gpins` may be absent, null or a list of non-negative integers. Pins are
    not checked against what the board actually has.

    Returns:
        The same configuration, with `gpins` normalized to a list

    Raises:
        ValueError: If gpins is not a list of non-negative integers
    """
    if not isinstance(config, dict):
        raise ValueError(f"Config must be a mapping, got {type(config).__name__}")

    gpins = config.get("gpins")
    if gpins is None:
        config["gpins"] = []
        return config

    if not isinstance(gpins, list):
        raise ValueError(f"gpins must be a list, got {type(gpins).__name__}")

    for pin in gpins:
        # bool is an int subclass
        if isinstance(pin, bool) or not isinstance(pin, int) or pin < 0:
            raise ValueError(f"Invalid pin in gpins: {pin!r}")

    return config
