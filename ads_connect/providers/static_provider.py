"""
Route list read from a YAML file.

Useful on machines without a TwinCAT router and for scripted demos. The file
is re-read on every poll so edits appear in the live table.

Example file:

    local_net_id: 5.80.201.232.1.1
    routes:
      - name: CX-51C3A2
        address: 192.168.1.20
        net_id: 5.81.195.162.1.1
        os: TcBSD (13.2)
"""

from pathlib import Path
from typing import List, Optional

import yaml

from .base_provider import BaseRouteProvider
from ..core.data_models import DeviceRecord
from ..utils.error_handler import ProviderError


class StaticRouteProvider(BaseRouteProvider):
    """Serves routes from a YAML route file."""

    def __init__(self, routes_file: str, logger=None):
        super().__init__(logger)
        self.routes_file = Path(routes_file)

    def _load(self) -> dict:
        try:
            with open(self.routes_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ProviderError(f"Cannot read routes file {self.routes_file}: {e}") from e
        except yaml.YAMLError as e:
            raise ProviderError(f"Error parsing routes file {self.routes_file}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ProviderError(f"Invalid routes file structure in {self.routes_file}")
        return data

    def list_routes(self) -> List[DeviceRecord]:
        routes = self._load().get("routes") or []
        if not isinstance(routes, list):
            raise ProviderError(f"'routes' in {self.routes_file} must be a list")
        records = [self.parse_route(entry) for entry in routes]
        self._log_debug(f"Loaded {len(records)} route(s) from {self.routes_file}")
        return records

    def local_network_id(self) -> Optional[str]:
        local = self._load().get("local_net_id")
        return str(local) if local else None
