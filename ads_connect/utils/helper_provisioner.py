"""
Lazy provisioning of the CERHost remote-display client.

CERHost is not distributed with the console. On first use it is downloaded
once from the vendor, extracted, and copied next to the console; later
launches reuse the cached executable.
"""

import shutil
import tempfile
import zipfile
from pathlib import Path
from typing import Optional

import requests

from .error_handler import ProvisioningError
from .logger import Logger, get_logger

DEFAULT_CERHOST_URL = "https://infosys.beckhoff.com/content/1033/cx9020_hw/Resources/5047075211.zip"
DEFAULT_CERHOST_EXECUTABLE = "CERHOST.exe"


class HelperProvisioner:
    """
    Ensures a helper executable exists at a fixed local path.

    Attributes:
        target_path: Where the executable is cached
        download_url: Vendor archive containing the executable
        executable_name: File name to look for inside the archive
    """

    def __init__(
        self,
        target_path: Path,
        download_url: str = DEFAULT_CERHOST_URL,
        executable_name: str = DEFAULT_CERHOST_EXECUTABLE,
        session: Optional[requests.Session] = None,
        timeout: int = 60,
        logger: Optional[Logger] = None,
    ):
        self.target_path = Path(target_path)
        self.download_url = download_url
        self.executable_name = executable_name
        self.session = session or requests.Session()
        self.timeout = timeout
        self.logger = logger or get_logger(__name__)

    def is_present(self) -> bool:
        return self.target_path.is_file()

    def ensure(self) -> Path:
        """
        Return the helper path, downloading it first if necessary.

        Returns:
            Path to the cached executable

        Raises:
            ProvisioningError: If download, extraction or copy fails
        """
        if self.is_present():
            return self.target_path

        self.logger.info(f"{self.executable_name} not found, downloading from {self.download_url}")
        work_dir = Path(tempfile.mkdtemp(prefix="ads_connect_"))
        try:
            archive = work_dir / "helper.zip"
            self._download(archive)
            extracted = work_dir / "extracted"
            self._extract(archive, extracted)
            source = self._locate(extracted)
            self.target_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, self.target_path)
        except OSError as e:
            raise ProvisioningError(f"Could not install {self.executable_name}: {e}") from e
        finally:
            shutil.rmtree(work_dir, ignore_errors=True)

        self.logger.success(f"{self.executable_name} installed", path=str(self.target_path))
        return self.target_path

    def _download(self, destination: Path) -> None:
        try:
            with self.session.get(self.download_url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                with open(destination, "wb") as f:
                    for chunk in response.iter_content(chunk_size=64 * 1024):
                        if chunk:
                            f.write(chunk)
        except requests.RequestException as e:
            raise ProvisioningError(f"Download of {self.download_url} failed: {e}") from e

    def _extract(self, archive: Path, destination: Path) -> None:
        try:
            with zipfile.ZipFile(archive, "r") as zf:
                zf.extractall(destination)
        except zipfile.BadZipFile as e:
            raise ProvisioningError(f"Downloaded archive is not a valid zip file: {e}") from e

    def _locate(self, directory: Path) -> Path:
        wanted = self.executable_name.lower()
        for candidate in sorted(directory.rglob("*")):
            if candidate.is_file() and candidate.name.lower() == wanted:
                return candidate
        raise ProvisioningError(f"{self.executable_name} not found in downloaded archive")
