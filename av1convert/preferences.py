"""Persisted user preferences (last used destination folder)"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from .config import CONFIG_PATH
from .exceptions import DestinationError

logger = logging.getLogger(__name__)

WRITE_TEST_NAME = "test_write_permission.tmp"

class Preferences:
    """
    JSON-backed store for the last destination folder.

    The file holds a single object, ``{"lastDestination": "..."}``.
    """

    def __init__(self, config_path: Union[str, Path] = CONFIG_PATH):
        self.config_path = Path(config_path)
        self._last_destination: Optional[Path] = None

    @property
    def last_destination(self) -> Optional[Path]:
        return self._last_destination

    def load(self) -> None:
        """Read the preference file; a missing or broken file is logged and ignored"""
        try:
            data = json.loads(self.config_path.read_text(encoding="utf-8"))
        except OSError as e:
            logger.info("No preferences loaded from %s: %s", self.config_path, e)
            return
        except ValueError as e:
            logger.warning("Ignoring corrupt preferences file %s: %s", self.config_path, e)
            return

        value = data.get("lastDestination") if isinstance(data, dict) else None
        if value:
            self._last_destination = Path(value)
            logger.info("Last destination: %s", self._last_destination)

    def save(self) -> bool:
        """Write the preference file; returns False if it could not be written"""
        data = {
            "lastDestination": str(self._last_destination) if self._last_destination else ""
        }
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            self.config_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as e:
            logger.error("Error writing preferences file %s: %s", self.config_path, e)
            return False
        return True

    def confirm_destination(self, folder: Optional[Union[str, Path]] = None) -> Path:
        """
        Resolve and validate the destination folder, then remember it.

        An empty choice falls back to the last destination and then to
        ``~/Desktop``. The folder is created if needed and checked for write
        access by creating a scratch file.

        Returns:
            The confirmed destination folder

        Raises:
            DestinationError: If the folder cannot be created or written to
        """
        if folder:
            destination = Path(folder).expanduser()
        elif self._last_destination:
            destination = self._last_destination
        else:
            destination = Path.home() / "Desktop"

        test_file = destination / WRITE_TEST_NAME
        try:
            destination.mkdir(parents=True, exist_ok=True)
            test_file.touch()
            test_file.unlink()
        except OSError as e:
            logger.error("Selected folder is not writable: %s", e)
            raise DestinationError(
                f"Selected folder is not writable: {destination}", module="preferences"
            ) from e

        self._last_destination = destination
        self.save()
        logger.info("Destination folder: %s", destination)
        return destination
