"""
Local persistence for the tool registry.

The registry lives in a single YAML document under the user's
configuration directory. The path is computed on every call and handed
to ``RegistryStore`` explicitly, so tests and ``--config`` can point it
anywhere.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import click

from . import CONFIG_DIR_ENV
from .errors import StoreIOError
from .models import Registry

logger = logging.getLogger("tkit.store")

APP_NAME = "tkit"
CONFIG_FILENAME = "config.yaml"
BACKUP_SUFFIX = ".backup"


def default_config_path() -> Path:
    """Location of the registry document.

    ``$TKIT_CONFIG_DIR/config.yaml`` when the variable is set, otherwise
    ``config.yaml`` inside the platform configuration directory
    (``~/.config/tkit`` on Linux, honoring ``XDG_CONFIG_HOME``).
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser() / CONFIG_FILENAME
    return Path(click.get_app_dir(APP_NAME)) / CONFIG_FILENAME


class RegistryStore:
    """Load and save a ``Registry`` at a fixed path."""

    def __init__(self, path: Optional[Path] = None):
        """Initialize the store.

        Args:
            path: Registry document. Defaults to ``default_config_path()``.
        """
        self.path = Path(path).expanduser() if path else default_config_path()

    @property
    def backup_path(self) -> Path:
        """Sibling that holds the pre-pull copy, e.g. ``config.yaml.backup``."""
        return self.path.with_name(self.path.name + BACKUP_SUFFIX)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Registry:
        """Read the registry, or an empty one if no document exists yet.

        Raises:
            DeserializationError: If the document is malformed.
            StoreIOError: If the document exists but cannot be read.
        """
        if not self.path.exists():
            return Registry()
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StoreIOError(f"Cannot read {self.path}: {exc}") from exc
        return Registry.from_yaml(text)

    def save(self, registry: Registry) -> Path:
        """Write the registry, creating the directory if needed.

        The document is written to a ``.tmp`` sibling and renamed over
        the target.

        Raises:
            StoreIOError: On any filesystem failure.
        """
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(registry.to_yaml(), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as exc:
            raise StoreIOError(f"Cannot write {self.path}: {exc}") from exc
        logger.debug("Saved registry (%d tools) to %s", len(registry.tools), self.path)
        return self.path

    def read_raw(self) -> Optional[bytes]:
        """Verbatim document bytes, or None if absent or unreadable."""
        try:
            return self.path.read_bytes()
        except OSError:
            return None

    def backup(self) -> Optional[Path]:
        """Copy the current document byte-for-byte to ``backup_path``.

        Best-effort: returns None when there is nothing readable to back
        up or the copy cannot be written.
        """
        raw = self.read_raw()
        if raw is None:
            return None
        try:
            self.backup_path.write_bytes(raw)
        except OSError as exc:
            logger.warning("Could not write backup %s: %s", self.backup_path, exc)
            return None
        logger.info("Backed up registry to %s", self.backup_path)
        return self.backup_path

    def delete(self) -> bool:
        """Remove the document, and its directory if that leaves it empty.

        Returns:
            bool: Whether a document was removed.
        """
        if not self.path.exists():
            return False
        try:
            self.path.unlink()
            parent = self.path.parent
            if parent.exists() and not any(parent.iterdir()):
                parent.rmdir()
        except OSError as exc:
            raise StoreIOError(f"Cannot delete {self.path}: {exc}") from exc
        logger.info("Deleted registry %s", self.path)
        return True
