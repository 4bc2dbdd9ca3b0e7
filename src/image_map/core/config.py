"""Configuration and store persistence for Image Map."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .models import DEFAULT_IMAGE, Profile, Store

logger = logging.getLogger(__name__)

# Default configuration file path
DEFAULT_CONFIG_PATH = Path("config.yaml")

# Profile synthesized from pre-profile settings
LEGACY_PROFILE_ID = "default"
LEGACY_PROFILE_NAME = "Default Room"


@dataclass
class AppConfig:
    """
    Application configuration settings.

    Stores where images and destinations live plus editor preferences.
    """

    plugin_dir: str = "."  # Directory for bare image filenames
    storage_root: str = "."  # Root for destinations and image paths
    store_file: str = "image_map.yaml"  # Profiles and hotspots
    default_image: str = DEFAULT_IMAGE
    line_thickness: int = 2
    font_size: int = 10
    handle_radius: float = 1.2  # Vertex handle radius in percent units
    cancel_edit_key: str = "Escape"  # Deletes the shape being edited
    undo_key: str = "Ctrl+Z"
    notice_timeout_ms: int = 3000
    max_history_entries: int = 100  # Maximum vertex undo snapshots

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for serialization."""
        return {
            "pluginDir": self.plugin_dir,
            "storageRoot": self.storage_root,
            "storeFile": self.store_file,
            "defaultImage": self.default_image,
            "lineThickness": self.line_thickness,
            "fontSize": self.font_size,
            "handleRadius": self.handle_radius,
            "cancelEditKey": self.cancel_edit_key,
            "undoKey": self.undo_key,
            "noticeTimeoutMs": self.notice_timeout_ms,
            "maxHistoryEntries": self.max_history_entries,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AppConfig:
        """Create config from dictionary."""
        return cls(
            plugin_dir=data.get("pluginDir", "."),
            storage_root=data.get("storageRoot", "."),
            store_file=data.get("storeFile", "image_map.yaml"),
            default_image=data.get("defaultImage", DEFAULT_IMAGE),
            line_thickness=data.get("lineThickness", 2),
            font_size=data.get("fontSize", 10),
            handle_radius=data.get("handleRadius", 1.2),
            cancel_edit_key=data.get("cancelEditKey", "Escape"),
            undo_key=data.get("undoKey", "Ctrl+Z"),
            notice_timeout_ms=data.get("noticeTimeoutMs", 3000),
            max_history_entries=data.get("maxHistoryEntries", 100),
        )


class ConfigManager:
    """
    Manager for loading and saving application configuration.

    Handles YAML serialization and provides a clean interface
    for configuration access.
    """

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH) -> None:
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = config_path
        self._config: Optional[AppConfig] = None

    @property
    def config(self) -> AppConfig:
        """Get the current configuration, loading if necessary."""
        if self._config is None:
            self._config = self.load()
        return self._config

    def load(self) -> AppConfig:
        """
        Load configuration from file.

        Returns:
            AppConfig instance with loaded or default values
        """
        if not self.config_path.exists():
            logger.info(f"Config file not found at {self.config_path}, using defaults")
            return AppConfig()

        try:
            with open(self.config_path, "r") as f:
                data = yaml.safe_load(f) or {}
            logger.info(f"Loaded configuration from {self.config_path}")
            return AppConfig.from_dict(data)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing config file: {e}")
            return AppConfig()
        except Exception as e:
            logger.error(f"Error loading config: {e}")
            return AppConfig()

    def save(self, config: Optional[AppConfig] = None) -> bool:
        """
        Save configuration to file.

        Args:
            config: Configuration to save, or use current config

        Returns:
            True if save was successful
        """
        if config is not None:
            self._config = config

        if self._config is None:
            logger.warning("No configuration to save")
            return False

        try:
            with open(self.config_path, "w") as f:
                yaml.dump(self._config.to_dict(), f, default_flow_style=False)
            logger.info(f"Saved configuration to {self.config_path}")
            return True
        except Exception as e:
            logger.error(f"Error saving config: {e}")
            return False


class StoreManager:
    """
    Persistence for the profile store.

    Loading applies defaults, migrates legacy rectangle hotspots and wraps
    pre-profile settings into a default profile the first time.
    """

    def __init__(self, store_path: Path, default_image: str = DEFAULT_IMAGE) -> None:
        """
        Initialize with the store file path.

        Args:
            store_path: YAML file holding profiles and hotspots
            default_image: Image used by the synthesized default profile
        """
        self.store_path = Path(store_path)
        self.default_image = default_image
        self._store: Optional[Store] = None

    @property
    def store(self) -> Store:
        """Get the current store, loading if necessary."""
        if self._store is None:
            self._store = self.load()
        return self._store

    def _read(self) -> Dict[str, Any]:
        if not self.store_path.exists():
            logger.info(f"Store file not found at {self.store_path}, using defaults")
            return {}

        try:
            with open(self.store_path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error(f"Error parsing store file: {e}")
            return {}
        except Exception as e:
            logger.error(f"Error loading store: {e}")
            return {}

        if not isinstance(data, dict):
            logger.error(f"Store file {self.store_path} does not contain a mapping")
            return {}
        return data

    def load(self) -> Store:
        """
        Load the store from file.

        Returns:
            Store with defaults applied and legacy settings migrated
        """
        data = self._read()
        store = Store.from_dict(data)

        self._store = store
        if not store.profiles:
            self._migrate_legacy(store, data)
            self.save()

        logger.info(
            f"Loaded {len(store.profiles)} profiles with {store.hotspot_count} hotspots"
        )
        return store

    def _migrate_legacy(self, store: Store, data: Dict[str, Any]) -> None:
        """Wrap top-level roomImagePath/hotspots into a default profile."""
        legacy = {
            "id": LEGACY_PROFILE_ID,
            "name": LEGACY_PROFILE_NAME,
            "imagePath": data.get("roomImagePath") or self.default_image,
            "hotspots": data.get("hotspots") or [],
        }
        profile = Profile.from_dict(legacy)
        store.profiles.append(profile)
        store.active_profile_id = profile.id
        logger.info(f"Created default profile with {len(profile.hotspots)} legacy hotspots")

    def save(self, store: Optional[Store] = None) -> bool:
        """
        Save the store to file.

        Args:
            store: Store to save, or use the current store

        Returns:
            True if save was successful
        """
        if store is not None:
            self._store = store

        if self._store is None:
            logger.warning("No store to save")
            return False

        try:
            self.store_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.store_path, "w") as f:
                yaml.safe_dump(
                    self._store.to_dict(), f, default_flow_style=False, sort_keys=False
                )
            logger.debug(f"Saved store to {self.store_path}")
            return True
        except Exception as e:
            logger.error(f"Error saving store: {e}")
            return False
