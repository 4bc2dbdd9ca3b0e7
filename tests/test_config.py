"""Tests for configuration and store persistence."""

import pytest
from pathlib import Path
import tempfile

import yaml

from image_map.core.config import (
    AppConfig,
    ConfigManager,
    LEGACY_PROFILE_ID,
    LEGACY_PROFILE_NAME,
    StoreManager,
)
from image_map.core.models import Hotspot, LabelType, ShapeKind, Store


class TestAppConfig:
    """Tests for AppConfig."""

    def test_default_config(self):
        """Test creating config with defaults."""
        config = AppConfig()

        assert config.plugin_dir == "."
        assert config.store_file == "image_map.yaml"
        assert config.default_image == "room-bg.png"
        assert config.handle_radius == 1.2
        assert config.cancel_edit_key == "Escape"
        assert config.undo_key == "Ctrl+Z"

    def test_to_dict(self):
        """Test converting config to dictionary."""
        config = AppConfig(storage_root="/vault", line_thickness=4)

        data = config.to_dict()

        assert data["storageRoot"] == "/vault"
        assert data["lineThickness"] == 4
        assert "noticeTimeoutMs" in data

    def test_from_dict_with_defaults(self):
        """Test creating config from partial dictionary."""
        config = AppConfig.from_dict({"storageRoot": "/vault", "fontSize": 14})

        assert config.storage_root == "/vault"
        assert config.font_size == 14
        assert config.line_thickness == 2  # default
        assert config.max_history_entries == 100  # default


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_load_nonexistent_file(self):
        """Test loading config when file doesn't exist."""
        with tempfile.TemporaryDirectory() as tmpdir:
            manager = ConfigManager(Path(tmpdir) / "nonexistent.yaml")

            config = manager.load()

            assert config.storage_root == "."
            assert config.line_thickness == 2

    def test_save_and_load(self):
        """Test saving and loading config."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.yaml"
            manager = ConfigManager(config_path)

            manager.save(AppConfig(storage_root="/vault", undo_key="Ctrl+U"))
            loaded = manager.load()

            assert loaded.storage_root == "/vault"
            assert loaded.undo_key == "Ctrl+U"

    def test_load_invalid_yaml(self, temp_dir):
        """Test a malformed config file falls back to defaults."""
        config_path = temp_dir / "config.yaml"
        config_path.write_text("storageRoot: [unclosed\n")

        config = ConfigManager(config_path).load()

        assert config.storage_root == "."

    def test_config_property(self, temp_dir):
        """Test config property lazy loading."""
        manager = ConfigManager(temp_dir / "config.yaml")

        assert manager.config is manager.config


class TestStoreManager:
    """Tests for StoreManager."""

    def test_missing_file_creates_default_profile(self, temp_dir):
        """Test a first run gets a default profile and is saved."""
        store_path = temp_dir / "image_map.yaml"
        manager = StoreManager(store_path)

        store = manager.load()

        assert len(store.profiles) == 1
        profile = store.active_profile
        assert profile.id == LEGACY_PROFILE_ID
        assert profile.name == LEGACY_PROFILE_NAME
        assert profile.image_path == "room-bg.png"
        assert store_path.exists()

    def test_legacy_migration(self, legacy_store_file):
        """Test top-level image and rect hotspots move into a profile."""
        manager = StoreManager(legacy_store_file)

        store = manager.load()

        profile = store.active_profile
        assert profile.id == LEGACY_PROFILE_ID
        assert profile.image_path == "rooms/den.jpg"
        assert [h.id for h in profile.hotspots] == ["h1"]
        shelf = profile.hotspots[0]
        assert shelf.points == [(20, 10), (50, 10), (50, 50), (20, 50)]
        assert shelf.shape_type == ShapeKind.RECT

        written = yaml.safe_load(legacy_store_file.read_text())
        assert written["profiles"][0]["id"] == LEGACY_PROFILE_ID
        assert "top" not in written["profiles"][0]["hotspots"][0]

    def test_migration_runs_once(self, legacy_store_file):
        """Test reloading a migrated file does not add another profile."""
        StoreManager(legacy_store_file).load()
        store = StoreManager(legacy_store_file).load()

        assert len(store.profiles) == 1

    def test_save_and_load(self, temp_dir):
        """Test a saved store loads back unchanged."""
        store_path = temp_dir / "nested" / "image_map.yaml"
        store = Store(display_label_type=LabelType.NAME)
        profile = store.add_profile("Room A", "bg.png")
        profile.add_hotspot(Hotspot(
            name="Desk", path="notes/desk",
            points=[(10, 10), (40, 10), (40, 40), (10, 40)], shape_type=ShapeKind.RECT
        ))

        assert StoreManager(store_path).save(store) is True
        loaded = StoreManager(store_path).load()

        assert loaded.to_dict() == store.to_dict()

    def test_save_is_idempotent(self, temp_dir):
        """Test saving twice writes the same document."""
        store_path = temp_dir / "image_map.yaml"
        manager = StoreManager(store_path)
        manager.load()

        manager.save()
        first = store_path.read_text()
        manager.save()

        assert store_path.read_text() == first

    def test_corrupt_file(self, temp_dir):
        """Test an unreadable store falls back to a default profile."""
        store_path = temp_dir / "image_map.yaml"
        store_path.write_text("profiles: [\n")

        store = StoreManager(store_path).load()

        assert store.active_profile.id == LEGACY_PROFILE_ID

    def test_non_mapping_file(self, temp_dir):
        """Test a YAML list instead of a mapping is ignored."""
        store_path = temp_dir / "image_map.yaml"
        store_path.write_text("- one\n- two\n")

        store = StoreManager(store_path).load()

        assert len(store.profiles) == 1

    def test_save_without_store(self, temp_dir):
        """Test saving before anything was loaded."""
        manager = StoreManager(temp_dir / "image_map.yaml")
        assert manager.save() is False

    def test_store_property(self, temp_dir):
        """Test store property lazy loading."""
        manager = StoreManager(temp_dir / "image_map.yaml")
        assert manager.store is manager.store
