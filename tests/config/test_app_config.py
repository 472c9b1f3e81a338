"""
AppConfig, StorageConfig and RepackageConfig environment loading.
"""

import pytest

from config import (
    AppConfig,
    DeliveryMode,
    RepackageConfig,
    StorageBackend,
    StorageConfig,
    debug_config,
    get_config,
    reset_config,
)
from exceptions import ConfigurationError


class TestDefaults:

    def test_defaults_without_environment(self, clean_env):
        config = AppConfig.from_environment()

        assert config.environment == "dev"
        assert config.debug_mode is False
        assert config.repackage.delivery_mode == DeliveryMode.INLINE
        assert config.repackage.fetch_timeout_seconds == 60.0
        assert config.repackage.chunk_size_bytes == 1024 * 1024
        assert config.repackage.zip_compresslevel == 6
        assert config.storage.backend == StorageBackend.AZURE
        assert config.storage.container == "repackaged"
        assert config.storage.key_prefix == "zips"
        assert config.storage.presign_expiry_seconds == 3600


class TestEnvironmentOverrides:

    def test_repackage_settings(self, clean_env):
        clean_env.setenv("REPACKAGE_DELIVERY_MODE", "PRESIGNED_URL")
        clean_env.setenv("REPACKAGE_FETCH_TIMEOUT_SECONDS", "12.5")
        clean_env.setenv("REPACKAGE_CHUNK_SIZE_BYTES", "65536")
        clean_env.setenv("REPACKAGE_ZIP_COMPRESSLEVEL", "1")

        config = RepackageConfig.from_environment()

        assert config.delivery_mode == DeliveryMode.PRESIGNED_URL
        assert config.fetch_timeout_seconds == 12.5
        assert config.chunk_size_bytes == 65536
        assert config.zip_compresslevel == 1

    def test_storage_settings(self, clean_env):
        clean_env.setenv("STORAGE_BACKEND", "memory")
        clean_env.setenv("REPACKAGE_OUTPUT_CONTAINER", "outbox")
        clean_env.setenv("REPACKAGE_KEY_PREFIX", "/exports/zips/")
        clean_env.setenv("PRESIGN_EXPIRY_SECONDS", "600")

        config = StorageConfig.from_environment()

        assert config.backend == StorageBackend.MEMORY
        assert config.container == "outbox"
        assert config.key_prefix == "exports/zips"
        assert config.presign_expiry_seconds == 600

    def test_debug_mode_flag(self, clean_env):
        clean_env.setenv("DEBUG_MODE", "true")
        assert AppConfig.from_environment().debug_mode is True


class TestValidation:

    @pytest.mark.parametrize("var, value", [
        ("REPACKAGE_DELIVERY_MODE", "carrier_pigeon"),
        ("REPACKAGE_CHUNK_SIZE_BYTES", "abc"),
        ("REPACKAGE_CHUNK_SIZE_BYTES", "100"),
        ("REPACKAGE_ZIP_COMPRESSLEVEL", "10"),
        ("REPACKAGE_FETCH_TIMEOUT_SECONDS", "0"),
        ("STORAGE_BACKEND", "s3"),
        ("PRESIGN_EXPIRY_SECONDS", "0"),
        ("PRESIGN_EXPIRY_SECONDS", str(8 * 24 * 3600)),
        ("REPACKAGE_OUTPUT_CONTAINER", "ab"),
    ])
    def test_bad_values_raise_configuration_error(self, clean_env, var, value):
        clean_env.setenv(var, value)
        with pytest.raises(ConfigurationError):
            AppConfig.from_environment()

    def test_presigned_azure_needs_credentials(self, clean_env):
        clean_env.setenv("REPACKAGE_DELIVERY_MODE", "presigned_url")
        with pytest.raises(ConfigurationError):
            AppConfig.from_environment()

    def test_presigned_azure_with_account_name(self, clean_env):
        clean_env.setenv("REPACKAGE_DELIVERY_MODE", "presigned_url")
        clean_env.setenv("STORAGE_ACCOUNT_NAME", "realaccount")
        config = AppConfig.from_environment()
        assert config.storage.uses_connection_string is False

    def test_presigned_memory_backend_needs_nothing(self, clean_env):
        clean_env.setenv("REPACKAGE_DELIVERY_MODE", "presigned_url")
        clean_env.setenv("STORAGE_BACKEND", "memory")
        assert AppConfig.from_environment().storage.backend == StorageBackend.MEMORY


class TestAccessors:

    def test_get_config_is_cached_until_reset(self, clean_env):
        first = get_config()
        assert get_config() is first
        reset_config()
        assert get_config() is not first

    def test_debug_config_masks_connection_string(self, clean_env):
        clean_env.setenv("STORAGE_CONNECTION_STRING", "AccountName=a;AccountKey=c2VjcmV0")
        info = debug_config()
        assert info["storage"]["connection_string"] == "***MASKED***"
        assert "c2VjcmV0" not in str(info)

    def test_debug_config_reports_errors(self, clean_env):
        clean_env.setenv("REPACKAGE_ZIP_COMPRESSLEVEL", "99")
        assert "error" in debug_config()
