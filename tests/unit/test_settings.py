# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for configuration settings."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from registrar.core.config.settings import (
    RegistrarSettings,
    Settings,
    StoreSettings,
    clear_settings_cache,
    get_settings,
)


class TestStoreSettings:
    """Tests for StoreSettings."""

    def test_default_values(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = StoreSettings()

        assert settings.backend == "memory"
        assert settings.database == "(default)"
        assert settings.project_id is None

    def test_env_override(self):
        env = {"STORE_BACKEND": "firestore", "STORE_PROJECT_ID": "school-prod"}
        with patch.dict(os.environ, env, clear=True):
            settings = StoreSettings()

        assert settings.backend == "firestore"
        assert settings.project_id == "school-prod"

    def test_rejects_unknown_backend(self):
        with patch.dict(os.environ, {"STORE_BACKEND": "postgres"}, clear=True):
            with pytest.raises(ValidationError):
                StoreSettings()


class TestRegistrarSettings:
    """Tests for RegistrarSettings."""

    def test_config_path(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = RegistrarSettings()

        assert settings.config_path == "config/system"

    def test_rejects_malformed_default_ay(self):
        with pytest.raises(ValidationError):
            RegistrarSettings(default_ay_code="2025")


class TestSettings:
    """Tests for main Settings class."""

    def test_production_requires_firestore(self):
        env = {"ENVIRONMENT": "production"}
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    def test_production_with_firestore(self):
        env = {"ENVIRONMENT": "production", "STORE_BACKEND": "firestore", "DEBUG": "false"}
        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)

        assert settings.is_production
        assert not settings.is_development

    def test_get_settings_is_cached(self):
        clear_settings_cache()
        try:
            assert get_settings() is get_settings()
        finally:
            clear_settings_cache()
