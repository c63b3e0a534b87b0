"""
Configuration Tests
===================

Tests for YAML loading and environment overrides.
"""

import pytest

from crowd_router.config import Settings, load_config


ENV_VARS = [
    "CROWD_ROUTER_CONFIG",
    "CROWD_ROUTER_PROVIDER_URL",
    "CROWD_ROUTER_PROVIDER_PROFILE",
    "CROWD_ROUTER_PROVIDER_TIMEOUT",
    "CROWD_ROUTER_BRANCH_TIMEOUT",
    "CROWD_ROUTER_GRID_SIZE",
    "CROWD_ROUTER_PORT",
    "CROWD_ROUTER_LOG_LEVEL",
    "PORT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "provider:\n"
        "  base_url: http://localhost:5000\n"
        "  profile: walking\n"
        "routing:\n"
        "  branch_timeout_seconds: 4\n"
        "grid:\n"
        "  seed_crowds:\n"
        "    - {lat: 23.1821, lng: 75.7890, count: 20}\n"
        "    - {lat: 23.1830, lng: 75.7885, count: 0}\n"
        "server:\n"
        "  port: 9000\n"
    )
    return path


class TestDefaults:
    
    def test_defaults(self):
        settings = Settings()
        
        assert settings.provider.base_url == "https://router.project-osrm.org"
        assert settings.provider.profile == "driving"
        assert settings.routing.branch_timeout_seconds == 15.0
        assert settings.grid.grid_size == 0.0005
        assert settings.grid.seed_crowds == []
        assert settings.server.port == 8002
    
    def test_missing_file_uses_defaults(self, tmp_path):
        settings = load_config(str(tmp_path / "absent.yaml"))
        assert settings.provider.base_url == "https://router.project-osrm.org"


class TestLoadConfig:
    
    def test_values_from_yaml(self, config_file):
        settings = load_config(str(config_file))
        
        assert settings.provider.base_url == "http://localhost:5000"
        assert settings.provider.profile == "walking"
        assert settings.routing.branch_timeout_seconds == 4.0
        assert settings.server.port == 9000
        assert [s.count for s in settings.grid.seed_crowds] == [20, 0]
    
    def test_config_path_from_env(self, config_file, monkeypatch):
        monkeypatch.setenv("CROWD_ROUTER_CONFIG", str(config_file))
        assert load_config().server.port == 9000
    
    def test_env_overrides_yaml(self, config_file, monkeypatch):
        monkeypatch.setenv("CROWD_ROUTER_PROVIDER_URL", "http://osrm.internal")
        monkeypatch.setenv("CROWD_ROUTER_PROVIDER_TIMEOUT", "2.5")
        monkeypatch.setenv("CROWD_ROUTER_BRANCH_TIMEOUT", "7")
        monkeypatch.setenv("CROWD_ROUTER_GRID_SIZE", "0.001")
        monkeypatch.setenv("CROWD_ROUTER_LOG_LEVEL", "DEBUG")
        
        settings = load_config(str(config_file))
        
        assert settings.provider.base_url == "http://osrm.internal"
        assert settings.provider.profile == "walking"
        assert settings.provider.timeout_seconds == 2.5
        assert settings.routing.branch_timeout_seconds == 7.0
        assert settings.grid.grid_size == 0.001
        assert settings.logging.level == "DEBUG"
    
    def test_port_env_takes_precedence(self, config_file, monkeypatch):
        monkeypatch.setenv("CROWD_ROUTER_PORT", "8100")
        assert load_config(str(config_file)).server.port == 8100
        
        monkeypatch.setenv("PORT", "8080")
        assert load_config(str(config_file)).server.port == 8080
    
    def test_invalid_seed_crowd_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("grid:\n  seed_crowds:\n    - {lat: 123.0, lng: 75.0, count: 1}\n")
        
        with pytest.raises(ValueError):
            load_config(str(path))
