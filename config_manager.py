"""
Centralized configuration manager to avoid multiple Config instances.
"""
from core.config import Config

# Global config instance - loaded once
_config_instance = None


def get_config() -> Config:
    """Get the global config instance, creating it only once."""
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
    return _config_instance


def refresh_config():
    """Force a refresh of the global config instance."""
    global _config_instance
    _config_instance = None
    return get_config()


def get_state_manager_config(config: Config = None):
    """Get StateManager configuration from the main config."""
    from state_manager import StateManagerConfig

    config = config or get_config()

    return StateManagerConfig(
        backend_type=config.storage.backend,
        enable_user_isolation=config.storage.enable_user_isolation,
        default_ttl=config.storage.ttl_default,
        key_prefix=config.storage.key_prefix,
        redis_url=config.storage.redis_url,
        database_url=config.storage.database_url,
        max_value_size=config.storage.max_value_size
    )
