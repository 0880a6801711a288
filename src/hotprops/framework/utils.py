"""
Utility functions for common store setup patterns.
"""

from typing import Any, Optional, Union
from pathlib import Path

from .builder import StoreBuilder
from .store import PropertyStore


def load_store(*locations: str, hot_reload: bool = False, **options: Any) -> PropertyStore:
    """
    Load properties locations into a new store.

    Args:
        *locations: Properties files or directories
        hot_reload: Whether to watch the loaded files
        **options: Further StoreOptions values

    Returns:
        PropertyStore instance with the locations loaded
    """
    return (StoreBuilder()
            .with_options(hot_reload=hot_reload, **options)
            .add_location(*locations)
            .build())


def load_store_with_hot_reload(*locations: str, **options: Any) -> PropertyStore:
    """
    Load properties locations with hot-reloading enabled.

    The caller must close the returned store before shutting down.
    """
    return load_store(*locations, hot_reload=True, **options)


def load_store_from_options_file(
    options_path: Union[str, Path],
    *locations: str,
    env_prefix: Optional[str] = "HOTPROPS_"
) -> PropertyStore:
    """
    Load a store configured by a YAML options file and the environment.

    Args:
        options_path: YAML file with a ``hotprops`` options section
        *locations: Properties files or directories
        env_prefix: Environment variable prefix, None to ignore the environment
    """
    builder = StoreBuilder().add_yaml_source(options_path, 100)
    if env_prefix is not None:
        builder.add_environment_source(env_prefix, 200)
    return builder.add_location(*locations).build()


def create_store_builder() -> StoreBuilder:
    """
    Create a new store builder.

    Returns:
        StoreBuilder instance
    """
    return StoreBuilder()
