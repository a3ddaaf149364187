# SPDX-License-Identifier: GPL-3.0-only
"""Utilities module."""

import os
from typing import Any, List

from peewee import DatabaseError

from base_logger import get_logger

logger = get_logger(__name__)


def load_key(filepath: str, key_length: int) -> bytes:
    """Load key from file and return first key_length characters as bytes.

    Args:
        filepath: Path to the key file.
        key_length: Number of characters to load.

    Returns:
        Key bytes.

    Raises:
        FileNotFoundError: If file doesn't exist.
        ValueError: If the file holds fewer than key_length characters.
    """
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            key = f.readline().strip()[:key_length]
    except FileNotFoundError:
        logger.error(
            "Key file not found at %s. Please check the configuration.",
            filepath,
        )
        raise

    if len(key) != key_length:
        logger.error(
            "Invalid key length in file %s: expected %d characters, got %d.",
            filepath,
            key_length,
            len(key),
        )
        raise ValueError("Invalid key length.")

    return key.encode("utf-8")


def get_configs(config_name: str, strict: bool = False, default_value: str = "") -> str:
    """Retrieve configuration from environment variables.

    Args:
        config_name: Configuration name.
        strict: If True, raises error if not found.
        default_value: Default value if not found and not strict.

    Returns:
        Configuration value.

    Raises:
        KeyError: If strict is True and config not found.
        ValueError: If strict is True and value is empty.
    """
    try:
        value = (
            os.environ[config_name]
            if strict
            else os.environ.get(config_name) or default_value
        )
        if strict and (value is None or value.strip() == ""):
            raise ValueError(f"Configuration '{config_name}' is missing or empty.")
        return value
    except KeyError as error:
        logger.error(
            "Configuration '%s' not found in environment variables: %s",
            config_name,
            error,
        )
        raise
    except ValueError as error:
        logger.error("Configuration '%s' is empty: %s", config_name, error)
        raise


def get_bool_config(key: str, default_value: bool = False) -> bool:
    """Retrieve config value as boolean.

    Args:
        key: Configuration key.
        default_value: Default if missing or invalid.

    Returns:
        Boolean value.
    """
    value = get_configs(key)
    if not value:
        return default_value

    value = value.strip().lower()
    if value in {"true", "1", "yes", "on"}:
        return True
    elif value in {"false", "0", "no", "off"}:
        return False
    return default_value


def set_configs(config_name: str, config_value: Any) -> None:
    """Set environment variable configuration.

    Args:
        config_name: Configuration name.
        config_value: Configuration value.

    Raises:
        ValueError: If config_name is empty.
    """
    if not config_name:
        error_message = (
            f"Cannot set configuration. Invalid config_name '{config_name}'."
        )
        logger.error(error_message)
        raise ValueError(error_message)

    try:
        if isinstance(config_value, bool):
            config_value = str(config_value).lower()
        os.environ[config_name] = str(config_value)
    except Exception as error:
        logger.error("Failed to set configuration '%s': %s", config_name, error)
        raise


def create_tables(models: List[Any]) -> None:
    """Create tables for given Peewee models if they don't exist.

    Args:
        models: List of Peewee Model classes.
    """
    if not models:
        logger.warning("No models provided for table creation.")
        return

    try:
        databases = {}
        for model in models:
            database = model._meta.database
            if database not in databases:
                databases[database] = []
            databases[database].append(model)

        for database, db_models in databases.items():
            with database.atomic():
                existing_tables = set(database.get_tables())
                tables_to_create = [
                    model
                    for model in db_models
                    if model._meta.table_name not in existing_tables
                ]

                if tables_to_create:
                    database.create_tables(tables_to_create)
                    logger.info(
                        "Created tables: %s",
                        [model._meta.table_name for model in tables_to_create],
                    )
                else:
                    logger.debug("No new tables to create.")

    except DatabaseError as e:
        logger.error("An error occurred while creating tables: %s", e)
        raise
