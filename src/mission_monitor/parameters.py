# src/mission_monitor/parameters.py
"""
Parameters Module - Central Configuration Management
=====================================================

This module provides the Parameters class for loading and accessing
configuration values from YAML files.

Project Information:
- Project Name: ASV Mission Monitor

Layout of config.yaml:
    Mission   grouped: geofence tolerance, grid geometry, variant table
    Store     grouped: REST store URL, key, row id, timeout
    Logging   flattened: LOG_LEVEL, LOG_FORMAT, SUMMARY_INTERVAL_S

Grouped sections stay dictionaries (Parameters.Mission['TOLERANCE_M']);
other sections are flattened into upper-case class attributes
(Parameters.LOG_LEVEL).
"""

import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from mission_monitor.config_validator import validate_mission_config
from mission_monitor.mission_config import MissionConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = str(Path(__file__).resolve().parents[2] / 'configs' / 'config.yaml')


class Parameters:
    """
    Central configuration class for the mission monitor.
    Configuration values are set as class variables on load.
    """

    # Raw config storage for MissionConfig construction
    _raw_config: Dict[str, Any] = {}
    _config_file: Optional[str] = None
    _reload_lock = threading.Lock()

    # Sections kept as dictionaries instead of flattened
    _GROUPED_SECTIONS = ['Mission', 'Store']

    Mission: Dict[str, Any] = {}
    Store: Dict[str, Any] = {}
    LOG_LEVEL: str = 'INFO'
    LOG_FORMAT: str = '%(asctime)s [%(levelname)s] %(message)s'
    SUMMARY_INTERVAL_S: float = 15.0

    @classmethod
    def load_config(cls, config_file: Optional[str] = None) -> None:
        """
        Load configuration from a YAML file and set class variables.

        Raises:
            OSError: If the file cannot be read.
            yaml.YAMLError: If the file is not valid YAML.
            ValueError: If the top level is not a mapping.
        """
        config_file = config_file or os.environ.get('MISSION_MONITOR_CONFIG') or DEFAULT_CONFIG_FILE
        with open(config_file, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}
        if not isinstance(config, dict):
            raise ValueError(f"{config_file}: top level must be a mapping")

        cls._raw_config = config
        cls._config_file = config_file

        for section, params in config.items():
            if params is None:
                continue
            if section in cls._GROUPED_SECTIONS:
                setattr(cls, section, params)
            elif isinstance(params, dict):
                for key, value in params.items():
                    setattr(cls, key.upper(), value)
            else:
                setattr(cls, section, params)

        # Non-blocking: problems are logged, callers decide whether to stop
        validate_mission_config(config)
        logger.debug(f"Configuration loaded from {config_file}")

    @classmethod
    def get_section(cls, section_name: str) -> dict:
        """
        Get all parameters in a section as a dictionary.

        Returns:
            dict: The section parameters, or empty dict if not found
        """
        section = getattr(cls, section_name, {})
        return section if isinstance(section, dict) else {}

    @classmethod
    def raw_config(cls) -> Dict[str, Any]:
        return cls._raw_config

    @classmethod
    def mission_config(cls) -> MissionConfig:
        """
        Build the immutable MissionConfig from the loaded configuration.

        Raises:
            ValueError: If the Mission section is structurally invalid.
        """
        return MissionConfig.from_dict(cls._raw_config)

    @classmethod
    def reload_config(cls, config_file: Optional[str] = None) -> bool:
        """
        Reload configuration from disk.

        Args:
            config_file: Path to the config file (default: last loaded file)

        Returns:
            bool: True if reload was successful, False otherwise
        """
        with cls._reload_lock:
            target = config_file or cls._config_file
            try:
                logger.info(f"Reloading configuration from {target or DEFAULT_CONFIG_FILE}")
                cls.load_config(target)
                logger.info("Configuration reloaded successfully")
                return True
            except (OSError, yaml.YAMLError, ValueError) as e:
                logger.error(f"Failed to reload configuration: {e}")
                return False


# Load the configurations upon module import
if os.path.exists(os.environ.get('MISSION_MONITOR_CONFIG') or DEFAULT_CONFIG_FILE):
    Parameters.load_config()
