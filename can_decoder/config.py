"""
Configuration management for the CAN CBOR decoder.

This module provides centralized configuration management, supporting:
- Loading from JSON config files
- Environment variable overrides
- Command line overrides applied by the CLI
- Validation of all settings
"""

import os
import json
import logging
from dataclasses import dataclass, asdict
from typing import Optional, List
from pathlib import Path

from can_decoder.constants import (
    HEARTBEAT_ID_PREFIX, SAVVYCAN_TIMESTAMP_SCALE,
    LOG_LEVEL_DEFAULT, MAX_WORKERS_DEFAULT,
)
from can_decoder.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

USER_CONFIG_DIR = '.can_decoder'
USER_CONFIG_FILE = 'config.json'

_TRUE_STRINGS = {'1', 'true', 'yes', 'on'}


@dataclass
class DecoderSettings:
    """Frame classification and reassembly settings.

    Attributes:
        heartbeat_id_prefix: CAN ID text prefix of keep-alive frames
        lenient_decode: Treat malformed CBOR like incomplete CBOR and keep buffering
        savvycan_timestamp_scale: Factor converting SavvyCAN timestamps to seconds
    """
    heartbeat_id_prefix: str = HEARTBEAT_ID_PREFIX
    lenient_decode: bool = False
    savvycan_timestamp_scale: float = SAVVYCAN_TIMESTAMP_SCALE

    def validate(self) -> List[str]:
        """Validate settings and return list of error messages (empty if valid)."""
        errors = []
        if not self.heartbeat_id_prefix or not isinstance(self.heartbeat_id_prefix, str):
            errors.append("Heartbeat ID prefix must be a non-empty string")
        if not isinstance(self.savvycan_timestamp_scale, (int, float)) or self.savvycan_timestamp_scale <= 0:
            errors.append("SavvyCAN timestamp scale must be a positive number")
        return errors


@dataclass
class OutputSettings:
    """Report output settings.

    Attributes:
        verbose: Print per-frame annotations and counters
        show_frames: Print every frame as it is classified
        group_by_id: Print the grouped-by-ID view after decoding
        hide_accounted: Grouped view shows only unaccounted frames
        hide_unaccounted: Grouped view shows only CBOR and heartbeat frames
    """
    verbose: bool = False
    show_frames: bool = True
    group_by_id: bool = False
    hide_accounted: bool = False
    hide_unaccounted: bool = False

    def validate(self) -> List[str]:
        """Validate settings and return list of error messages (empty if valid)."""
        errors = []
        if self.hide_accounted and self.hide_unaccounted:
            errors.append("hide_accounted and hide_unaccounted are mutually exclusive")
        return errors


@dataclass
class AppSettings:
    """Application-level configuration settings.

    Attributes:
        log_level: Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR')
        max_workers: Worker threads used to read captures in compare mode
    """
    log_level: str = LOG_LEVEL_DEFAULT
    max_workers: int = MAX_WORKERS_DEFAULT

    def validate(self) -> List[str]:
        """Validate settings and return list of error messages (empty if valid)."""
        errors = []
        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if str(self.log_level).upper() not in valid_levels:
            errors.append(f"Log level must be one of {sorted(valid_levels)}")
        if not isinstance(self.max_workers, int) or self.max_workers < 1:
            errors.append("Max workers must be an integer >= 1")
        return errors


class ConfigManager:
    """Centralized configuration manager for the decoder.

    Settings are loaded with priority (highest first):
    1. Command line overrides (applied by the caller via apply_overrides)
    2. JSON config file
    3. Environment variables
    4. Default values

    Attributes:
        decoder_settings: Classification and reassembly configuration
        output_settings: Report output configuration
        app_settings: Application-level configuration
        _config_file: Path to JSON config file (if loaded)
    """

    def __init__(self, config_file: Optional[str] = None, load_defaults: bool = True):
        """Initialize ConfigManager.

        Args:
            config_file: Optional path to JSON config file. If None, will try
                         ~/.can_decoder/config.json
            load_defaults: If False, skip environment and default file lookup

        Raises:
            ConfigurationError: If an explicitly requested config file is missing
                                or cannot be parsed
        """
        self.decoder_settings = DecoderSettings()
        self.output_settings = OutputSettings()
        self.app_settings = AppSettings()
        self._config_file: Optional[str] = None

        if load_defaults:
            self._load_from_environment()
        if config_file:
            if not self._load_from_file(config_file):
                raise ConfigurationError(f"Could not load config file {config_file}",
                                         setting_name='config_file', setting_value=config_file)
        elif load_defaults:
            self._load_from_default_locations()

        errors = self.validate()
        if errors:
            logger.warning(f"Configuration validation errors: {errors}")

    def _load_from_environment(self) -> None:
        """Load configuration from environment variables."""
        log_level = os.environ.get('CAN_DECODER_LOG_LEVEL') or os.environ.get('LOG_LEVEL')
        if log_level:
            self.app_settings.log_level = log_level.upper()

        prefix = os.environ.get('CAN_DECODER_HEARTBEAT_PREFIX')
        if prefix:
            self.decoder_settings.heartbeat_id_prefix = prefix

        lenient = os.environ.get('CAN_DECODER_LENIENT_DECODE')
        if lenient is not None:
            self.decoder_settings.lenient_decode = lenient.strip().lower() in _TRUE_STRINGS

        workers = os.environ.get('CAN_DECODER_MAX_WORKERS')
        if workers:
            try:
                self.app_settings.max_workers = int(workers)
            except (ValueError, TypeError):
                logger.warning(f"Invalid CAN_DECODER_MAX_WORKERS environment variable: {workers}")

    def _load_from_file(self, file_path: str) -> bool:
        """Load configuration from JSON file.

        Args:
            file_path: Path to JSON config file

        Returns:
            True if loaded successfully, False otherwise
        """
        if not os.path.exists(file_path):
            logger.debug(f"Config file not found: {file_path}")
            return False

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse config file {file_path}: {e}")
            return False
        except OSError as e:
            logger.error(f"Failed to load config file {file_path}: {e}", exc_info=True)
            return False

        decoder_data = data.get('decoder_settings', {})
        if 'heartbeat_id_prefix' in decoder_data:
            self.decoder_settings.heartbeat_id_prefix = str(decoder_data['heartbeat_id_prefix'])
        if 'lenient_decode' in decoder_data:
            self.decoder_settings.lenient_decode = bool(decoder_data['lenient_decode'])
        if 'savvycan_timestamp_scale' in decoder_data:
            try:
                self.decoder_settings.savvycan_timestamp_scale = float(decoder_data['savvycan_timestamp_scale'])
            except (ValueError, TypeError):
                logger.warning(f"Invalid timestamp scale in config: {decoder_data['savvycan_timestamp_scale']}")

        output_data = data.get('output_settings', {})
        for name in ('verbose', 'show_frames', 'group_by_id', 'hide_accounted', 'hide_unaccounted'):
            if name in output_data:
                setattr(self.output_settings, name, bool(output_data[name]))

        app_data = data.get('app_settings', {})
        if 'log_level' in app_data:
            self.app_settings.log_level = str(app_data['log_level']).upper()
        if 'max_workers' in app_data:
            try:
                self.app_settings.max_workers = int(app_data['max_workers'])
            except (ValueError, TypeError):
                logger.warning(f"Invalid max_workers in config: {app_data['max_workers']}")

        self._config_file = file_path
        logger.info(f"Loaded configuration from {file_path}")
        return True

    def _load_from_default_locations(self) -> None:
        """Try loading from the user config file."""
        user_config_file = Path.home() / USER_CONFIG_DIR / USER_CONFIG_FILE
        if user_config_file.exists():
            self._load_from_file(str(user_config_file))

    def apply_overrides(self, **overrides) -> None:
        """Apply command line overrides; None values leave the setting untouched.

        Raises:
            ConfigurationError: If an override names an unknown setting or the
                                result is invalid
        """
        sections = (self.decoder_settings, self.output_settings, self.app_settings)
        for name, value in overrides.items():
            if value is None:
                continue
            for section in sections:
                if hasattr(section, name):
                    setattr(section, name, value)
                    break
            else:
                raise ConfigurationError(f"Unknown setting: {name}", setting_name=name, setting_value=value)

        errors = self.validate()
        if errors:
            raise ConfigurationError("; ".join(errors))

    def save_to_file(self, file_path: Optional[str] = None) -> bool:
        """Save current configuration to JSON file.

        Args:
            file_path: Optional path to save to. If None, uses _config_file or creates user config.

        Returns:
            True if saved successfully, False otherwise
        """
        save_path = file_path or self._config_file
        if not save_path:
            save_path = str(Path.home() / USER_CONFIG_DIR / USER_CONFIG_FILE)

        data = {
            'decoder_settings': asdict(self.decoder_settings),
            'output_settings': asdict(self.output_settings),
            'app_settings': asdict(self.app_settings),
        }
        try:
            os.makedirs(os.path.dirname(os.path.abspath(save_path)), exist_ok=True)
            with open(save_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save config file {save_path}: {e}", exc_info=True)
            return False

        self._config_file = save_path
        logger.info(f"Saved configuration to {save_path}")
        return True

    @property
    def config_file(self) -> Optional[str]:
        return self._config_file

    def validate(self) -> List[str]:
        """Validate all configuration settings.

        Returns:
            List of error messages (empty if all valid)
        """
        errors = []
        errors.extend(self.decoder_settings.validate())
        errors.extend(self.output_settings.validate())
        errors.extend(self.app_settings.validate())
        return errors
