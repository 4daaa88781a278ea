"""
Configuration management for MCP App Builder
"""

import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, asdict, field, is_dataclass
from typing import Optional, Dict, Any

from .schema_validator import CONFIG_FILE_NAME, TOOLS_FILE_NAME

logger = logging.getLogger(__name__)


@dataclass
class ValidationConfig:
    """Which file names hold which document kind"""
    config_file_name: str = CONFIG_FILE_NAME
    tools_file_name: str = TOOLS_FILE_NAME


@dataclass
class GenerationConfig:
    """Where generated type modules are written, relative to the tools file"""
    output_dir: str = "types"
    output_file: str = "tools_generated.py"


@dataclass
class TestingConfig:
    """Defaults for derived test suites"""
    __test__ = False

    default_timeout: Optional[float] = 30.0  # seconds, None disables
    simulated_latency: float = 0.01  # seconds, simulated invoker only
    invoker: Optional[str] = None  # "module:attribute" of an invocation callable


@dataclass
class Config:
    """Main configuration class"""
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    testing: TestingConfig = field(default_factory=TestingConfig)
    log_level: str = "INFO"
    debug: bool = False

    def load_config(self, config_path: str = "mcp-builder.json"):
        """Load configuration from file"""
        config_file = Path(config_path)

        if config_file.exists():
            try:
                with open(config_file, 'r') as f:
                    config_data = json.load(f)

                if not isinstance(config_data, dict):
                    raise ValueError(f"expected a JSON object, got {type(config_data).__name__}")

                # Update configuration with loaded data
                for section, values in config_data.items():
                    if not hasattr(self, section):
                        logger.warning(f"Ignoring unknown config section: {section}")
                        continue
                    section_obj = getattr(self, section)
                    if is_dataclass(section_obj):
                        if not isinstance(values, dict):
                            logger.warning(f"Ignoring config section {section}: expected an object")
                            continue
                        for key, value in values.items():
                            if hasattr(section_obj, key):
                                setattr(section_obj, key, value)
                    else:
                        setattr(self, section, values)

                logger.debug(f"Configuration loaded from {config_path}")

            except (OSError, ValueError) as e:
                logger.error(f"Error loading configuration: {e}")

    def save_config(self, config_path: str = "mcp-builder.json"):
        """Save current configuration to file"""
        config_file = Path(config_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        try:
            config_data = {
                'validation': asdict(self.validation),
                'generation': asdict(self.generation),
                'testing': asdict(self.testing),
                'log_level': self.log_level,
                'debug': self.debug
            }

            with open(config_file, 'w') as f:
                json.dump(config_data, f, indent=2)

            logger.info(f"Configuration saved to {config_path}")

        except OSError as e:
            logger.error(f"Error saving configuration: {e}")

    def get_env_vars(self) -> Dict[str, Any]:
        """Get configuration from environment variables"""
        env_vars = {}

        if os.getenv('MCP_BUILDER_LOG_LEVEL'):
            env_vars['log_level'] = os.getenv('MCP_BUILDER_LOG_LEVEL')
        if os.getenv('MCP_BUILDER_DEBUG'):
            env_vars['debug'] = os.getenv('MCP_BUILDER_DEBUG').lower() == 'true'
        if os.getenv('MCP_BUILDER_TEST_TIMEOUT'):
            env_vars['default_timeout'] = float(os.getenv('MCP_BUILDER_TEST_TIMEOUT'))

        return env_vars

    def apply_env_vars(self):
        """Overlay environment variables on the loaded configuration"""
        env_vars = self.get_env_vars()

        if 'log_level' in env_vars:
            self.log_level = env_vars['log_level']
        if 'debug' in env_vars:
            self.debug = env_vars['debug']
        if 'default_timeout' in env_vars:
            self.testing.default_timeout = env_vars['default_timeout']


# Global configuration instance (lazy-loaded)
_config = None

def get_config() -> Config:
    """Get the global config instance (lazy-loaded)"""
    global _config
    if _config is None:
        _config = Config()
        _config.apply_env_vars()
    return _config
