import os
import json
import copy
from pathlib import Path
from typing import Dict, Any, Optional
from dotenv import load_dotenv
from onefocus.utils.exceptions import ConfigError
from onefocus.utils.logging import configure_logging, get_logger

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "1focus"

def get_default_config() -> Dict[str, Any]:
    """Returns default configuration settings."""
    return {
        "development": False,  # Enable debug logging
        "log_file": str(APP_SUPPORT_DIR / "1focus.log"),
        "store": {
            "path": str(APP_SUPPORT_DIR / "window-focus.db"),
            "max_rows": 500
        },
        "tracking": {
            "debounce_ms": 500,
            "poll_interval": 1.0,
            "preferred_app_id": None
        },
        "marker": {
            "enabled": True,
            "directory": str(Path.home() / ".db" / "1focus" / "vscode" / "last_window_open")
        },
        "commands": {
            "build_command": ["f", "commitPush"]
        },
        "flow": {
            "file_name": "flow.toml",
            "max_depth": 12
        }
    }

def default_config_path() -> Path:
    """Config location, overridable through ONEFOCUS_CONFIG."""
    override = os.getenv("ONEFOCUS_CONFIG")
    if override:
        return Path(override).expanduser()
    return APP_SUPPORT_DIR / "config.json"

def load_env_vars() -> None:
    """Load environment variables from .env file if it exists."""
    env_path = Path.cwd() / '.env'
    if env_path.exists():
        load_dotenv(env_path)
    else:
        get_logger(__name__).debug(f"No .env file found at {env_path}")

def replace_env_vars(config: Dict) -> Dict:
    """Recursively replace environment variables in config values."""
    result = {}
    missing_vars = []

    for key, value in config.items():
        if isinstance(value, dict):
            result[key] = replace_env_vars(value)
        elif isinstance(value, str):
            # Handle ${VAR} syntax
            if value.startswith('${') and value.endswith('}'):
                env_var = value[2:-1]
                if env_var not in os.environ:
                    missing_vars.append(env_var)
                else:
                    result[key] = os.environ[env_var]
            # Handle $VAR syntax
            elif value.startswith('$') and len(value) > 1:
                env_var = value[1:]
                if env_var not in os.environ:
                    missing_vars.append(env_var)
                else:
                    result[key] = os.environ[env_var]
            else:
                result[key] = value
        else:
            result[key] = value

    if missing_vars:
        error_msg = "\nMissing required environment variables:\n"
        for var in missing_vars:
            error_msg += f"- {var}\n"
        error_msg += "\nPlease set these in your .env file."
        raise ConfigError(error_msg)

    return result

def merge_defaults(config: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
    """Fill keys missing from config with values from defaults."""
    merged = copy.deepcopy(defaults)
    for key, value in config.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_defaults(value, merged[key])
        else:
            merged[key] = value
    return merged

def ensure_config_exists(config_path: Optional[Path] = None) -> Path:
    """Create default config if it doesn't exist. Returns config path."""
    config_path = Path(config_path) if config_path else default_config_path()
    if not config_path.exists():
        logger = get_logger(__name__)
        logger.warning(f"Config file not found at {config_path}")

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, 'w') as f:
            json.dump(get_default_config(), f, indent=2)

        logger.info(f"Created default config at {config_path}")

    return config_path

def load_config(config_path) -> Dict[str, Any]:
    """Loads a JSON config file, fills defaults and replaces environment variables."""
    try:
        with open(config_path, 'r') as f:
            config = json.load(f)
    except FileNotFoundError:
        raise ConfigError(f"Configuration file not found at {config_path}")
    except json.JSONDecodeError:
        raise ConfigError(f"Error decoding json at file: {config_path}")

    if not isinstance(config, dict):
        raise ConfigError(f"Configuration at {config_path} must be a JSON object")

    return replace_env_vars(merge_defaults(config, get_default_config()))

def get_config(config: Dict[str, Any], key: str, default: Any = None) -> Any:
    """Reads a dotted key such as 'store.path'."""
    current: Any = config
    for part in key.split('.'):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current

def set_config(config: Dict[str, Any], key: str, value: Any) -> None:
    """Writes a dotted key, creating intermediate sections."""
    parts = key.split('.')
    current = config
    for part in parts[:-1]:
        current = current.setdefault(part, {})
    current[parts[-1]] = value

def is_dev_mode(config: Dict[str, Any]) -> bool:
    return bool(config.get("development", False))

def load_config_and_logging(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Loads the configuration and configures logging from it."""
    try:
        config_path = ensure_config_exists(config_path)
    except OSError as e:
        raise ConfigError(f"Error creating configuration at {config_path}: {e}")
    load_env_vars()

    config = load_config(config_path)
    log_file = config.get("log_file")
    configure_logging(
        development=is_dev_mode(config),
        log_file=Path(log_file) if log_file else None
    )
    return config
