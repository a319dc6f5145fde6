"""Configuration loading for the GSA feed client."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Optional, Tuple
from xml.etree import ElementTree as ET

from .models import FEED_SOURCE_WEB, FEED_TYPE_INCREMENTAL, validate_feed_type

logger = logging.getLogger(__name__)

DEFAULT_FEED_PORT = 19900
DEFAULT_DTD_PORT = 7800

USER_ENV_VAR = "GSA_ADMIN_USER"
PASSWORD_ENV_VAR = "GSA_ADMIN_PASSWORD"


@dataclass(frozen=True)
class PushConfig:
    """Everything the client needs to talk to the appliance."""

    endpoint: str
    dtd_system_id: str
    username: Optional[str] = None
    password: Optional[str] = None
    whitelist: Tuple[str, ...] = ()

    @classmethod
    def for_host(
        cls,
        host: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        whitelist: Tuple[str, ...] = (),
        feed_port: int = DEFAULT_FEED_PORT,
        dtd_port: int = DEFAULT_DTD_PORT,
    ) -> "PushConfig":
        return cls(
            endpoint=f"http://{host}:{feed_port}/xmlfeed",
            dtd_system_id=f"http://{host}:{dtd_port}/gsafeed.dtd",
            username=username,
            password=password,
            whitelist=tuple(whitelist),
        )


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class DatabaseConfig:
    connection_string: Optional[str] = None


@dataclass
class AppConfig:
    push: PushConfig
    site_url: str
    env_file: Optional[str] = None
    datasource: str = FEED_SOURCE_WEB
    feed_type: str = FEED_TYPE_INCREMENTAL
    raise_on_http_error: bool = True
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)


def _resolve_path(base_path: Path, target_path: str) -> str:
    """Resolve a path relative to the base config file if it's not absolute."""
    target = Path(target_path)
    if target.is_absolute():
        return str(target)
    return str((base_path.parent / target).resolve())


def parse_env_config(path: str) -> Dict[str, str]:
    """Parse environment variables from XML."""
    env_vars = {}
    if not path:
        return env_vars

    logger.info("Loading environment configuration from %s", path)
    try:
        tree = ET.parse(path)
        root = tree.getroot()
        for var in root.findall("variable"):
            name = var.attrib.get("name")
            value = var.text
            if name and value:
                env_vars[name] = value.strip()
    except Exception as exc:
        logger.warning("Failed to load environment config: %s", exc)
        raise

    return env_vars


def _parse_port(node: ET.Element, tag: str, default: int) -> int:
    text = node.findtext(tag)
    if not text:
        return default
    try:
        return int(text)
    except ValueError as exc:
        raise ValueError(f"<{tag}> must be an integer, got '{text}'") from exc


def _parse_bool(node: ET.Element, tag: str, default: bool) -> bool:
    text = (node.findtext(tag) or "").strip().lower()
    if not text:
        return default
    if text not in ("true", "false"):
        raise ValueError(f"<{tag}> must be 'true' or 'false', got '{text}'")
    return text == "true"


def parse_app_config(path: str) -> AppConfig:
    """Parse the main application configuration XML."""
    config_path = Path(path).resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    logger.info("Loading application configuration from %s", config_path)
    tree = ET.parse(config_path)
    root = tree.getroot()

    # Env
    env_node = root.find("env")
    env_file = (
        _resolve_path(config_path, env_node.text.strip())
        if env_node is not None and env_node.text
        else None
    )

    # Appliance
    gsa_node = root.find("gsa")
    host = gsa_node.findtext("host", "").strip() if gsa_node is not None else ""
    if not host:
        raise ValueError("Config missing <gsa><host>")

    username = (gsa_node.findtext("admin-user") or "").strip() or None
    password = (gsa_node.findtext("admin-password") or "").strip() or None

    whitelist_node = root.find("whitelist")
    whitelist: Tuple[str, ...] = ()
    if whitelist_node is not None:
        whitelist = tuple(
            item.text.strip()
            for item in whitelist_node.findall("type")
            if item.text and item.text.strip()
        )
    if not whitelist:
        logger.warning("Content type whitelist is empty; lifecycle pushes are disabled.")

    push = PushConfig.for_host(
        host,
        username=username,
        password=password,
        whitelist=whitelist,
        feed_port=_parse_port(gsa_node, "feed-port", DEFAULT_FEED_PORT),
        dtd_port=_parse_port(gsa_node, "dtd-port", DEFAULT_DTD_PORT),
    )

    site_url = root.findtext("site-url", "").strip()
    if not site_url:
        raise ValueError("Config missing <site-url>")

    datasource = root.findtext("datasource", FEED_SOURCE_WEB).strip()
    feed_type = validate_feed_type(
        root.findtext("feed-type", FEED_TYPE_INCREMENTAL).strip()
    )
    raise_on_http_error = _parse_bool(root, "raise-on-http-error", True)

    # Logging
    log_node = root.find("logging")
    logging_config = LoggingConfig()
    if log_node is not None:
        logging_config.level = log_node.findtext("level", "INFO")
        log_file = log_node.findtext("file")
        if log_file:
            logging_config.file = _resolve_path(config_path, log_file)

    # Database
    db_node = root.find("database")
    db_config = DatabaseConfig()
    if db_node is not None:
        db_config.connection_string = db_node.findtext("connection-string")

    return AppConfig(
        push=push,
        site_url=site_url,
        env_file=env_file,
        datasource=datasource,
        feed_type=feed_type,
        raise_on_http_error=raise_on_http_error,
        logging=logging_config,
        database=db_config,
    )


def apply_credential_overrides(config: AppConfig) -> AppConfig:
    """Let GSA_ADMIN_USER / GSA_ADMIN_PASSWORD replace the configured credentials."""
    username = os.environ.get(USER_ENV_VAR)
    password = os.environ.get(PASSWORD_ENV_VAR)
    if not username and not password:
        return config

    config.push = replace(
        config.push,
        username=username or config.push.username,
        password=password or config.push.password,
    )
    return config
