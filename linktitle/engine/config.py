"""Configuration helpers for the link title engine."""

from __future__ import annotations

import copy
import logging
import os
import re
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Protocol, Tuple

import yaml

from ..errors import PolicyRejection
from .types import DomainPolicy, TemplateRule

logger = logging.getLogger(__name__)

API_KEY_LENGTH = 32
PLACEHOLDER_STRATEGIES = ("suffix", "invisible")
CONFIG_ENV_VAR = "LINKTITLE_CONFIG"
DEFAULT_CONFIG_FILE = "linktitle.yaml"

_BLACKLIST_SEPARATORS = re.compile(r"[,\n]")


@dataclass(frozen=True)
class Configuration:
    """Settings snapshot read at the start of every conversion."""

    max_title_length: int = 0
    preserve_selection_as_title: bool = False
    enhance_on_paste: bool = True
    enhance_on_drop: bool = True
    title_service_api_key: str = ""
    website_blacklist: str = ""
    custom_title_templates: Tuple[Dict[str, str], ...] = ()
    html_link: bool = False
    placeholder_text: str = "Fetching Title"
    placeholder_strategy: str = "suffix"
    # Set when a malformed service key was cleared on load or save; never persisted.
    title_service_key_rejected: bool = False

    def policy(self) -> DomainPolicy:
        return DomainPolicy(
            blacklist=parse_blacklist(self.website_blacklist),
            templates=parse_templates(self.custom_title_templates),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["custom_title_templates"] = [dict(rule) for rule in self.custom_title_templates]
        data.pop("title_service_key_rejected")
        return data


DEFAULTS: Dict[str, Any] = Configuration().to_dict()


def parse_blacklist(raw: str) -> Tuple[str, ...]:
    """Split a comma or newline separated blacklist into trimmed entries."""

    if not raw:
        return ()
    entries = (piece.strip() for piece in _BLACKLIST_SEPARATORS.split(raw))
    return tuple(entry for entry in entries if entry)


def parse_templates(raw: Any) -> Tuple[TemplateRule, ...]:
    """Turn ``{domain, search, replace}`` mappings into ordered rules."""

    rules: List[TemplateRule] = []
    for index, item in enumerate(raw or (), start=1):
        if not isinstance(item, dict):
            logger.warning("Ignoring title template %d: expected a mapping, got %r", index, item)
            continue
        domain = str(item.get("domain") or "").strip()
        search = str(item.get("search") or "")
        if not domain or not search:
            logger.warning("Ignoring title template %d: domain and search are required", index)
            continue
        rules.append(TemplateRule(domain=domain, search=search, replace=str(item.get("replace") or "")))
    return tuple(rules)


def validate_api_key(key: str) -> str:
    """Return the trimmed key, raising ``PolicyRejection`` if malformed."""

    key = (key or "").strip()
    if key and len(key) != API_KEY_LENGTH:
        raise PolicyRejection(
            f"Title service API key must be exactly {API_KEY_LENGTH} characters",
            setting="title_service_api_key",
        )
    return key


def build_config(data: Dict[str, Any]) -> Configuration:
    """Validate a merged settings mapping into a ``Configuration``."""

    key_rejected = False
    try:
        api_key = validate_api_key(str(data.get("title_service_api_key") or ""))
    except PolicyRejection as exc:
        logger.warning("%s; clearing %s", exc, exc.setting)
        api_key = ""
        key_rejected = True

    try:
        max_length = max(0, int(data.get("max_title_length") or 0))
    except (TypeError, ValueError):
        logger.warning("Invalid max_title_length %r; truncation disabled", data.get("max_title_length"))
        max_length = 0

    strategy = str(data.get("placeholder_strategy") or "suffix")
    if strategy not in PLACEHOLDER_STRATEGIES:
        logger.warning("Unknown placeholder_strategy %r; using 'suffix'", strategy)
        strategy = "suffix"

    templates = tuple(dict(item) for item in (data.get("custom_title_templates") or ()) if isinstance(item, dict))

    return Configuration(
        max_title_length=max_length,
        preserve_selection_as_title=bool(data.get("preserve_selection_as_title")),
        enhance_on_paste=bool(data.get("enhance_on_paste")),
        enhance_on_drop=bool(data.get("enhance_on_drop")),
        title_service_api_key=api_key,
        website_blacklist=str(data.get("website_blacklist") or ""),
        custom_title_templates=templates,
        html_link=bool(data.get("html_link")),
        placeholder_text=str(data.get("placeholder_text") or DEFAULTS["placeholder_text"]),
        placeholder_strategy=strategy,
        title_service_key_rejected=key_rejected,
    )


def default_config_path() -> Path:
    return Path(os.getenv(CONFIG_ENV_VAR, DEFAULT_CONFIG_FILE))


def load_config(path: str | Path | None = None) -> Configuration:
    """Read ``linktitle.yaml`` over ``DEFAULTS`` and validate the result.

    A missing file yields the defaults. Keys absent from the file keep
    their default value, and malformed values are logged and replaced
    rather than raised, so a bad settings file never disables the commands.
    """

    data: Dict[str, Any] = copy.deepcopy(DEFAULTS)

    if path is not None and Path(path).exists():
        with Path(path).open("r", encoding="utf-8") as stream:
            user = yaml.safe_load(stream) or {}
        merge_into(data, user)

    return build_config(data)


def merge_into(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Overlay user settings on ``base`` in place; nested mappings merge key by key."""

    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            merge_into(base[key], value)
        else:
            base[key] = value


class ConfigStore(Protocol):
    def load(self) -> Configuration: ...

    def save(self, config: Configuration) -> Configuration: ...


class YamlConfigStore:
    """Persist the configuration in a YAML file."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else default_config_path()

    def load(self) -> Configuration:
        return load_config(self.path)

    def save(self, config: Configuration) -> Configuration:
        config = _sanitize(config)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as stream:
            yaml.safe_dump(config.to_dict(), stream, sort_keys=False, allow_unicode=True)
        return config


@dataclass
class MemoryConfigStore:
    """Keep the configuration in memory, for hosts that own persistence."""

    config: Configuration = field(default_factory=Configuration)

    def load(self) -> Configuration:
        return self.config

    def save(self, config: Configuration) -> Configuration:
        self.config = _sanitize(config)
        return self.config


def _sanitize(config: Configuration) -> Configuration:
    try:
        validate_api_key(config.title_service_api_key)
    except PolicyRejection as exc:
        logger.warning("%s; clearing %s", exc, exc.setting)
        return replace(config, title_service_api_key="", title_service_key_rejected=True)
    return replace(config, title_service_key_rejected=False)
