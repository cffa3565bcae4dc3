"""Configuration loading for the updateinfo parser."""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

import yaml
from jinja2 import Template

from .errors import ConfigInvalid, InputUnavailable
from .fetchers.updateinfo import is_url
from .filters import FilterConfig
from .render import default_template, load_template

logger = logging.getLogger(__name__)

DATE_LAYOUT = "%Y-%m-%d"
DEFAULT_AFTER_DATE = "2006-01-02"
SECURITY_TYPE = "security"

CONFIG_KEYS = {
    "before_date",
    "after_date",
    "packages",
    "template",
    "output",
    "type",
    "security",
    "verbose",
    "log_file",
}


@dataclass(frozen=True)
class Settings:
    """Validated inputs for one pipeline run."""

    source: str
    filters: FilterConfig
    template: Template
    output: Optional[str] = None


def load_config(config_path: str) -> dict:
    """Load configuration from YAML file."""
    config_file = Path(config_path)
    if not config_file.exists():
        raise ConfigInvalid(f"config file not found: {config_path}")

    try:
        with open(config_file, "r") as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigInvalid(f"failed loading config file '{config_path}': {e}") from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigInvalid(f"config file '{config_path}' must contain a mapping")

    unknown = set(config) - CONFIG_KEYS
    if unknown:
        logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")

    return config


def today() -> str:
    return date.today().strftime(DATE_LAYOUT)


def parse_date(value: str, label: str) -> date:
    """Parse a YYYY-MM-DD date string."""
    try:
        return datetime.strptime(str(value), DATE_LAYOUT).date()
    except ValueError as e:
        raise ConfigInvalid(f"failed parsing {label} date '{value}': {e}") from e


def read_packages_file(pkg_file: Optional[str]) -> List[str]:
    """
    Read a package whitelist, one name per line.

    Lines are stripped; blank lines and '#' comments are ignored. An empty
    path yields an empty whitelist.
    """
    packages: List[str] = []

    if not pkg_file:
        return packages

    try:
        with open(pkg_file, "r") as f:
            for line in f:
                name = line.strip()
                if name and not name.startswith("#"):
                    packages.append(name)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigInvalid(f"failed reading packages file '{pkg_file}': {e}") from e

    logger.debug(f"Read {len(packages)} package names from {pkg_file}")
    return packages


def build_settings(
    source: str,
    before: Optional[str] = None,
    after: Optional[str] = None,
    packages_file: Optional[str] = None,
    template_file: Optional[str] = None,
    output: Optional[str] = None,
    update_type: str = "",
) -> Settings:
    """
    Validate all run inputs before the pipeline starts.

    Raises:
        InputUnavailable: If a local updateinfo file does not exist
        ConfigInvalid: If a date, packages file or template is unusable
    """
    if not is_url(source) and not Path(source).is_file():
        raise InputUnavailable(f"could not find updateinfo file '{source}'")

    filters = FilterConfig(
        before_date=parse_date(before or today(), "before"),
        after_date=parse_date(after or DEFAULT_AFTER_DATE, "after"),
        kind=update_type or "",
        package_whitelist=tuple(read_packages_file(packages_file)),
    )

    template = load_template(template_file) if template_file else default_template()

    return Settings(source=source, filters=filters, template=template, output=output or None)
