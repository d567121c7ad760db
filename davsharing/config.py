"""
Config file handling.  A config file is a JSON (or YAML, if pyyaml is
installed) dict of sections, each section holding connection
parameters.  A section may inherit the parameters of another one:

    {
        "default": {"url": "https://cloud.example.com/remote.php/dav/", "username": "alice"},
        "work": {"inherits": "default", "username": "alice.work"}
    }
"""

import json
import logging
import os
from typing import Any, Dict, Optional

log = logging.getLogger("davsharing")


def config_section(config: Dict[str, Any], section: str = "default") -> Dict[str, Any]:
    """The parameters of a section, with inherited ones filled in"""
    if section not in config:
        return {}
    ret = {}
    parent = config[section].get("inherits")
    if parent:
        ret.update(config_section(config, parent))
    ret.update(config[section])
    ret.pop("inherits", None)
    return ret


def _config_locations():
    cfgdir = f"{os.environ.get('HOME', '/')}/.config"
    return (
        f"{cfgdir}/davsharing/davsharing.conf",
        f"{cfgdir}/davsharing/davsharing.yaml",
        f"{cfgdir}/davsharing/davsharing.json",
        f"{cfgdir}/davsharing.conf",
        "/etc/davsharing.conf",
    )


def read_config(fn: Optional[str]) -> Dict[str, Any]:
    """
    Reads the config file fn, or the first one found in the standard
    locations.  A missing or broken file gives an empty config.
    """
    if not fn:
        for config_file in _config_locations():
            cfg = read_config(config_file)
            if cfg:
                return cfg
        return {}

    try:
        with open(fn, "rb") as f:
            content = f.read()
    except FileNotFoundError:
        log.debug("no config file at %s", fn)
        return {}

    try:
        return _as_sections(json.loads(content), fn)
    except ValueError:
        pass

    ## yaml is an optional dependency
    try:
        import yaml
    except ImportError:
        log.error("config file %s is not valid json, and pyyaml is not installed", fn)
        return {}
    try:
        return _as_sections(yaml.load(content, yaml.SafeLoader), fn)
    except yaml.YAMLError:
        log.error("config file %s is neither valid json nor yaml.  It will be ignored", fn)
        return {}


def _as_sections(cfg: Any, fn: str) -> Dict[str, Any]:
    if not isinstance(cfg, dict):
        log.error("config file %s does not hold a dict of sections.  It will be ignored", fn)
        return {}
    return cfg
