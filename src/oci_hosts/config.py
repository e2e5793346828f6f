from __future__ import annotations

import argparse
import json
import os
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from . import __version__
from .hosts import DEFAULT_DOMAIN_SUFFIX
from .sync import DEFAULT_HOSTS_PATH
from .util.errors import ConfigError

# --------
# Defaults
# --------
AUTH_METHODS = {"auto", "config", "instance", "resource", "security_token"}
ALLOWED_CONFIG_KEYS = {
    "compartment",
    "hosts",
    "oci_config",
    "profile",
    "auth",
    "domain_suffix",
    "log_level",
    "json_logs",
    "progress",
}
BOOL_CONFIG_KEYS = {"json_logs", "progress"}
PATH_CONFIG_KEYS = {"hosts", "oci_config"}
STR_CONFIG_KEYS = {"compartment", "profile", "auth", "domain_suffix", "log_level"}


@dataclass(frozen=True)
class RunConfig:
    compartment: str
    hosts: Path = DEFAULT_HOSTS_PATH
    domain_suffix: str = DEFAULT_DOMAIN_SUFFIX
    print_only: bool = False

    # Auth
    auth: str = "auto"  # auto|config|instance|resource|security_token
    oci_config: Optional[Path] = None
    profile: Optional[str] = None

    # Output
    log_level: str = "INFO"
    json_logs: bool = False
    progress: Optional[bool] = None  # None: enabled when stderr is a TTY


def _parse_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text) or {}
    except Exception as e:
        raise ValueError(f"Failed to parse config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("Top-level config must be an object")
    return data


def _env_str(name: str) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None:
        return None
    raw = raw.strip()
    if not raw:
        return None
    return raw


def _env_bool(name: str) -> Optional[bool]:
    raw = os.getenv(name)
    if raw is None:
        return None
    raw = raw.strip().lower()
    if not raw:
        return None
    return raw in {"1", "true", "yes", "on"}


def _coerce_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        raw = value.strip().lower()
        if raw in {"1", "true", "yes", "on"}:
            return True
        if raw in {"0", "false", "no", "off"}:
            return False
    raise ValueError(f"Config field '{key}' must be a boolean")


def _normalize_config_file(data: Dict[str, Any]) -> Dict[str, Any]:
    unknown = sorted(set(data.keys()) - ALLOWED_CONFIG_KEYS)
    if unknown:
        warnings.warn(f"Unknown config keys ignored: {', '.join(unknown)}")
    normalized: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in ALLOWED_CONFIG_KEYS or value is None:
            continue
        if key in BOOL_CONFIG_KEYS:
            normalized[key] = _coerce_bool(key, value)
        elif key in PATH_CONFIG_KEYS:
            if not isinstance(value, (str, Path)):
                raise ValueError(f"Config field '{key}' must be a string path")
            normalized[key] = value
        elif key in STR_CONFIG_KEYS:
            if not isinstance(value, str):
                raise ValueError(f"Config field '{key}' must be a string")
            normalized[key] = value
    auth = normalized.get("auth")
    if auth is not None:
        auth = auth.lower()
        if auth not in AUTH_METHODS:
            raise ValueError(f"Config field 'auth' must be one of: {', '.join(sorted(AUTH_METHODS))}")
        normalized["auth"] = auth
    return normalized


def _compact_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Drop keys with None values so they don't override lower-precedence config.
    """
    return {k: v for k, v in data.items() if v is not None}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="oci-hosts",
        description="Builds an /etc/hosts style file for an Oracle Cloud tenancy that spans multiple VCNs",
    )
    parser.add_argument(
        "compartment",
        nargs="?",
        default=None,
        help="The compartment OCID to query; specify the root compartment to traverse all compartments",
    )
    parser.add_argument(
        "hosts",
        nargs="?",
        type=Path,
        default=None,
        help=f"The file to write the discovered nodes to (default: {DEFAULT_HOSTS_PATH})",
    )
    parser.add_argument("--config", type=Path, help="Optional YAML/JSON settings file")
    parser.add_argument(
        "--oci-config",
        type=Path,
        default=None,
        help="OCI configuration file with paths to access keys etc",
    )
    parser.add_argument("--profile", default=None, help="OCI config profile (for config auth)")
    parser.add_argument(
        "--auth",
        default=None,
        choices=sorted(AUTH_METHODS),
        help="Auth method (default: auto)",
    )
    parser.add_argument(
        "--domain-suffix",
        default=None,
        help=f"DNS suffix appended after the VCN label (default: {DEFAULT_DOMAIN_SUFFIX})",
    )
    parser.add_argument(
        "--print",
        dest="print_only",
        action="store_true",
        default=False,
        help="Print the generated block to stdout instead of writing the hosts file",
    )
    parser.add_argument("--debug", action="store_true", default=False, help="Enable debug logging")
    parser.add_argument("--log-level", default=None, help="Log level (INFO, DEBUG, ...)")
    parser.add_argument(
        "--json-logs",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Enable JSON logs",
    )
    parser.add_argument(
        "--progress",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Show progress and a run summary (default: when stderr is a terminal)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load_run_config(
    args: Optional[argparse.Namespace] = None,
    argv: Optional[list[str]] = None,
) -> RunConfig:
    """
    Build RunConfig by merging defaults, optional config file, env vars, and CLI args.
    Precedence (low -> high): defaults < config file < env < CLI.
    """
    ns = args if args is not None else build_parser().parse_args(argv)

    base: Dict[str, Any] = {
        "compartment": None,
        "hosts": DEFAULT_HOSTS_PATH,
        "oci_config": None,
        "profile": None,
        "auth": "auto",
        "domain_suffix": DEFAULT_DOMAIN_SUFFIX,
        "log_level": "INFO",
        "json_logs": False,
        "progress": None,
    }

    file_cfg: Dict[str, Any] = {}
    if getattr(ns, "config", None):
        file_cfg = _normalize_config_file(_parse_config_file(Path(ns.config)))

    env_cfg: Dict[str, Any] = _compact_dict(
        {
            "compartment": _env_str("OCI_HOSTS_COMPARTMENT"),
            "hosts": _env_str("OCI_HOSTS_FILE"),
            "oci_config": _env_str("OCI_HOSTS_OCI_CONFIG"),
            "profile": _env_str("OCI_HOSTS_PROFILE"),
            "auth": _env_str("OCI_HOSTS_AUTH"),
            "domain_suffix": _env_str("OCI_HOSTS_DOMAIN_SUFFIX"),
            "log_level": _env_str("OCI_HOSTS_LOG_LEVEL"),
            "json_logs": _env_bool("OCI_HOSTS_JSON_LOGS"),
            "progress": _env_bool("OCI_HOSTS_PROGRESS"),
        }
    )

    cli_cfg: Dict[str, Any] = _compact_dict(
        {
            "compartment": getattr(ns, "compartment", None),
            "hosts": getattr(ns, "hosts", None),
            "oci_config": getattr(ns, "oci_config", None),
            "profile": getattr(ns, "profile", None),
            "auth": getattr(ns, "auth", None),
            "domain_suffix": getattr(ns, "domain_suffix", None),
            "log_level": "DEBUG" if getattr(ns, "debug", False) else getattr(ns, "log_level", None),
            "json_logs": getattr(ns, "json_logs", None),
            "progress": getattr(ns, "progress", None),
        }
    )

    merged = {**base, **file_cfg, **env_cfg, **cli_cfg}

    compartment = str(merged.get("compartment") or "").strip()
    if not compartment:
        raise ConfigError("A compartment OCID is required (positional argument or OCI_HOSTS_COMPARTMENT)")
    auth = str(merged["auth"] or "auto").lower()
    if auth not in AUTH_METHODS:
        raise ConfigError(f"Auth method must be one of: {', '.join(sorted(AUTH_METHODS))}")
    profile = merged.get("profile")
    oci_config = merged.get("oci_config")

    return RunConfig(
        compartment=compartment,
        hosts=Path(merged["hosts"]),
        domain_suffix=str(merged["domain_suffix"] or DEFAULT_DOMAIN_SUFFIX),
        print_only=bool(getattr(ns, "print_only", False)),
        auth=auth,
        oci_config=Path(oci_config).expanduser() if oci_config else None,
        profile=str(profile) if profile else None,
        log_level=(merged.get("log_level") or "INFO").upper(),
        json_logs=bool(merged["json_logs"]),
        progress=merged.get("progress"),
    )
