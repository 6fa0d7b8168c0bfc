"""Profiles, user settings and credential sources.

On disk::

    <config>/config.json          GlobalConfig (default profile, output format)
    <config>/profiles/<name>.json  one Profile per backend
    ./pbclient.json                optional project file naming a default profile
    <cache>/tokens/                diskcache token store (persist_tokens only)
    <data>/logs/                   crash logs

``<config>``, ``<cache>`` and ``<data>`` follow the XDG base directories on
Linux and the BSDs and live under ``~/.pbclient`` elsewhere. Profiles store
*where* a secret comes from (``env:VAR``, ``file:PATH``, ``prompt``,
``value:TEXT``), never the secret itself; :func:`build_credentials` reads
the secrets when a command runs.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from pbclient.exceptions import ConfigError
from pbclient.models import (
    AdminPassword,
    AuthMode,
    AuthProfile,
    CollectionPassword,
    Credential,
    CredentialConfig,
    GlobalConfig,
    NoAuth,
    Profile,
    StaticToken,
)

APP_NAME = "pbclient"
PROJECT_FILE = "pbclient.json"

M = TypeVar("M", bound=BaseModel)

# kind -> (XDG variable, default under $HOME, subdirectory of ~/.pbclient)
_DIRS = {
    "config": ("XDG_CONFIG_HOME", ".config", ""),
    "cache": ("XDG_CACHE_HOME", ".cache", "cache"),
    "data": ("XDG_DATA_HOME", ".local/share", "logs"),
}


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(kind: str) -> Path:
    env_var, home_default, fallback = _DIRS[kind]
    if _is_xdg_platform():
        root = os.environ.get(env_var) or str(Path.home() / home_default)
        path = Path(root) / APP_NAME
    else:
        path = Path.home() / f".{APP_NAME}" / fallback
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    return _app_dir("config")


def get_cache_dir() -> Path:
    return _app_dir("cache")


def get_data_dir() -> Path:
    return _app_dir("data")


def get_profiles_dir() -> Path:
    path = get_config_dir() / "profiles"
    path.mkdir(exist_ok=True)
    return path


def _atomic_write(path: Path, text: str) -> None:
    """Replace *path* with *text* in one rename; the file is private (0600)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        os.fchmod(fd, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


def _read_model(path: Path, model: type[M], what: str) -> M:
    try:
        return model.model_validate_json(path.read_text(encoding="utf-8"))
    except (ValidationError, ValueError) as exc:
        raise ConfigError(f"Invalid {what} at {path}: {exc}") from exc


def _write_model(path: Path, value: BaseModel) -> None:
    _atomic_write(path, json.dumps(value.model_dump(mode="json"), indent=2) + "\n")


def load_global_config() -> GlobalConfig:
    path = get_config_dir() / "config.json"
    return _read_model(path, GlobalConfig, "global config") if path.is_file() else GlobalConfig()


def save_global_config(config: GlobalConfig) -> None:
    _write_model(get_config_dir() / "config.json", config)


def _profile_path(name: str) -> Path:
    return get_profiles_dir() / f"{name}.json"


def list_profiles() -> list[str]:
    return sorted(p.stem for p in get_profiles_dir().glob("*.json"))


def profile_exists(name: str) -> bool:
    return _profile_path(name).is_file()


def load_profile(name: str) -> Profile:
    """Read profile *name*.

    Raises:
        ConfigError: The profile is missing or does not validate.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    return _read_model(path, Profile, f"profile '{name}'")


def save_profile(profile: Profile) -> None:
    _write_model(_profile_path(profile.name), profile)


def delete_profile(name: str) -> None:
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    path.unlink()


def load_project_config() -> Optional[dict[str, Any]]:
    """Return the parsed ``./pbclient.json``, or ``None`` when there is none."""
    path = Path.cwd() / PROJECT_FILE
    if not path.is_file():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc


def resolve_config(
    cli_profile: Optional[str] = None,
    cli_base_url: Optional[str] = None,
) -> tuple[GlobalConfig, Optional[Profile]]:
    """Pick the active profile and apply base URL overrides.

    The profile name comes from the first of: ``--profile``,
    ``PBCLIENT_PROFILE``, the project file, the global default, and (when
    ``auto_select_single_profile`` is on) the only saved profile. The base
    URL can be overridden by ``--base-url`` or ``PBCLIENT_BASE_URL``.
    """
    global_cfg = load_global_config()
    project = load_project_config() or {}
    name = (
        cli_profile
        or os.environ.get("PBCLIENT_PROFILE")
        or project.get("default_profile")
        or global_cfg.default_profile
    )
    if not name and global_cfg.auto_select_single_profile:
        saved = list_profiles()
        name = saved[0] if len(saved) == 1 else None
    if not name:
        return global_cfg, None

    profile = load_profile(name)
    base_url = cli_base_url or os.environ.get("PBCLIENT_BASE_URL")
    if base_url:
        profile.base_url = base_url
    return global_cfg, profile


def _from_env(name: str) -> str:
    value = os.environ.get(name)
    if value is None:
        raise ConfigError(f"Environment variable '{name}' is not set")
    return value


def _from_file(name: str) -> str:
    path = Path(name).expanduser()
    try:
        return path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        raise ConfigError(f"Credential file not found: {path}") from None
    except OSError as exc:
        raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc


_SOURCES: dict[str, Callable[[str], str]] = {
    "env": _from_env,
    "file": _from_file,
    "value": lambda text: text,
}


def resolve_credential(source: str) -> str:
    """Read the secret described by *source*.

    ``env:VAR`` reads an environment variable, ``file:PATH`` a file (surrounding
    whitespace stripped), ``value:TEXT`` is taken literally and ``prompt`` asks
    on the terminal.

    Raises:
        ConfigError: The source is unknown or cannot be read.
    """
    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError("Cannot prompt for a credential: stdin is not a TTY")
        return getpass.getpass("Credential: ")
    kind, sep, rest = source.partition(":")
    if not sep or kind not in _SOURCES:
        raise ConfigError(f"Unknown credential source format: {source}")
    return _SOURCES[kind](rest)


def _secret(source: Optional[str]) -> Optional[str]:
    return resolve_credential(source) if source else None


def _credential(auth: AuthProfile) -> Credential:
    if auth.mode == AuthMode.TOKEN:
        return StaticToken(token=_secret(auth.token_source))
    if auth.mode == AuthMode.ADMIN:
        return AdminPassword(email=auth.email, password=_secret(auth.password_source))
    if auth.mode == AuthMode.COLLECTION:
        return CollectionPassword(
            collection=auth.collection,
            identity=auth.identity,
            password=_secret(auth.password_source),
        )
    return NoAuth()


def build_credentials(profile: Profile) -> CredentialConfig:
    """Snapshot *profile* into the :class:`CredentialConfig` the client core uses.

    Secrets that have no source stay ``None``; the auth resolver reports them
    as :class:`~pbclient.exceptions.ConfigError` once a token is needed.
    """
    return CredentialConfig(base_url=profile.base_url, auth=_credential(profile.auth))
