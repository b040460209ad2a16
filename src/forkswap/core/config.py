"""Configuration data structures and loading.

Provides the immutable ForkSwapConfig loaded once at CLI entry point from
/data/fork_swap.toml (or $FORK_SWAP_CONFIG). A missing file means defaults,
which match the stock comma device layout.
"""

import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path

import tomlkit

CONFIG_ENV_VAR = "FORK_SWAP_CONFIG"
DEFAULT_CONFIG_PATH = Path("/data/fork_swap.toml")
DEFAULT_DATA_ROOT = Path("/data")

MAX_LOG_SIZE = 1048576  # 1 MiB

# Fields that hold paths under the data root; rebased by `data_root`.
_DATA_PATHS = {
    "openpilot_dir": "openpilot",
    "forks_dir": "forks",
    "current_fork_file": "current_fork.txt",
    "params_path": "params",
    "log_file": "fork_swap.log",
    "journal_file": "fork_swap.journal.json",
}


@dataclass(frozen=True)
class ForkSwapConfig:
    """Immutable configuration for the fork manager.

    All fields are read-only after construction.
    """

    openpilot_dir: Path = DEFAULT_DATA_ROOT / "openpilot"
    forks_dir: Path = DEFAULT_DATA_ROOT / "forks"
    current_fork_file: Path = DEFAULT_DATA_ROOT / "current_fork.txt"
    params_path: Path = DEFAULT_DATA_ROOT / "params"
    log_file: Path = DEFAULT_DATA_ROOT / "fork_swap.log"
    journal_file: Path = DEFAULT_DATA_ROOT / "fork_swap.journal.json"
    lock_file: Path = Path("/tmp/fork_swap.lock")
    max_log_size: int = MAX_LOG_SIZE
    max_retries: int = 3
    retry_delay: float = 2.0
    owner: str = "comma:comma"
    git_host: str = "github.com"
    script_repo_url: str = "https://github.com/james5294/openpilot.git"
    script_repo_branch: str = "master"
    script_relpath: str = "scripts/fork_swap.py"
    script_source_fork: str = "james5294"
    use_sudo: bool = True

    @property
    def manager_script(self) -> Path:
        """The manager's own launcher script inside the live working copy."""
        return self.openpilot_dir / self.script_relpath

    @staticmethod
    def for_data_root(data_root: Path, **overrides: object) -> "ForkSwapConfig":
        """Build a config whose device paths all live under data_root.

        The lock file moves under data_root as well so that tests and
        alternate installs never share /tmp/fork_swap.lock.

        Example:
            >>> config = ForkSwapConfig.for_data_root(Path("/mnt/data"))
            >>> config.forks_dir
            PosixPath('/mnt/data/forks')
        """
        paths: dict[str, object] = {
            name: data_root / relative for name, relative in _DATA_PATHS.items()
        }
        paths["lock_file"] = data_root / "fork_swap.lock"
        paths.update(overrides)
        return replace(ForkSwapConfig(), **paths)  # type: ignore[arg-type]


def default_config_path() -> Path:
    """Config file location, honoring $FORK_SWAP_CONFIG."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config(path: Path | None = None) -> ForkSwapConfig:
    """Load config from a TOML file if present; otherwise return defaults.

    Example config:
      data_root = "/data"
      owner = "comma:comma"
      max_retries = 3

      [self_update]
      repo_url = "https://github.com/james5294/openpilot.git"
      branch = "master"

    Raises:
        ValueError: If the file contains unknown keys or wrongly typed values
    """
    config_path = path if path is not None else default_config_path()
    if not config_path.exists():
        return ForkSwapConfig()

    data = tomllib.loads(config_path.read_text(encoding="utf-8"))

    self_update = data.pop("self_update", {})
    if "repo_url" in self_update:
        data["script_repo_url"] = self_update["repo_url"]
    if "branch" in self_update:
        data["script_repo_branch"] = self_update["branch"]
    if "script" in self_update:
        data["script_relpath"] = self_update["script"]
    if "source_fork" in self_update:
        data["script_source_fork"] = self_update["source_fork"]

    data_root = data.pop("data_root", None)
    base = (
        ForkSwapConfig.for_data_root(Path(data_root).expanduser())
        if data_root
        else ForkSwapConfig()
    )

    known = {f.name: f for f in fields(ForkSwapConfig)}
    overrides: dict[str, object] = {}
    for key, value in data.items():
        if key not in known:
            raise ValueError(f"Unknown key '{key}' in {config_path}")
        default = getattr(base, key)
        if isinstance(default, Path):
            overrides[key] = Path(str(value)).expanduser()
        elif isinstance(default, bool):
            if not isinstance(value, bool):
                raise ValueError(f"'{key}' must be true or false in {config_path}")
            overrides[key] = value
        elif isinstance(default, (int, float)):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"'{key}' must be a number in {config_path}")
            overrides[key] = type(default)(value)
        else:
            overrides[key] = str(value)

    return replace(base, **overrides)  # type: ignore[arg-type]


def save_config(config: ForkSwapConfig, path: Path) -> None:
    """Write config as TOML, creating the parent directory if needed."""
    doc = tomlkit.document()
    doc.add(tomlkit.comment("fork-swap configuration"))

    for f in fields(ForkSwapConfig):
        if f.name.startswith("script_"):
            continue
        value = getattr(config, f.name)
        doc[f.name] = str(value) if isinstance(value, Path) else value

    self_update = tomlkit.table()
    self_update["repo_url"] = config.script_repo_url
    self_update["branch"] = config.script_repo_branch
    self_update["script"] = config.script_relpath
    self_update["source_fork"] = config.script_source_fork
    doc["self_update"] = self_update

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(tomlkit.dumps(doc), encoding="utf-8")
