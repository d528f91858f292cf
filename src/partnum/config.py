from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

try:
    import tomllib as toml
except ModuleNotFoundError:  # Python < 3.11
    import tomli as toml  # type: ignore

from partnum.utility import UserInputError, merge_nested
from partnum.workspace import workspace_dir

# Built-in fallbacks for every key the tool reads.
DEFAULTS: dict[str, dict[str, Any]] = {
    "BEHAVIOUR": {
        "MAX_N": 100_000,
        "MAX_DIGITS": 10_000,
        "DEBUG": False,
    },
    "OUTPUT": {
        "OUTPUT_FILE": "",
        "SHOW_TIMING": True,
        "ABBREVIATE_OVER": 60,
    },
    "COMPARE": {
        "NAIVE_LIMIT": 25,
    },
}


@dataclass
class Settings:
    """
    Wrap the full TOML dict (without the [PROFILE] section), merged over DEFAULTS.
    .as_dict() feeds runtime.apply().

      - name:        resolved profile name (file stem if not given in [PROFILE])
      - description: one-line description from [PROFILE] or "(no description)"
    """
    data: dict[str, Any]
    name: str
    description: str
    source: Path | None = None

    def as_dict(self) -> dict[str, Any]:
        return self.data


# --- Paths -----------------------------------------------------------------

def _profiles_dir() -> Path:
    return workspace_dir() / "profiles"


def _profile_path(name: str) -> Path:
    return _profiles_dir() / f"{name}.toml"


# --- I/O -------------------------------------------------------------------

def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return toml.load(f)
    except toml.TOMLDecodeError as e:
        lineno = getattr(e, "lineno", None)
        colno = getattr(e, "colno", None)
        msg = getattr(e, "msg", str(e))
        where = []
        if lineno is not None:
            where.append(f"line {lineno}")
        if colno is not None:
            where.append(f"column {colno}")
        loc = f" (at {', '.join(where)})" if where else ""
        # No traceback chaining
        raise UserInputError(f"reading {path.name}: {msg}{loc}.") from None


def _sanitize_oneline(s: str) -> str:
    return " ".join(str(s).split()) or "(no description)"


def _split_profile_data(raw: dict[str, Any], fallback_name: str) -> tuple[dict[str, Any], str, str]:
    """
    Extract [PROFILE] meta (name, description) and return:
      (settings_without_profile, resolved_name, resolved_description)
    """
    meta = raw.get("PROFILE") or {}
    data = {k: v for k, v in raw.items() if k != "PROFILE"}
    name = str(meta.get("name") or fallback_name)
    description = _sanitize_oneline(str(meta.get("description") or ""))
    return data, name, description


def _check_types(data: dict[str, Any], source: str) -> None:
    """Known keys must keep the type of their default."""
    for section, defaults in DEFAULTS.items():
        table = data.get(section, {})
        if not isinstance(table, dict):
            raise UserInputError(f"{source}: [{section}] must be a table.")
        for key, default in defaults.items():
            if key not in table:
                continue
            value = table[key]
            # bool is an int subclass; keep them apart
            if isinstance(default, bool) or isinstance(value, bool):
                ok = isinstance(value, bool) and isinstance(default, bool)
            else:
                ok = isinstance(value, type(default))
            if not ok:
                raise UserInputError(
                    f"{source}: {section}.{key} must be {type(default).__name__}, "
                    f"got {type(value).__name__}."
                )


# --- Public API ------------------------------------------------------------

def list_profiles_with_descriptions() -> list[tuple[str, str]]:
    """
    Return [(name, description), ...] for all profiles in the workspace.
    """
    items: list[tuple[str, str]] = []
    pdir = _profiles_dir()
    if not pdir.exists():
        return items
    for p in pdir.glob("*.toml"):
        try:
            _, nm, desc = _split_profile_data(_load_toml(p), p.stem)
        except UserInputError:
            # listing is best-effort; fall back to filename
            nm, desc = p.stem, "(unreadable)"
        items.append((nm, desc))
    return sorted(items, key=lambda t: t[0].lower())


def has_profile(name: str) -> bool:
    return _profile_path(name).exists()


def settings_from_file(path: Path) -> Settings:
    raw = _load_toml(path)
    data, resolved_name, description = _split_profile_data(raw, path.stem)
    _check_types(data, path.name)
    return Settings(
        data=merge_nested(DEFAULTS, data),
        name=resolved_name,
        description=description,
        source=path,
    )


def load_settings(name: str | None = None) -> Settings:
    """
    Load a profile by name (default 'default') and merge it over DEFAULTS.
    A missing 'default' profile yields the built-in defaults; any other
    missing profile raises UserInputError.
    """
    name = name or "default"
    path = _profile_path(name)
    if not path.exists():
        if name == "default":
            return Settings(data=merge_nested(DEFAULTS, {}), name="default", description="built-in defaults")
        raise UserInputError(f"profile '{name}' not found at {path}.")
    return settings_from_file(path)


def _current_profile_path() -> Path:
    return _profiles_dir() / ".current"


def read_current_profile() -> str | None:
    try:
        s = _current_profile_path().read_text(encoding="utf-8").strip()
    except OSError:
        return None
    return s[:-5] if s.lower().endswith(".toml") else (s or None)


def write_current_profile(name: str) -> None:
    nm = (name or "").strip()
    if nm.lower().endswith(".toml"):
        nm = nm[:-5]
    p = _current_profile_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(nm, encoding="utf-8")
