# installation.py
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from .model import Installation, NodeContext


@dataclass
class ConfigurationError(Exception):
    """Invalid installation store contents or an invalid edit to them."""
    message: str
    path: str | None = None

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} ({self.path})"
        return self.message


# ----------------------------------------------------------------------
# On-disk schema
# ----------------------------------------------------------------------

class InstallationRecord(BaseModel):
    name: str
    home: str


class StoreFile(BaseModel):
    installations: list[InstallationRecord] = Field(default_factory=list)
    # node name -> {installation name -> home on that node}
    tool_locations: dict[str, dict[str, str]] = Field(default_factory=dict)


# ----------------------------------------------------------------------
# Store
# ----------------------------------------------------------------------

class InstallationStore:
    """
    Configured SASUnit installations, persisted as JSON.

    Loaded once on construction, written back on every update.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()
        self._installations: Dict[str, Installation] = {}
        self._tool_locations: Dict[str, Dict[str, str]] = {}
        self.load()

    def load(self) -> None:
        if not self.path.exists():
            self._installations = {}
            self._tool_locations = {}
            return
        try:
            data = StoreFile.model_validate_json(self.path.read_text(encoding="utf-8"))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid installation file: {e}", str(self.path)) from e
        except UnicodeDecodeError as e:
            raise ConfigurationError(f"Installation file is not UTF-8: {e}", str(self.path)) from e
        except OSError as e:
            raise ConfigurationError(f"Could not read installation file: {e}", str(self.path)) from e

        self._installations = {}
        for rec in data.installations:
            _add_checked(self._installations, Installation(rec.name, rec.home))
        self._tool_locations = {node: dict(locs) for node, locs in data.tool_locations.items()}

    def save(self) -> None:
        data = StoreFile(
            installations=[InstallationRecord(name=i.name, home=i.home) for i in self._installations.values()],
            tool_locations=self._tool_locations,
        )
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(data.model_dump_json(indent=2) + "\n", encoding="utf-8")

    # ---- queries ----

    @property
    def installations(self) -> List[Installation]:
        return list(self._installations.values())

    def get(self, name: Optional[str]) -> Optional[Installation]:
        if not name:
            return None
        return self._installations.get(name)

    def node(self, name: str) -> NodeContext:
        return NodeContext(name=name, tool_locations=dict(self._tool_locations.get(name, {})))

    # ---- updates ----

    def set_installations(self, *installations: Installation) -> None:
        replacement: Dict[str, Installation] = {}
        for inst in installations:
            _add_checked(replacement, inst)
        self._installations = replacement
        self.save()

    def add(self, installation: Installation) -> None:
        self.set_installations(*self._installations.values(), installation)

    def remove(self, name: str) -> None:
        if name not in self._installations:
            raise ConfigurationError(f"Unknown installation: {name!r}", str(self.path))
        for locs in self._tool_locations.values():
            locs.pop(name, None)
        self._tool_locations = {node: locs for node, locs in self._tool_locations.items() if locs}
        self.set_installations(*(i for i in self._installations.values() if i.name != name))

    def set_tool_location(self, node: str, name: str, home: str) -> None:
        if name not in self._installations:
            raise ConfigurationError(f"Unknown installation: {name!r}", str(self.path))
        self._tool_locations.setdefault(node, {})[name] = home
        self.save()


def _add_checked(target: Dict[str, Installation], inst: Installation) -> None:
    if not inst.name or not inst.name.strip():
        raise ConfigurationError("Installation name is required")
    if inst.name in target:
        raise ConfigurationError(f"Duplicate installation name: {inst.name!r}")
    target[inst.name] = inst


# ----------------------------------------------------------------------
# Resolution
# ----------------------------------------------------------------------

def translate_for_node(installation: Installation, node: NodeContext) -> Installation:
    return installation.for_node(node)


def expand_for_environment(installation: Installation, env: Mapping[str, str]) -> Installation:
    return installation.for_environment(env)


def resolve_installation(
    store: InstallationStore,
    name: Optional[str],
    node: NodeContext,
    env: Mapping[str, str],
) -> Optional[Installation]:
    """
    Look up `name` and make its home concrete for this node and environment.

    Node translation happens before environment expansion. Returns None when
    the name is missing or unknown.
    """
    inst = store.get(name)
    if inst is None:
        return None
    return expand_for_environment(translate_for_node(inst, node), env)


# ----------------------------------------------------------------------
# Validation
# ----------------------------------------------------------------------

OK = "ok"
WARNING = "warning"
ERROR = "error"


@dataclass(frozen=True)
class FormValidation:
    kind: str
    message: str = ""

    @property
    def is_error(self) -> bool:
        return self.kind == ERROR

    @classmethod
    def ok(cls) -> FormValidation:
        return cls(OK)

    @classmethod
    def warning(cls, message: str) -> FormValidation:
        return cls(WARNING, message)

    @classmethod
    def error(cls, message: str) -> FormValidation:
        return cls(ERROR, message)


def check_home(value: str | None) -> FormValidation:
    if not value:
        return FormValidation.ok()
    path = Path(os.path.expanduser(value))
    # missing on this machine may still exist on the build node
    if not path.exists():
        return FormValidation.warning(f"Path does not exist: {value}")
    if not path.is_dir():
        return FormValidation.error(f"Path is not a directory: {value}")
    return FormValidation.ok()


def check_name(value: str | None) -> FormValidation:
    if not value or not value.strip():
        return FormValidation.error("Name is required")
    return FormValidation.ok()


def check_batch_path(value: str | None) -> FormValidation:
    if not value:
        return FormValidation.error("Please set a path")
    if len(value) < 4:
        return FormValidation.warning("Isn't the name too short?")
    return FormValidation.ok()
