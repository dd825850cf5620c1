# unicomm/config/loader.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from unicomm.core.errors import TransportConfigError
from unicomm.core.options import Protocol, UnicommOptions
from .params import OptionsResolver, parse_protocol


@dataclass(frozen=True)
class Profile:
    """A named connection entry from a profiles file."""
    name: str
    protocol: Protocol
    params: Dict[str, Any] = field(default_factory=dict)

    def options(self, resolver: Optional[OptionsResolver] = None) -> UnicommOptions:
        return (resolver or OptionsResolver()).resolve(self.protocol, self.params)


class ProfileLoader:
    """
    Loads named connection profiles from YAML.

    File layout:
        connections:
          <name>:
            protocol: serial | tcp
            <param>: <value>      # see config.params schemas

    After calling load_all(), exposes:
        self.profiles : dict[str, Profile]
    Every profile is resolved once while loading so bad entries fail early.
    """

    def __init__(self, path: str | Path, resolver: Optional[OptionsResolver] = None):
        self.path = Path(path)
        self.resolver = resolver or OptionsResolver()
        self.profiles: Dict[str, Profile] = {}

    # ---------------------------------------------------------------------
    # YAML utility
    # ---------------------------------------------------------------------
    def _load_yaml(self) -> dict:
        if not self.path.exists():
            raise TransportConfigError(
                f"Missing profiles file: {self.path}",
                hint="Pass --config pointing at a connections YAML file.",
                details={"path": str(self.path)},
            )

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise TransportConfigError(
                f"Failed to parse profiles file: {self.path}",
                hint=str(e),
                details={"path": str(self.path)},
            ) from None

    # ---------------------------------------------------------------------
    # Public entry point
    # ---------------------------------------------------------------------
    def load_all(self) -> Dict[str, Profile]:
        self.profiles.clear()
        data = self._load_yaml()

        connections = data.get("connections") if isinstance(data, dict) else None
        if not isinstance(connections, dict):
            raise TransportConfigError(
                f"{self.path.name} is missing 'connections' root node",
                details={"path": str(self.path)},
            )

        for name_raw, entry in connections.items():
            name = str(name_raw)
            if not isinstance(entry, dict):
                raise TransportConfigError(
                    f"Profile '{name}' entry must be a mapping",
                    details={"path": str(self.path), "profile": name},
                )

            params = dict(entry)
            protocol_raw = params.pop("protocol", None)
            if protocol_raw is None:
                raise TransportConfigError(
                    f"Profile '{name}' is missing 'protocol'",
                    hint="Use 'protocol: serial' or 'protocol: tcp'.",
                    details={"path": str(self.path), "profile": name},
                )

            profile = Profile(name=name, protocol=parse_protocol(protocol_raw), params=params)
            profile.options(self.resolver)
            self.profiles[name] = profile

        return self.profiles

    # ---------------------------------------------------------------------
    # Accessors
    # ---------------------------------------------------------------------
    def get(self, name: str) -> Profile:
        profile = self.profiles.get(name)
        if profile is None:
            known = ", ".join(sorted(self.profiles)) or "none"
            raise TransportConfigError(
                f"Unknown profile '{name}'.",
                hint=f"Known profiles: {known}",
                details={"path": str(self.path), "profile": name},
            )
        return profile
