"""Application configuration and environment loading."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class QuantityConfig:
    """Cluster access and namespace filtering settings."""

    kubeconfig: Path | None = None
    context: str | None = None
    include_system: bool = False
    extra_system_namespaces: frozenset[str] = frozenset()

    @property
    def kubectl_args(self) -> tuple[str, ...]:
        """Return global kubectl flags selecting kubeconfig and context."""
        args: list[str] = []
        if self.kubeconfig is not None:
            args.extend(["--kubeconfig", str(self.kubeconfig)])
        if self.context:
            args.extend(["--context", self.context])
        return tuple(args)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in _TRUTHY


def _env_list(name: str) -> frozenset[str]:
    raw = os.getenv(name, "")
    return frozenset(item.strip() for item in raw.split(",") if item.strip())


def load_config(env_path: Path = Path(".env")) -> QuantityConfig:
    """Load config from environment and optional .env file."""
    load_dotenv(env_path, override=False)
    kubeconfig_raw = os.getenv("KUBECONFIG")
    return QuantityConfig(
        kubeconfig=Path(kubeconfig_raw) if kubeconfig_raw else None,
        context=os.getenv("KQUANT_CONTEXT") or None,
        include_system=_env_flag("KQUANT_INCLUDE_SYSTEM"),
        extra_system_namespaces=_env_list("KQUANT_EXTRA_SYSTEM_NAMESPACES"),
    )
