"""Sum container requests and limits from pod lists into typed quantities."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from kquant.domain.cpu import CPUQuantity
from kquant.domain.errors import QuantityError
from kquant.domain.memory import MemoryQuantity
from kquant.domain.quantity import Quantity
from kquant.logging import LOG

SYSTEM_NAMESPACES: frozenset[str] = frozenset(
    {
        "kube-system",
        "kube-public",
        "kube-node-lease",
        "default",
        "ingress-controller",
    }
)

SYSTEM_NAMESPACE_PREFIXES: tuple[str, ...] = ("cattle-", "rancher-", "kube-")

Q = TypeVar("Q", bound=Quantity)


def is_system_namespace(
    namespace: str,
    *,
    include_system: bool = False,
    extra_namespaces: Iterable[str] = (),
    extra_prefixes: tuple[str, ...] = (),
) -> bool:
    """Return whether namespace should be left out of user-facing totals."""
    if include_system:
        return False
    if namespace in SYSTEM_NAMESPACES or namespace in frozenset(extra_namespaces):
        return True
    return namespace.startswith(SYSTEM_NAMESPACE_PREFIXES + extra_prefixes)


@dataclass(frozen=True)
class SkippedQuantity:
    """A container resource value that could not be parsed."""

    namespace: str
    pod: str
    container: str
    resource: str
    raw: str
    reason: str


@dataclass
class NamespaceTotals:
    """Requested and limited resources summed over a group of containers."""

    namespace: str
    pods: int = 0
    containers: int = 0
    cpu_requests: CPUQuantity = field(default_factory=CPUQuantity.zero)
    cpu_limits: CPUQuantity = field(default_factory=CPUQuantity.zero)
    memory_requests: MemoryQuantity = field(default_factory=MemoryQuantity.zero)
    memory_limits: MemoryQuantity = field(default_factory=MemoryQuantity.zero)

    def merge(self, other: NamespaceTotals) -> None:
        """Fold another group's counters into this one."""
        self.pods += other.pods
        self.containers += other.containers
        self.cpu_requests = self.cpu_requests.add(other.cpu_requests)
        self.cpu_limits = self.cpu_limits.add(other.cpu_limits)
        self.memory_requests = self.memory_requests.add(other.memory_requests)
        self.memory_limits = self.memory_limits.add(other.memory_limits)


@dataclass
class ResourceReport:
    """Per-namespace totals plus the values that had to be skipped."""

    namespaces: dict[str, NamespaceTotals] = field(default_factory=dict)
    skipped: list[SkippedQuantity] = field(default_factory=list)

    @property
    def total(self) -> NamespaceTotals:
        """Return cluster-wide totals across every reported namespace."""
        total = NamespaceTotals(namespace="total")
        for totals in self.namespaces.values():
            total.merge(totals)
        return total


def _read_quantity(
    quantity_cls: type[Q],
    resources: dict[str, Any],
    section: str,
    resource: str,
    *,
    location: tuple[str, str, str],
    skipped: list[SkippedQuantity],
) -> Q:
    raw = (resources.get(section) or {}).get(resource)
    if raw is None:
        return quantity_cls.zero()
    try:
        return quantity_cls.parse(str(raw))
    except QuantityError as exc:
        namespace, pod, container = location
        LOG.warning(
            "Skipping %s.%s=%r of %s/%s[%s]: %s",
            section,
            resource,
            raw,
            namespace,
            pod,
            container,
            exc,
        )
        skipped.append(
            SkippedQuantity(
                namespace=namespace,
                pod=pod,
                container=container,
                resource=f"{section}.{resource}",
                raw=str(raw),
                reason=exc.kind,
            )
        )
        return quantity_cls.zero()


def summarize_pod_resources(
    pods: dict[str, Any],
    *,
    namespace_filter: Callable[[str], bool] | None = None,
) -> ResourceReport:
    """Aggregate container requests/limits of a pod list by namespace."""
    report = ResourceReport()
    for pod in pods.get("items") or []:
        metadata = pod.get("metadata") or {}
        namespace = metadata.get("namespace", "default")
        if namespace_filter is not None and not namespace_filter(namespace):
            continue
        pod_name = metadata.get("name", "<unnamed>")
        totals = report.namespaces.setdefault(
            namespace, NamespaceTotals(namespace=namespace)
        )
        totals.pods += 1
        for container in (pod.get("spec") or {}).get("containers") or []:
            totals.containers += 1
            resources = container.get("resources") or {}
            location = (namespace, pod_name, container.get("name", "<unnamed>"))
            skipped = report.skipped
            totals.cpu_requests = totals.cpu_requests.add(
                _read_quantity(
                    CPUQuantity,
                    resources,
                    "requests",
                    "cpu",
                    location=location,
                    skipped=skipped,
                )
            )
            totals.cpu_limits = totals.cpu_limits.add(
                _read_quantity(
                    CPUQuantity,
                    resources,
                    "limits",
                    "cpu",
                    location=location,
                    skipped=skipped,
                )
            )
            totals.memory_requests = totals.memory_requests.add(
                _read_quantity(
                    MemoryQuantity,
                    resources,
                    "requests",
                    "memory",
                    location=location,
                    skipped=skipped,
                )
            )
            totals.memory_limits = totals.memory_limits.add(
                _read_quantity(
                    MemoryQuantity,
                    resources,
                    "limits",
                    "memory",
                    location=location,
                    skipped=skipped,
                )
            )
    LOG.debug(
        "Summarized %d namespaces, %d skipped values",
        len(report.namespaces),
        len(report.skipped),
    )
    return report
