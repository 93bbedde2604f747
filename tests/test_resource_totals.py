"""Tests for request/limit aggregation and system namespace filtering."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from kquant import CPUQuantity, MemoryQuantity
from kquant.domain.resource_totals import (
    NamespaceTotals,
    is_system_namespace,
    summarize_pod_resources,
)
from kquant.logging import LOG


def _pod(namespace: str, name: str, *containers: dict[str, Any]) -> dict[str, Any]:
    return {
        "metadata": {"namespace": namespace, "name": name},
        "spec": {"containers": list(containers)},
    }


def _container(name: str, **resources: dict[str, str]) -> dict[str, Any]:
    return {"name": name, "resources": resources}


PODS: dict[str, Any] = {
    "items": [
        _pod(
            "team-a",
            "web-1",
            _container(
                "app",
                requests={"cpu": "250m", "memory": "128Mi"},
                limits={"cpu": "500m", "memory": "256Mi"},
            ),
            _container("sidecar", requests={"cpu": "50m", "memory": "32Mi"}),
        ),
        _pod(
            "team-a",
            "web-2",
            _container(
                "app",
                requests={"cpu": "1", "memory": "1Gi"},
                limits={"cpu": "2", "memory": "1.5Gi"},
            ),
        ),
        _pod(
            "team-b",
            "job-1",
            _container("worker", requests={"cpu": "100m", "memory": "500M"}),
            {"name": "idle"},
        ),
        _pod(
            "kube-system",
            "coredns",
            _container(
                "coredns",
                requests={"cpu": "100m", "memory": "70Mi"},
                limits={"memory": "170Mi"},
            ),
        ),
    ]
}


def test_default_system_namespaces() -> None:
    assert is_system_namespace("kube-system")
    assert is_system_namespace("default")
    assert is_system_namespace("ingress-controller")
    assert is_system_namespace("cattle-fleet-system")
    assert is_system_namespace("rancher-operator-system")
    assert not is_system_namespace("payments")


def test_system_namespace_overrides() -> None:
    assert not is_system_namespace("kube-system", include_system=True)
    assert is_system_namespace("monitoring", extra_namespaces={"monitoring"})
    assert is_system_namespace("ops-infra", extra_prefixes=("ops-",))


def test_summarize_by_namespace() -> None:
    report = summarize_pod_resources(PODS)

    team_a = report.namespaces["team-a"]
    assert team_a.pods == 2
    assert team_a.containers == 3
    assert team_a.cpu_requests == CPUQuantity.parse("1300m")
    assert team_a.cpu_limits.to_text() == "2.5"
    assert team_a.memory_requests == MemoryQuantity.parse("1184Mi")
    assert team_a.memory_requests.to_text() == "1.15625Gi"
    assert team_a.memory_limits.to_text() == "1.75Gi"

    team_b = report.namespaces["team-b"]
    assert team_b.containers == 2
    assert team_b.cpu_requests.to_text() == "100m"
    assert team_b.memory_requests == MemoryQuantity.zero()
    assert team_b.cpu_limits == CPUQuantity.zero()


def test_unparseable_values_are_skipped() -> None:
    report = summarize_pod_resources(PODS)
    assert len(report.skipped) == 1
    skipped = report.skipped[0]
    assert (skipped.namespace, skipped.pod, skipped.container) == (
        "team-b",
        "job-1",
        "worker",
    )
    assert skipped.resource == "requests.memory"
    assert skipped.raw == "500M"
    assert skipped.reason == "invalid_unit"


def test_skipped_values_are_logged(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(LOG, "propagate", True)
    with caplog.at_level(logging.WARNING, logger="kquant"):
        summarize_pod_resources(PODS)
    assert "500M" in caplog.text


def test_namespace_filter_and_total() -> None:
    report = summarize_pod_resources(
        PODS, namespace_filter=lambda ns: not is_system_namespace(ns)
    )
    assert set(report.namespaces) == {"team-a", "team-b"}
    total = report.total
    assert total.namespace == "total"
    assert total.pods == 3
    assert total.containers == 5
    assert total.cpu_requests.to_text() == "1.4"
    assert total.memory_limits.to_text() == "1.75Gi"


def test_total_includes_system_without_filter() -> None:
    total = summarize_pod_resources(PODS).total
    assert total.cpu_requests.to_text() == "1.5"
    assert total.memory_requests.to_text() == "1.224609375Gi"
    assert total.memory_limits.to_text() == "1.916015625Gi"


def test_empty_payload() -> None:
    report = summarize_pod_resources({})
    assert report.namespaces == {}
    assert report.total == NamespaceTotals(namespace="total")


def test_init_containers_are_ignored() -> None:
    pod = _pod(
        "team-c",
        "migrate",
        _container("app", requests={"cpu": "200m", "memory": "64Mi"}),
    )
    pod["spec"]["initContainers"] = [
        _container(
            "schema",
            requests={"cpu": "2", "memory": "1Gi"},
            limits={"cpu": "4", "memory": "2Gi"},
        )
    ]
    totals = summarize_pod_resources({"items": [pod]}).namespaces["team-c"]
    assert totals.containers == 1
    assert totals.cpu_requests.to_text() == "200m"
    assert totals.memory_requests.to_text() == "64Mi"
    assert totals.cpu_limits == CPUQuantity.zero()
    assert totals.memory_limits == MemoryQuantity.zero()


@pytest.mark.parametrize(
    "payload",
    [
        {"items": None},
        {"items": [{"metadata": None, "spec": None}]},
        {
            "items": [
                {"metadata": {"namespace": "team-a"}, "spec": {"containers": None}}
            ]
        },
    ],
)
def test_null_nodes_count_as_empty(payload: dict[str, Any]) -> None:
    report = summarize_pod_resources(payload)
    assert report.total.containers == 0
    assert report.total.cpu_requests == CPUQuantity.zero()
    assert report.skipped == []


def test_null_metadata_defaults_namespace() -> None:
    report = summarize_pod_resources({"items": [{"metadata": None, "spec": {}}]})
    assert report.namespaces["default"].pods == 1
