#!/usr/bin/env python3
# CUI // SP-CTI
"""Resource lifecycle orchestration over a ResourceClient.

Three batch flows, each built from fan_out + wait_for:

    create_and_wait(specs)   create N, then wait for each created one to be active
    delete_and_wait(ids)     delete N, then wait for each deleted one to be gone
    get_statuses(ids)        fetch N statuses

Phases are barrier-synchronized: the wait phase starts only after every
unit of the first phase has finished. Items that failed the first phase
are skipped in the second; their error is carried through once.

Batch flows never raise for per-item failures. They return a
LifecycleResult holding the partial data plus an AggregateError (or None).
Cleanup of partially created resources is left to the caller.

Usage:
    from cloudhouse.cloud.lifecycle import LifecycleOrchestrator

    orchestrator = LifecycleOrchestrator(client)
    result = orchestrator.create_and_wait([{"name": "node-1"}, {"name": "node-2"}])
    if result.error:
        orchestrator.delete_and_wait(result.created_ids)
"""

import base64
import binascii
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from cloudhouse.cloud.client import ResourceClient
from cloudhouse.resilience.errors import AggregateError, ResourceStatusError
from cloudhouse.resilience.fanout import FanOutResult, aggregate_errors, fan_out
from cloudhouse.resilience.poller import wait_for
from cloudhouse.settings import Settings, load_settings

logger = logging.getLogger("cloudhouse.cloud.lifecycle")

CLUSTER_AVAILABLE = "Available"
NODE_ACTIVE = "Active"

INSTALL_SCRIPT_KEYS = ("preinstall", "postinstall")


@dataclass
class LifecycleResult:
    """Outcome of one batch flow.

    ``values[i]`` belongs to ``items[i]``: the created ID for create flows,
    the deleted ID for delete flows, the status for status flows. A slot is
    None when the first phase failed for that item. A created ID is kept
    even when its activation wait failed, so the caller can tear it down.
    """
    items: List[Any]
    values: List[Any]
    error: Optional[AggregateError] = None

    @property
    def created_ids(self) -> List[Any]:
        """Non-empty slots; for create flows, every ID that needs teardown.

        Includes IDs whose activation wait failed.
        """
        return [v for v in self.values if v is not None]

    def raise_for_errors(self):
        if self.error is not None:
            raise self.error


def encode_install_script(script: str) -> str:
    """Base64-encode a node install script unless it already is base64.

    Line breaks inside pre-encoded scripts are accepted.
    """
    try:
        base64.b64decode(script.replace("\r", "").replace("\n", ""), validate=True)
    except (binascii.Error, ValueError):
        return base64.b64encode(script.encode("utf-8")).decode("ascii")
    return script


class LifecycleOrchestrator:
    """Drives batches of one resource type to a terminal state.

    Args:
        client: ResourceClient shared by every concurrent unit.
        settings: Runtime settings; loaded from args/cloudhouse_config.yaml
            when omitted.
        max_attempts / interval: Poll budget per resource. Default to
            ``poll.max_attempts`` / ``poll.interval_seconds``.
        max_workers: Fan-out width. Defaults to ``fanout.max_workers``.
        cancel_event: Optional threading.Event aborting pending units and
            in-flight polls.
    """

    def __init__(
        self,
        client: ResourceClient,
        settings: Optional[Settings] = None,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
        max_workers: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.client = client
        self.settings = settings or load_settings()
        self.max_attempts = max_attempts or self.settings.poll_max_attempts
        self.interval = self.settings.poll_interval if interval is None else interval
        self.max_workers = max_workers or self.settings.fanout_max_workers
        self.cancel_event = cancel_event

    # ------------------------------------------------------------------
    # Single-resource waits
    # ------------------------------------------------------------------

    def wait_for_status(
        self,
        resource_id: str,
        target: Optional[str] = None,
        error_states: Optional[Sequence[str]] = None,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
    ) -> str:
        """Block until ``resource_id`` reports ``target``.

        ``target`` and ``error_states`` default to the client's
        ``active_status`` and ``error_statuses``.

        Raises:
            ResourceStatusError: the resource entered one of ``error_states``.
            PollTimeoutError: budget exhausted.
            Any error raised by ``client.get``.
        """
        rtype = self.client.resource_type
        target = target or self.client.active_status
        if error_states is None:
            error_states = self.client.error_statuses

        def _reached() -> bool:
            status = self.client.get(resource_id)
            if status in error_states:
                raise ResourceStatusError(resource_id, status, resource_type=rtype)
            return status == target

        wait_for(
            _reached,
            max_attempts=max_attempts or self.max_attempts,
            interval=self.interval if interval is None else interval,
            description=f"{rtype} {resource_id} to become {target}",
            cancel_event=self.cancel_event,
        )
        return resource_id

    def wait_for_deleted(self, resource_id: str) -> str:
        """Block until ``client.get`` reports ``resource_id`` as not found."""
        rtype = self.client.resource_type

        def _gone() -> bool:
            try:
                self.client.get(resource_id)
            except Exception as exc:
                if self.client.is_not_found(exc):
                    return True
                raise
            return False

        wait_for(
            _gone,
            max_attempts=self.max_attempts,
            interval=self.interval,
            description=f"{rtype} {resource_id} to be deleted",
            cancel_event=self.cancel_event,
        )
        return resource_id

    # ------------------------------------------------------------------
    # Batch flows
    # ------------------------------------------------------------------

    def _fan_out(self, items, op, description: str) -> List[FanOutResult]:
        return fan_out(
            items,
            op,
            max_workers=self.max_workers,
            cancel_event=self.cancel_event,
            description=description,
        )

    def create_and_wait(
        self,
        specs: Iterable[Dict[str, Any]],
        target: Optional[str] = None,
        error_states: Optional[Sequence[str]] = None,
    ) -> LifecycleResult:
        """Create one resource per spec and wait for each to reach ``target``."""
        specs = list(specs)
        rtype = self.client.resource_type
        target = target or self.client.active_status
        created = self._fan_out(specs, self.client.create, f"create {rtype}")
        ids = [r.value if r.ok else None for r in created]

        pending = [rid for rid in ids if rid is not None]
        logger.info("Waiting for %d %s resource(s) to become %s", len(pending), rtype, target)
        waited = self._fan_out(
            pending,
            lambda rid: self.wait_for_status(rid, target, error_states),
            f"wait {rtype} {target}",
        )

        error = aggregate_errors(created + waited)
        if error is not None:
            logger.warning("%d of %d %s resource(s) failed to become %s",
                           len(error), len(specs), rtype, target)
        return LifecycleResult(items=specs, values=ids, error=error)

    def delete_and_wait(self, resource_ids: Iterable[str]) -> LifecycleResult:
        """Delete every resource and wait until each one is gone.

        A delete that reports not-found counts as already deleted.
        """
        resource_ids = list(resource_ids)
        rtype = self.client.resource_type

        def _delete(resource_id: str) -> str:
            try:
                self.client.delete(resource_id)
            except Exception as exc:
                if not self.client.is_not_found(exc):
                    raise
                logger.info("%s %s already deleted", rtype, resource_id)
            return resource_id

        deleted = self._fan_out(resource_ids, _delete, f"delete {rtype}")
        ids = [r.value if r.ok else None for r in deleted]

        pending = [rid for rid in ids if rid is not None]
        logger.info("Waiting for %d %s resource(s) to be deleted", len(pending), rtype)
        waited = self._fan_out(pending, self.wait_for_deleted, f"wait {rtype} deleted")

        return LifecycleResult(
            items=resource_ids,
            values=ids,
            error=aggregate_errors(deleted + waited),
        )

    def get_statuses(self, resource_ids: Iterable[str]) -> LifecycleResult:
        """Fetch the status of every resource, in input order."""
        resource_ids = list(resource_ids)
        results = self._fan_out(resource_ids, self.client.get,
                                f"get {self.client.resource_type} status")
        return LifecycleResult(
            items=resource_ids,
            values=[r.value if r.ok else None for r in results],
            error=aggregate_errors(results),
        )


# ----------------------------------------------------------------------
# Cluster node flows
# ----------------------------------------------------------------------

def _prepare_node_spec(spec: Dict[str, Any]) -> Dict[str, Any]:
    prepared = dict(spec)
    for key in INSTALL_SCRIPT_KEYS:
        if prepared.get(key):
            prepared[key] = encode_install_script(prepared[key])
    return prepared


def provision_cluster_nodes(
    cluster_client: ResourceClient,
    node_client: ResourceClient,
    cluster_id: str,
    node_specs: Iterable[Dict[str, Any]],
    settings: Optional[Settings] = None,
    cancel_event: Optional[threading.Event] = None,
) -> LifecycleResult:
    """Wait for a cluster to be available, then create nodes and wait for them.

    The cluster wait uses the ``cluster`` poll budget and raises on failure;
    node creation returns a LifecycleResult like ``create_and_wait``.
    """
    settings = settings or load_settings()
    cluster = LifecycleOrchestrator(
        cluster_client,
        settings=settings,
        max_attempts=settings.cluster_max_attempts,
        interval=settings.cluster_interval,
        cancel_event=cancel_event,
    )
    logger.info("Waiting for cluster %s to become %s", cluster_id, CLUSTER_AVAILABLE)
    cluster.wait_for_status(cluster_id, CLUSTER_AVAILABLE)

    nodes = LifecycleOrchestrator(
        node_client,
        settings=settings,
        max_attempts=settings.cluster_max_attempts,
        interval=settings.cluster_interval,
        cancel_event=cancel_event,
    )
    return nodes.create_and_wait([_prepare_node_spec(s) for s in node_specs], target=NODE_ACTIVE)


def teardown_cluster_nodes(
    node_client: ResourceClient,
    node_ids: Iterable[str],
    settings: Optional[Settings] = None,
    cancel_event: Optional[threading.Event] = None,
) -> LifecycleResult:
    """Delete cluster nodes and wait until every one is gone."""
    settings = settings or load_settings()
    nodes = LifecycleOrchestrator(
        node_client,
        settings=settings,
        max_attempts=settings.cluster_max_attempts,
        interval=settings.cluster_interval,
        cancel_event=cancel_event,
    )
    return nodes.delete_and_wait(node_ids)
