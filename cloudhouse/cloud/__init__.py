# CUI // SP-CTI
"""Cloud resource access and lifecycle orchestration."""

from cloudhouse.cloud.client import ResourceClient, find_id_by_name  # noqa: F401
from cloudhouse.cloud.lifecycle import (  # noqa: F401
    LifecycleOrchestrator,
    LifecycleResult,
    encode_install_script,
    provision_cluster_nodes,
    teardown_cluster_nodes,
)
