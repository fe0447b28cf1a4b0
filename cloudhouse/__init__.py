# CUI // SP-CTI
"""cloudhouse — layered cloud configuration and resource lifecycle orchestration.

Resolves OpenStack-style credentials from clouds.yaml / clouds-public.yaml /
secure.yaml plus environment variables, and drives multi-resource
create/delete operations to a terminal state with bounded polling.
"""

__version__ = "0.3.0"
