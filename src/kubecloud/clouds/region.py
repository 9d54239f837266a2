"""Host cloud region decoding.

The controller stores a Kubernetes cloud's optional parent placement in a
single ``<parent-cloud>/<parent-region>`` field.
"""

from __future__ import annotations

HOST_CLOUD_REGION_SEPARATOR = "/"

K8S_CLOUD_OTHER = "other"
"""Host cloud region of a Kubernetes cloud with no known parent cloud."""


def parent_cloud_and_region(value: str) -> tuple[str, str]:
    """Decode a host cloud region into ``(parent_cloud, parent_region)``.

    Values that do not split into exactly two parts (including the
    ``"other"`` sentinel) decode to two empty strings.
    """
    parts = value.split(HOST_CLOUD_REGION_SEPARATOR)
    if len(parts) != 2:
        return "", ""
    return parts[0], parts[1]
