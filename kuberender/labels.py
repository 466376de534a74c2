"""Well-known label keys stamped on rendered resources."""

from __future__ import annotations

PLATFORM_PART_OF = "platform.opendatahub.io/part-of"
