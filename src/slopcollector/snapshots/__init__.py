"""Schema snapshots: assembly here, persistence in snapshots.service."""

from slopcollector.snapshots.assembler import assemble_snapshot, snapshot_from_row

__all__ = ["assemble_snapshot", "snapshot_from_row"]
