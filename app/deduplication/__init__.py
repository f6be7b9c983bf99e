"""
Write-time and maintenance deduplication.
"""

from app.deduplication.maintenance import MaintenanceDeduplicator, group_by_identity
from app.deduplication.write_time import WriteTimeDeduplicator

__all__ = ["MaintenanceDeduplicator", "WriteTimeDeduplicator", "group_by_identity"]
