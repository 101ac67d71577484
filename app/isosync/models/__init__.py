"""Data models for isosync.

This module exports the core data structures used throughout the application.
"""

from isosync.models.manifest import ROOT_GROUP, FileEntry, Group, Manifest
from isosync.models.scan_result import ScanIssue, ScanRecord, ScanResult

__all__ = [
    "ROOT_GROUP",
    "FileEntry",
    "Group",
    "Manifest",
    "ScanIssue",
    "ScanRecord",
    "ScanResult",
]
