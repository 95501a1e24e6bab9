"""Storage-level conflicts surfaced by repositories as typed exceptions."""


class ConcurrentUpdateError(Exception):
    """The record changed since it was loaded (optimistic version check failed)"""


class DuplicateRecordError(Exception):
    """A unique constraint rejected the write"""
