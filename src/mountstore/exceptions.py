"""Custom exception hierarchy for mountstore.

All errors are programmer errors: they are raised synchronously at the point
of violation and are never retried or recovered internally.
"""

from __future__ import annotations


class MountStoreError(Exception):
    """Base exception for all mountstore errors."""


class MountConfigError(MountStoreError):
    """Invalid argument shape: path type, viewed state spec, action payload."""


class MountConflictError(MountStoreError):
    """A mount path is already registered or already holds state."""

    def __init__(self, message: str, *, path: str = "") -> None:
        self.path = path
        super().__init__(message)


class MountUsageError(MountStoreError):
    """API used out of order (single-use creator reused, stale handle, ...)."""


class TransactionCommittedError(MountUsageError):
    """A committed transaction was mutated or committed again."""


class DispatchInProgressError(MountUsageError):
    """An action was dispatched while a reduction was already running.

    Reducers and viewed state resolvers must be pure; dispatching from
    inside one of them is rejected by the base store.
    """


class MountDataError(MountStoreError):
    """Viewed state could not be resolved from its source.

    ``key`` is the viewed state alias being computed and ``source`` the
    dotted path it was declared against (empty for callable resolvers).
    """

    def __init__(
        self,
        message: str,
        *,
        key: str = "",
        source: str = "",
    ) -> None:
        self.key = key
        self.source = source
        super().__init__(message)
