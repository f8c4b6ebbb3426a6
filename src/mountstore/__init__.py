"""mountstore - compose one state tree from independently mounted reducers."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("mountstore")
except PackageNotFoundError:
    __version__ = "0+local"
from mountstore.actions import (
    Action,
    ActionType,
    AppAction,
    InitAction,
    MountAction,
    QueryAction,
    QueryResultAction,
    UnmountAction,
    coerce_action,
)
from mountstore.config import MountStoreConfig
from mountstore.exceptions import (
    DispatchInProgressError,
    MountConfigError,
    MountConflictError,
    MountDataError,
    MountStoreError,
    MountUsageError,
    TransactionCommittedError,
)
from mountstore.mountable import (
    MountableStore,
    MountedStore,
    MountedStoreCreator,
    create_mountable_store,
    mountable,
)
from mountstore.store import Store, apply_middleware, create_store
from mountstore.transaction import Transaction, create_transaction, delete_in, set_in

__all__ = [
    "__version__",
    "Action",
    "ActionType",
    "AppAction",
    "DispatchInProgressError",
    "InitAction",
    "MountAction",
    "MountConfigError",
    "MountConflictError",
    "MountDataError",
    "MountStoreConfig",
    "MountStoreError",
    "MountUsageError",
    "MountableStore",
    "MountedStore",
    "MountedStoreCreator",
    "QueryAction",
    "QueryResultAction",
    "Store",
    "Transaction",
    "TransactionCommittedError",
    "UnmountAction",
    "apply_middleware",
    "coerce_action",
    "create_mountable_store",
    "create_store",
    "create_transaction",
    "delete_in",
    "mountable",
    "set_in",
]
