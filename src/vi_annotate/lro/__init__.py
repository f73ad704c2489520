from .handle import OperationHandle, OperationState
from .poller import Poller
from .future import ResultFuture

__all__ = [
    "OperationHandle",
    "OperationState",
    "Poller",
    "ResultFuture",
]
