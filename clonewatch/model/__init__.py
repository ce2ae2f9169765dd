from .operation import (
    Branch,
    CloningRepository,
    CloningRepositoryState,
    FetchProgress,
    Remote,
)

__all__ = [
    "Branch",
    "CloningRepository",
    "CloningRepositoryState",
    "FetchProgress",
    "Remote",
]
