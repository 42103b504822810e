from __future__ import annotations

from contextlib import nullcontext
from typing import ContextManager, Optional, Protocol


class TransactionManager(Protocol):
    """Anything that can run a block as one all-or-nothing unit of work."""

    def transaction(self) -> ContextManager[None]:
        raise NotImplementedError


def begin(tx: Optional[TransactionManager]) -> ContextManager[None]:
    return tx.transaction() if tx is not None else nullcontext()
