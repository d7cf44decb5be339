"""
Historique d'annulation de l'éditeur de contenu.

Pile bornée de copies complètes de la séquence, prises AVANT chaque mutation.
Pas de redo.
"""

import copy
from collections import deque
from contextlib import contextmanager
from typing import List, Optional

DEFAULT_LIMIT = 20


class UndoHistory:
    def __init__(self, limit: int = DEFAULT_LIMIT):
        self.limit = limit
        self._stack = deque(maxlen=limit)  # les plus anciennes sortent en premier
        self._restoring = False

    def __len__(self) -> int:
        return len(self._stack)

    @property
    def can_undo(self) -> bool:
        return len(self._stack) > 0

    def snapshot(self, sequence: List) -> None:
        """Copie profonde de la séquence, ignorée pendant une restauration"""
        if self._restoring:
            return
        self._stack.append(copy.deepcopy(list(sequence)))

    def undo(self) -> Optional[List]:
        """Dépile le dernier snapshot, None si l'historique est vide"""
        if not self._stack:
            return None
        return self._stack.pop()

    @contextmanager
    def restoring(self):
        # garde de réentrance : l'annulation elle-même n'est jamais enregistrée
        self._restoring = True
        try:
            yield
        finally:
            self._restoring = False

    def clear(self) -> None:
        self._stack.clear()
