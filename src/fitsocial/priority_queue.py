"""우선순위 큐 모듈: 피드 랭킹에 사용하는 최대 우선순위 큐"""
from __future__ import annotations

import heapq
import itertools
from typing import Any, List, Optional, Tuple


class PriorityQueue:
    """
    이진 힙 기반 최대 우선순위 큐

    heapq는 최소 힙이므로 우선순위의 부호를 뒤집어 저장합니다.
    삽입 순번을 함께 저장하여 우선순위가 같은 항목은 먼저 들어온 순서로
    꺼내고, 항목끼리 직접 비교되는 일이 없도록 합니다.
    """

    def __init__(self) -> None:
        self._heap: List[Tuple[float, int, Any]] = []
        self._counter = itertools.count()

    def enqueue(self, item: Any, priority: float) -> None:
        heapq.heappush(self._heap, (-priority, next(self._counter), item))

    def dequeue(self) -> Optional[Any]:
        """가장 높은 우선순위 항목을 꺼내 반환 (비어 있으면 None)"""
        if not self._heap:
            return None
        return heapq.heappop(self._heap)[2]

    def is_empty(self) -> bool:
        return not self._heap

    def size(self) -> int:
        return len(self._heap)

    def __len__(self) -> int:
        return len(self._heap)
