"""
Seeded Random - 재현 가능한 난수 생성기
======================================

모든 샘플링(부트스트랩 추출, 피처 셔플)은 이 생성기 하나만 사용합니다.
같은 시드 → 같은 난수열 → 비트 단위로 동일한 포레스트.

알고리즘 (mulberry32):
--------------------
    s ← s + 0x6D2B79F5                       (mod 2^32)
    t ← imul(s ⊕ (s >> 15), 1 | s)
    t ← (t + imul(t ⊕ (t >> 7), 61 | t)) ⊕ t
    u ← (t ⊕ (t >> 14)) / 2^32               ∈ [0, 1)

모든 연산은 32비트 부호 없는 정수로 마스킹합니다.

Author: ML From Scratch Project
"""

import math
from typing import List, Any

_MASK32 = 0xFFFFFFFF


def _imul(a: int, b: int) -> int:
    """32비트 정수 곱셈 (하위 32비트만 유지)"""
    return (a * b) & _MASK32


class SeededRandom:
    """
    mulberry32 기반 시드 난수 생성기

    Parameters
    ----------
    seed : int, default=42
        초기 시드. 2^32로 나눈 나머지가 사용됨.

    Examples
    --------
    >>> rng = SeededRandom(1)
    >>> a = [rng.next() for _ in range(3)]
    >>> rng.reset(1)
    >>> a == [rng.next() for _ in range(3)]
    True
    """

    def __init__(self, seed: int = 42):
        self.seed = seed
        self._state = seed & _MASK32

    def reset(self, seed: int) -> None:
        """시드를 다시 설정하고 난수열을 처음부터 시작"""
        self.seed = seed
        self._state = seed & _MASK32

    def next(self) -> float:
        """[0, 1) 구간의 다음 난수"""
        self._state = (self._state + 0x6D2B79F5) & _MASK32
        s = self._state
        t = _imul(s ^ (s >> 15), 1 | s)
        t = ((t + _imul(t ^ (t >> 7), 61 | t)) & _MASK32) ^ t
        return ((t ^ (t >> 14)) & _MASK32) / 4294967296

    __call__ = next

    def randint(self, n: int) -> int:
        """[0, n) 구간의 정수 (floor(u * n))"""
        return int(math.floor(self.next() * n))

    def normal(self, mean: float = 0.0, std: float = 1.0) -> float:
        """Box-Muller 변환으로 정규분포 샘플 생성 (난수 2개 소비)"""
        u1 = self.next()
        u2 = self.next()
        # u1 == 0이면 log(0)이 되므로 가장 작은 양수로 대체
        u1 = u1 if u1 > 0.0 else 2.0 ** -32
        z = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
        return mean + z * std

    def shuffle(self, items: List[Any]) -> List[Any]:
        """Fisher-Yates 셔플 (제자리 변경 후 같은 리스트 반환)"""
        for i in range(len(items) - 1, 0, -1):
            j = self.randint(i + 1)
            items[i], items[j] = items[j], items[i]
        return items

    def __repr__(self) -> str:
        return f"SeededRandom(seed={self.seed})"
