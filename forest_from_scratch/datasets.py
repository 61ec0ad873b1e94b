"""
합성 2차원 분류 데이터 생성기

모두 SeededRandom을 사용하므로 같은 시드면 같은 데이터가 나옵니다.
"""

import math
from typing import List

from .decision_tree import DataPoint
from .rng import SeededRandom


def make_tree_friendly(n: int, n_splits: int = 3, seed: int = 42) -> List[DataPoint]:
    """
    축 정렬 경계로 나뉘는 데이터 (트리 데모용)

    [0, 10]^2 균등 분포 위에서 n_splits개의 축 정렬 조건을 XOR로 겹쳐 레이블 결정.
    """
    rng = SeededRandom(seed)
    rules = [
        lambda x, y: x > 5,
        lambda x, y: y > 5,
        lambda x, y: x > 7.5,
        lambda x, y: y > 2.5,
        lambda x, y: x > 2.5 and y > 7.5,
        lambda x, y: x < 1.5,
        lambda x, y: y < 1.5 and x > 3,
        lambda x, y: x > 6 and y < 3,
    ]

    points = []
    for _ in range(n):
        x = rng.next() * 10
        y = rng.next() * 10
        label = 0
        for rule in rules[:n_splits]:
            if rule(x, y):
                label ^= 1
        points.append(DataPoint(x, y, label))

    return points


def make_moons(n: int, noise: float = 0.15, seed: int = 42) -> List[DataPoint]:
    """서로 맞물린 두 개의 반원"""
    rng = SeededRandom(seed)
    half = n // 2
    points = []

    for i in range(half):
        angle = math.pi * i / half
        points.append(DataPoint(
            math.cos(angle) + rng.normal(0, noise),
            math.sin(angle) + rng.normal(0, noise),
            0
        ))

    for i in range(n - half):
        angle = math.pi * i / (n - half)
        points.append(DataPoint(
            1 - math.cos(angle) + rng.normal(0, noise),
            0.5 - math.sin(angle) + rng.normal(0, noise),
            1
        ))

    return points


def make_separable(n: int, gap: float = 0.5, seed: int = 42) -> List[DataPoint]:
    """x < 0 → 0, x >= 0 → 1 로 완전히 분리되는 두 군집"""
    rng = SeededRandom(seed)
    points = []

    for i in range(n):
        label = i % 2
        offset = gap + rng.next() * 2
        x = offset if label == 1 else -offset
        y = rng.normal(0, 1)
        points.append(DataPoint(x, y, label))

    return points
