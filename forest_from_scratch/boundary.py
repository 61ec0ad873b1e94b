"""
결정 경계 영역 추출

트리를 재귀적으로 내려가며 전체 경계 상자를 축에 정렬된 리프 영역으로 분해합니다.
한 트리의 영역들은 경계 상자를 빈틈/겹침 없이 정확히 덮습니다.

    내부 노드 (feature=x, threshold=t):
        [x_min, x_max] → [x_min, t'] + [t', x_max],   t' = clip(t, x_min, x_max)

    리프 노드:
        confidence = (영역 안에서 예측과 레이블이 같은 점 수) / (영역 안의 점 수)
        영역 안에 점이 없으면 1.0
"""

import numpy as np
from typing import List, Sequence
from dataclasses import dataclass

from .decision_tree import DataPoint, TreeNode

# 데이터 범위에 더할 여백 비율
BOUNDS_MARGIN = 0.05


@dataclass(frozen=True)
class DecisionBoundaryRegion:
    """하나의 리프가 담당하는 축 정렬 사각형"""

    x_min: float
    x_max: float
    y_min: float
    y_max: float
    prediction: int
    confidence: float

    @property
    def area(self) -> float:
        return (self.x_max - self.x_min) * (self.y_max - self.y_min)

    def contains(self, x: float, y: float) -> bool:
        """경계 포함 (닫힌 사각형)"""
        return self.x_min <= x <= self.x_max and self.y_min <= y <= self.y_max


@dataclass(frozen=True)
class BoundingBox:
    x_min: float
    x_max: float
    y_min: float
    y_max: float

    @property
    def area(self) -> float:
        return (self.x_max - self.x_min) * (self.y_max - self.y_min)


def data_bounds(data: Sequence[DataPoint], margin: float = BOUNDS_MARGIN) -> BoundingBox:
    """
    데이터를 감싸는 경계 상자 (여백 포함)

    축마다 span * margin 만큼 넓히고, span이 0이면 0.5만큼 넓힘.
    """
    if len(data) == 0:
        raise ValueError("빈 데이터의 경계 상자는 정의되지 않습니다.")

    xs = np.array([p.x for p in data], dtype=float)
    ys = np.array([p.y for p in data], dtype=float)

    x_min, x_max = float(xs.min()), float(xs.max())
    y_min, y_max = float(ys.min()), float(ys.max())

    x_margin = (x_max - x_min) * margin or 0.5
    y_margin = (y_max - y_min) * margin or 0.5

    return BoundingBox(x_min - x_margin, x_max + x_margin,
                       y_min - y_margin, y_max + y_margin)


def _leaf_confidence(
    prediction: int,
    x_min: float,
    x_max: float,
    y_min: float,
    y_max: float,
    data: Sequence[DataPoint]
) -> float:
    inside = [p for p in data
              if x_min <= p.x <= x_max and y_min <= p.y <= y_max]
    if not inside:
        return 1.0
    matching = sum(1 for p in inside if p.label == prediction)
    return matching / len(inside)


def extract_boundaries(
    tree: TreeNode,
    x_min: float,
    x_max: float,
    y_min: float,
    y_max: float,
    data: Sequence[DataPoint]
) -> List[DecisionBoundaryRegion]:
    """
    트리의 리프 영역을 사각형 목록으로 추출

    Parameters
    ----------
    tree : TreeNode
        학습된 트리
    x_min, x_max, y_min, y_max : float
        현재 사각형
    data : sequence of DataPoint
        신뢰도 계산에 쓰는 참조 집합 (트리 학습에 사용한 부트스트랩 샘플 전체)

    Returns
    -------
    regions : list of DecisionBoundaryRegion
    """
    if tree.is_leaf:
        confidence = _leaf_confidence(tree.prediction, x_min, x_max,
                                      y_min, y_max, data)
        return [DecisionBoundaryRegion(x_min, x_max, y_min, y_max,
                                       tree.prediction, confidence)]

    regions: List[DecisionBoundaryRegion] = []

    if tree.feature == 0:
        cut = min(max(tree.threshold, x_min), x_max)
        regions.extend(extract_boundaries(tree.left, x_min, cut, y_min, y_max, data))
        regions.extend(extract_boundaries(tree.right, cut, x_max, y_min, y_max, data))
    else:
        cut = min(max(tree.threshold, y_min), y_max)
        regions.extend(extract_boundaries(tree.left, x_min, x_max, y_min, cut, data))
        regions.extend(extract_boundaries(tree.right, x_min, x_max, cut, y_max, data))

    return regions
