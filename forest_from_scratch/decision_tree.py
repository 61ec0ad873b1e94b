"""
Decision Tree Classifier - From Scratch Implementation
=======================================================

CART (Classification and Regression Trees) 알고리즘 기반 2차원 분류 트리 구현.

수학적 배경:
-----------
분할 기준: Gini 불순도 감소 최대화

분할 전 Gini:
    G_parent = 1 - Σ p_c²

분할 후 가중 Gini:
    G_split = (n_left/n) * G_left + (n_right/n) * G_right

정보 이득 (Information Gain):
    Gain = G_parent - G_split

최적 분할: Gain이 최대인 (feature, threshold) 선택
    - 후보 임계값: 정렬된 고유값들의 인접 중간점
    - 동률이면 먼저 탐색한 피처/임계값 유지

노드 중요도 (정규화하지 않음):
    impurity_decrease = Gain * n_node

예측:
    leaf_prediction = majority(y_samples in leaf)

Author: ML From Scratch Project
"""

import numpy as np
from typing import Optional, Tuple, Dict, List, Sequence, Any
from dataclasses import dataclass

from .impurity import gini_impurity, majority_class
from .rng import SeededRandom

# 피처 0 = x, 피처 1 = y
N_FEATURES = 2
FEATURE_NAMES = ('x', 'y')

# 분할을 시도하기 위한 최소 샘플 수 (고정 상수)
MIN_SAMPLES_SPLIT = 2


@dataclass(frozen=True)
class DataPoint:
    """2차원 분류 문제의 학습 샘플"""

    x: float
    y: float
    label: int

    def value(self, feature: int) -> float:
        """피처 인덱스에 해당하는 좌표값"""
        return self.x if feature == 0 else self.y


def points_from_arrays(X: np.ndarray, y: np.ndarray) -> List[DataPoint]:
    """(n, 2) 배열과 레이블 배열을 DataPoint 리스트로 변환"""
    X = np.asarray(X, dtype=float)
    y = np.asarray(y).ravel()

    if X.ndim != 2 or X.shape[1] != N_FEATURES:
        raise ValueError(
            f"X는 (n_samples, {N_FEATURES}) 형태여야 합니다: {X.shape}"
        )

    if X.shape[0] != len(y):
        raise ValueError(
            f"X와 y의 샘플 수가 일치하지 않습니다: {X.shape[0]} vs {len(y)}"
        )

    y_float = y.astype(float)
    if not np.all(y_float == np.round(y_float)):
        raise ValueError("y는 정수 클래스 레이블이어야 합니다.")

    return [
        DataPoint(float(row[0]), float(row[1]), int(label))
        for row, label in zip(X, y)
    ]


@dataclass(frozen=True)
class TreeNode:
    """
    결정 트리의 노드 (is_leaf 플래그로 구분되는 태그드 유니온)

    리프 노드는 prediction만 의미가 있고, 내부 노드는 분할 정보와
    두 자식을 가진다. 내부 노드의 prediction은 해당 노드의 다수 클래스.
    """

    prediction: int
    is_leaf: bool = True

    # 분할 정보 (내부 노드용)
    feature: int = 0                     # 0 = x, 1 = y
    threshold: float = 0.0               # 값 <= threshold → left
    left: Optional['TreeNode'] = None
    right: Optional['TreeNode'] = None
    impurity_decrease: float = 0.0       # Gain * n_samples

    # 진단 정보
    n_samples: int = 0
    impurity: float = 0.0
    depth: int = 0

    @classmethod
    def leaf(cls, prediction: int, n_samples: int = 0,
             impurity: float = 0.0, depth: int = 0) -> 'TreeNode':
        return cls(prediction=prediction, is_leaf=True, n_samples=n_samples,
                   impurity=impurity, depth=depth)

    @classmethod
    def split(cls, feature: int, threshold: float, left: 'TreeNode',
              right: 'TreeNode', prediction: int, impurity_decrease: float,
              n_samples: int = 0, impurity: float = 0.0,
              depth: int = 0) -> 'TreeNode':
        return cls(prediction=prediction, is_leaf=False, feature=feature,
                   threshold=threshold, left=left, right=right,
                   impurity_decrease=impurity_decrease, n_samples=n_samples,
                   impurity=impurity, depth=depth)


def _find_best_split(
    data: Sequence[DataPoint],
    allowed_features: Sequence[int],
    parent_impurity: float
) -> Tuple[Optional[int], Optional[float], float]:
    """
    최적의 분할점 탐색

    허용된 각 피처와 가능한 임계값에 대해:
    1. 데이터를 left(<=threshold), right(>threshold)로 분할
    2. 한쪽이 비면 건너뜀
    3. 정보 이득이 지금까지의 최댓값보다 '엄격히' 클 때만 갱신

    Returns
    -------
    best_feature : int or None
    best_threshold : float or None
    best_gain : float
        유효한 후보가 없으면 -inf
    """
    n_samples = len(data)
    labels = np.array([p.label for p in data])

    best_gain = -np.inf
    best_feature = None
    best_threshold = None

    for feature in allowed_features:
        values = np.array([p.value(feature) for p in data], dtype=float)
        unique_values = np.unique(values)

        if len(unique_values) < 2:
            continue

        # 인접한 고유값들의 중간점을 임계값으로 사용
        thresholds = (unique_values[:-1] + unique_values[1:]) / 2

        for threshold in thresholds:
            left_mask = values <= threshold
            n_left = int(np.sum(left_mask))
            n_right = n_samples - n_left

            if n_left == 0 or n_right == 0:
                continue

            weighted = (
                (n_left / n_samples) * gini_impurity(labels[left_mask]) +
                (n_right / n_samples) * gini_impurity(labels[~left_mask])
            )
            gain = parent_impurity - weighted

            if gain > best_gain:
                best_gain = gain
                best_feature = int(feature)
                best_threshold = float(threshold)

    return best_feature, best_threshold, best_gain


def build_tree(
    data: Sequence[DataPoint],
    max_depth: int,
    min_samples_split: int,
    allowed_features: Sequence[int],
    rng: Optional[SeededRandom] = None,
    depth: int = 0,
    history: Optional[List[Dict]] = None
) -> TreeNode:
    """
    재귀적으로 분류 트리 구축

    종료 조건 (순서대로 검사, 먼저 걸리는 조건으로 리프 생성):
    1. depth >= max_depth
    2. 샘플 수 < min_samples_split
    3. 불순도 0 (순수 노드)
    4. 양의 이득을 주는 분할 없음

    rng는 드라이버와 인터페이스를 맞추기 위해 받기만 하고 사용하지 않음.
    history가 주어지면 노드마다 leaf/split 결정을 기록함 (시각화용).
    """
    labels = [p.label for p in data]
    n_samples = len(data)
    prediction = majority_class(labels)
    impurity = gini_impurity(labels)

    def _leaf() -> TreeNode:
        if history is not None:
            history.append({
                'depth': depth,
                'n_samples': n_samples,
                'gini': impurity,
                'action': 'leaf',
                'value': prediction
            })
        return TreeNode.leaf(prediction, n_samples, impurity, depth)

    if depth >= max_depth or n_samples < min_samples_split or impurity == 0:
        return _leaf()

    best_feature, best_threshold, best_gain = _find_best_split(
        data, allowed_features, impurity
    )

    if best_feature is None or best_gain <= 0:
        return _leaf()

    left_data = [p for p in data if p.value(best_feature) <= best_threshold]
    right_data = [p for p in data if p.value(best_feature) > best_threshold]

    if history is not None:
        history.append({
            'depth': depth,
            'n_samples': n_samples,
            'gini': impurity,
            'action': 'split',
            'feature': best_feature,
            'threshold': best_threshold,
            'gain': best_gain,
            'n_left': len(left_data),
            'n_right': len(right_data)
        })

    left = build_tree(left_data, max_depth, min_samples_split,
                      allowed_features, rng, depth + 1, history)
    right = build_tree(right_data, max_depth, min_samples_split,
                       allowed_features, rng, depth + 1, history)

    return TreeNode.split(
        feature=best_feature,
        threshold=best_threshold,
        left=left,
        right=right,
        prediction=prediction,
        impurity_decrease=best_gain * n_samples,
        n_samples=n_samples,
        impurity=impurity,
        depth=depth
    )


def predict_point(tree: TreeNode, x: float, y: float) -> int:
    """단일 점 예측"""
    node = tree
    while not node.is_leaf:
        value = x if node.feature == 0 else y
        node = node.left if value <= node.threshold else node.right
    return node.prediction


def accumulate_importance(tree: TreeNode, running_totals) -> None:
    """
    내부 노드마다 impurity_decrease를 running_totals[feature]에 누적

    리프는 기여하지 않음. running_totals는 제자리에서 변경됨.
    """
    if tree.is_leaf:
        return
    running_totals[tree.feature] += tree.impurity_decrease
    accumulate_importance(tree.left, running_totals)
    accumulate_importance(tree.right, running_totals)


def tree_stats(tree: TreeNode) -> Dict:
    """트리 통계 계산"""
    stats = {
        'max_depth': 0,
        'n_nodes': 0,
        'n_leaves': 0,
        'n_internal': 0
    }

    def _traverse(node: TreeNode, depth: int):
        stats['n_nodes'] += 1
        stats['max_depth'] = max(stats['max_depth'], depth)

        if node.is_leaf:
            stats['n_leaves'] += 1
        else:
            stats['n_internal'] += 1
            _traverse(node.left, depth + 1)
            _traverse(node.right, depth + 1)

    _traverse(tree, 0)
    return stats


def export_tree_structure(tree: TreeNode) -> Dict:
    """트리 구조를 딕셔너리로 내보내기 (시각화용)"""
    result: Dict[str, Any] = {
        'prediction': tree.prediction,
        'n_samples': tree.n_samples,
        'gini': tree.impurity,
        'depth': tree.depth,
        'is_leaf': tree.is_leaf
    }

    if not tree.is_leaf:
        result['feature_idx'] = tree.feature
        result['threshold'] = tree.threshold
        result['impurity_decrease'] = tree.impurity_decrease
        result['left'] = export_tree_structure(tree.left)
        result['right'] = export_tree_structure(tree.right)

    return result


class DecisionTreeClassifier:
    """
    2차원 Gini 분류 트리 (From Scratch)

    Parameters
    ----------
    max_depth : int, default=5
        트리의 최대 깊이. 0이면 루트 하나짜리 리프.

    allowed_features : sequence of int, default=None
        분할에 사용할 피처 (0 = x, 1 = y). None이면 두 피처 모두.

    Attributes
    ----------
    root_ : TreeNode
        학습된 트리의 루트 노드

    feature_importances_ : ndarray of shape (2,)
        피처 중요도 (불순도 감소 기반, 합 = 1)

    tree_stats_ : dict
        트리 통계 (깊이, 노드 수, 리프 수 등)

    Examples
    --------
    >>> import numpy as np
    >>> X = np.array([[-1.0, 0.0], [1.0, 0.0]])
    >>> tree = DecisionTreeClassifier(max_depth=1).fit(X, [0, 1])
    >>> tree.predict(np.array([[-0.5, 3.0], [0.5, 3.0]]))
    array([0, 1])
    """

    def __init__(
        self,
        max_depth: int = 5,
        allowed_features: Optional[Sequence[int]] = None
    ):
        self.max_depth = max_depth
        self.allowed_features = allowed_features

        # 학습 후 설정되는 속성들
        self.root_: Optional[TreeNode] = None
        self.feature_importances_: Optional[np.ndarray] = None
        self.tree_stats_: Dict = {}

        # 학습 과정 기록 (시각화용)
        self.training_history_: List[Dict] = []

    def fit(self, X: np.ndarray, y: np.ndarray) -> 'DecisionTreeClassifier':
        """
        결정 트리 학습

        Parameters
        ----------
        X : ndarray of shape (n_samples, 2)
        y : ndarray of shape (n_samples,)
            정수 클래스 레이블

        Returns
        -------
        self : DecisionTreeClassifier
        """
        data = points_from_arrays(X, y)
        if len(data) == 0:
            raise ValueError("학습 데이터가 비어 있습니다.")

        features = (list(range(N_FEATURES)) if self.allowed_features is None
                    else list(self.allowed_features))

        self.training_history_ = []
        self.root_ = build_tree(data, self.max_depth, MIN_SAMPLES_SPLIT,
                                features, None, history=self.training_history_)

        importances = np.zeros(N_FEATURES)
        accumulate_importance(self.root_, importances)
        total = np.sum(importances)
        if total > 0:
            importances /= total
        self.feature_importances_ = importances

        self.tree_stats_ = tree_stats(self.root_)
        return self

    def predict(self, X: np.ndarray) -> np.ndarray:
        """
        예측 수행

        Parameters
        ----------
        X : ndarray of shape (n_samples, 2)

        Returns
        -------
        y_pred : ndarray of shape (n_samples,)
        """
        if self.root_ is None:
            raise RuntimeError("모델이 학습되지 않았습니다. fit()을 먼저 호출하세요.")

        X = np.asarray(X, dtype=float)
        if X.ndim == 1:
            X = X.reshape(1, -1)

        return np.array([predict_point(self.root_, row[0], row[1]) for row in X])

    def get_depth(self) -> int:
        """트리의 최대 깊이 반환"""
        if self.root_ is None:
            return 0
        return self.tree_stats_.get('max_depth', 0)

    def get_n_leaves(self) -> int:
        """리프 노드 수 반환"""
        if self.root_ is None:
            return 0
        return self.tree_stats_.get('n_leaves', 0)

    def export_tree_structure(self) -> Dict:
        if self.root_ is None:
            return {}
        return export_tree_structure(self.root_)

    def __repr__(self) -> str:
        if self.root_ is None:
            return "DecisionTreeClassifier(not fitted)"

        return (
            f"DecisionTreeClassifier("
            f"depth={self.get_depth()}, "
            f"n_leaves={self.get_n_leaves()})"
        )
