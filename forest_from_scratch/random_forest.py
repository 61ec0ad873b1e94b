"""
Random Forest Classifier - From Scratch Implementation
======================================================

배깅(Bootstrap Aggregating) + 랜덤 피처 선택을 결합한 앙상블 방법.
트리를 하나씩 추가하면서 매 라운드의 앙상블 상태를 스냅샷으로 남깁니다.

수학적 배경:
-----------
1. 배깅 (Bootstrap Aggregating):
   - 원본 데이터에서 복원 추출로 n개의 부트스트랩 샘플 생성
   - 각 샘플로 독립적인 트리 학습

2. 랜덤 피처 선택:
   - 트리마다 max_features개의 피처만 분할 후보로 사용 (Fisher-Yates 셔플)
   - 트리 간 상관관계 감소 → 앙상블 효과 증대

3. Out-of-Bag (OOB) 오차:
   - 각 트리 학습에 사용되지 않은 샘플(~37%)에 대해서만 투표
   - 한 번이라도 OOB 투표를 받은 샘플만 분모에 포함

   P(샘플이 선택되지 않음) = (1 - 1/n)^n ≈ e^{-1} ≈ 0.368

4. 최종 예측:
   ŷ = argmax_c Σ_m 1[h_m(x) = c]
   (다수결, 동률이면 가장 작은 레이블)

5. 피처 중요도:
   importance[f] ∝ Σ_trees Σ_{splits on f} Gain * n_node

라운드 t의 처리 순서:
    부트스트랩 → 피처 선택 → 트리 학습 → 경계 추출 → 격자 투표
    → 중요도 누적 → OOB 갱신 → 학습 정확도 → 스냅샷

Author: ML From Scratch Project
"""

import math
import numpy as np
from typing import Optional, List, Dict, Tuple, Sequence, Iterator
from dataclasses import dataclass

from .boundary import BoundingBox, DecisionBoundaryRegion, data_bounds, extract_boundaries
from .decision_tree import (
    DataPoint,
    TreeNode,
    MIN_SAMPLES_SPLIT,
    N_FEATURES,
    accumulate_importance,
    build_tree,
    points_from_arrays,
    predict_point,
)
from .impurity import vote_winner
from .rng import SeededRandom

# 집계 격자 크기 (GRID_SIZE x GRID_SIZE)
GRID_SIZE = 25


@dataclass(frozen=True)
class RandomForestConfig:
    """
    Random Forest 실행 설정 (불변)

    Parameters
    ----------
    n_estimators : int, default=10
        트리 개수 (> 0)
    max_depth : int, default=5
        각 트리의 최대 깊이 (>= 0)
    max_features : int, default=round(sqrt(2)) = 1
        트리마다 고려할 피처 수 (>= 1). 2보다 크면 2로 잘림.
    bootstrap : bool, default=True
        부트스트랩 샘플 사용 여부
    seed : int, default=42
        난수 시드
    """

    n_estimators: int = 10
    max_depth: int = 5
    max_features: int = max(1, round(math.sqrt(N_FEATURES)))
    bootstrap: bool = True
    seed: int = 42

    def __post_init__(self):
        for name in ('n_estimators', 'max_depth', 'max_features', 'seed'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ValueError(f"{name}은(는) 정수여야 합니다: {value!r}")

        if self.n_estimators <= 0:
            raise ValueError(f"n_estimators는 1 이상이어야 합니다: {self.n_estimators}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth는 0 이상이어야 합니다: {self.max_depth}")
        if self.max_features < 1:
            raise ValueError(f"max_features는 1 이상이어야 합니다: {self.max_features}")

    @property
    def effective_max_features(self) -> int:
        return min(int(self.max_features), N_FEATURES)


@dataclass(frozen=True)
class GridCell:
    """집계 격자의 한 칸: 대표점 좌표와 다수결 결과"""

    x: float
    y: float
    prediction: int
    confidence: float


@dataclass(frozen=True)
class RandomForestSnapshot:
    """
    라운드 t가 끝난 뒤의 앙상블 상태 (생성 후 변경 불가)

    tree_boundaries는 라운드 0..t 각 트리의 영역 목록,
    aggregated_boundary는 지금까지 만든 모든 트리의 격자 다수결.
    """

    tree_index: int
    total_trees: int
    tree_boundaries: Tuple[Tuple[DecisionBoundaryRegion, ...], ...]
    aggregated_boundary: Tuple[GridCell, ...]
    feature_importances: Tuple[float, ...]
    oob_error: float
    train_accuracy: float
    bootstrap_indices: Tuple[int, ...]
    selected_features: Tuple[int, ...] = ()
    n_oob_samples: int = 0
    tree: Optional[TreeNode] = None


class RandomForestBuilder:
    """
    트리를 한 라운드씩 추가하는 Random Forest 드라이버

    호출마다 새로 만들어지는 상태 객체로, 라운드 간 누적값
    (트리 목록, 격자 투표, OOB 투표, 중요도)을 모두 자신이 소유한다.
    이미 반환된 스냅샷은 이후 라운드의 영향을 받지 않는다.

    Parameters
    ----------
    data : sequence of DataPoint
        학습 데이터
    config : RandomForestConfig, optional
        실행 설정. None이면 기본값.
    verbose : int, default=0
        출력 수준

    Examples
    --------
    >>> builder = RandomForestBuilder(data, RandomForestConfig(n_estimators=3))
    >>> first = builder.step()
    >>> rest = list(builder)
    >>> len(rest)
    2
    """

    def __init__(
        self,
        data: Sequence[DataPoint],
        config: Optional[RandomForestConfig] = None,
        verbose: int = 0
    ):
        self.data: List[DataPoint] = list(data)
        self.config = config if config is not None else RandomForestConfig()
        self.verbose = verbose
        self.rng = SeededRandom(self.config.seed)

        n_samples = len(self.data)

        # 레이블 → 밀집 인덱스 (오름차순이므로 argmax 동률 = 가장 작은 레이블)
        self.classes_ = np.array(sorted({p.label for p in self.data}), dtype=int)
        self._class_index: Dict[int, int] = {
            int(label): k for k, label in enumerate(self.classes_)
        }
        self._labels = np.array([p.label for p in self.data], dtype=int)
        n_classes = len(self.classes_)

        self.bounds: Optional[BoundingBox] = None
        self.grid_xs = np.zeros(0)
        self.grid_ys = np.zeros(0)
        if n_samples > 0:
            self.bounds = data_bounds(self.data)
            self.grid_xs = np.linspace(self.bounds.x_min, self.bounds.x_max, GRID_SIZE)
            self.grid_ys = np.linspace(self.bounds.y_min, self.bounds.y_max, GRID_SIZE)

        # 라운드 간 누적 상태
        self.trees: List[TreeNode] = []
        self.tree_boundaries: List[Tuple[DecisionBoundaryRegion, ...]] = []
        self.grid_votes = np.zeros((GRID_SIZE, GRID_SIZE, n_classes), dtype=int)
        self.oob_votes = np.zeros((n_samples, n_classes), dtype=int)
        self.train_votes = np.zeros((n_samples, n_classes), dtype=int)
        self.total_importance = np.zeros(N_FEATURES)

        self._round = 0

    @property
    def n_rounds(self) -> int:
        """빈 데이터면 0 라운드"""
        return self.config.n_estimators if self.data else 0

    @property
    def done(self) -> bool:
        return self._round >= self.n_rounds

    def _draw_bootstrap(self) -> List[int]:
        n_samples = len(self.data)
        if self.config.bootstrap:
            return [self.rng.randint(n_samples) for _ in range(n_samples)]
        return list(range(n_samples))

    def _select_features(self) -> List[int]:
        features = list(range(N_FEATURES))
        n_selected = self.config.effective_max_features
        if n_selected >= N_FEATURES:
            return features
        return self.rng.shuffle(features)[:n_selected]

    def _update_grid(self, tree: TreeNode) -> Tuple[GridCell, ...]:
        """새 트리의 격자 투표를 더하고 전체 다수결 격자를 다시 계산"""
        for i, gx in enumerate(self.grid_xs):
            for j, gy in enumerate(self.grid_ys):
                pred = predict_point(tree, gx, gy)
                self.grid_votes[i, j, self._class_index[pred]] += 1

        winners, best = vote_winner(self.grid_votes)
        totals = self.grid_votes.sum(axis=2)

        cells = []
        for i, gx in enumerate(self.grid_xs):
            for j, gy in enumerate(self.grid_ys):
                total = totals[i, j]
                cells.append(GridCell(
                    x=float(gx),
                    y=float(gy),
                    prediction=int(self.classes_[winners[i, j]]),
                    confidence=float(best[i, j] / total) if total > 0 else 0.0
                ))
        return tuple(cells)

    def _update_importance(self, tree: TreeNode) -> Tuple[float, ...]:
        accumulate_importance(tree, self.total_importance)
        total = float(np.sum(self.total_importance))
        if total > 0:
            return tuple(float(v) for v in self.total_importance / total)
        return tuple([1.0 / N_FEATURES] * N_FEATURES)

    def _predict_data(self, tree: TreeNode, indices) -> np.ndarray:
        """indices에 해당하는 학습 샘플의 예측 (밀집 클래스 인덱스)"""
        return np.array([
            self._class_index[predict_point(tree, self.data[i].x, self.data[i].y)]
            for i in indices
        ], dtype=int)

    def _update_oob(self, tree: TreeNode, bootstrap_indices: List[int]) -> Tuple[int, float]:
        """
        이번 부트스트랩에 뽑히지 않은 샘플에 투표하고 OOB 오차 계산

        Returns
        -------
        n_oob_samples : int
            OOB 투표를 한 번 이상 받은 샘플 수
        oob_error : float
            OOB 샘플이 없으면 0.0
        """
        if self.config.bootstrap:
            in_bag = np.zeros(len(self.data), dtype=bool)
            in_bag[bootstrap_indices] = True
            oob_indices = np.flatnonzero(~in_bag)
            if len(oob_indices) > 0:
                preds = self._predict_data(tree, oob_indices)
                self.oob_votes[oob_indices, preds] += 1

        covered = self.oob_votes.sum(axis=1) > 0
        n_oob = int(np.sum(covered))
        if n_oob == 0:
            return 0, 0.0

        winners, _ = vote_winner(self.oob_votes[covered])
        correct = int(np.sum(self.classes_[winners] == self._labels[covered]))
        return n_oob, 1.0 - correct / n_oob

    def _update_train_accuracy(self, tree: TreeNode) -> float:
        """모든 학습 샘플에 대한 앙상블 다수결 정확도"""
        all_indices = np.arange(len(self.data))
        preds = self._predict_data(tree, all_indices)
        self.train_votes[all_indices, preds] += 1

        winners, _ = vote_winner(self.train_votes)
        return float(np.mean(self.classes_[winners] == self._labels))

    def step(self) -> RandomForestSnapshot:
        """
        한 라운드 실행 후 스냅샷 반환

        Raises
        ------
        StopIteration
            모든 라운드가 끝났거나 데이터가 비어 있는 경우
        """
        if self.done:
            raise StopIteration

        t = self._round
        n_estimators = self.config.n_estimators

        if t == 0 and self.verbose > 0:
            print(f"Random Forest 학습 시작: {n_estimators}개 트리, {len(self.data)}개 샘플")

        # 1. 부트스트랩 샘플링
        bootstrap_indices = self._draw_bootstrap()
        sample = [self.data[i] for i in bootstrap_indices]

        # 2. 피처 서브샘플링
        features = self._select_features()

        # 3. 트리 학습
        tree = build_tree(sample, self.config.max_depth, MIN_SAMPLES_SPLIT,
                          features, self.rng)
        self.trees.append(tree)

        # 4. 경계 영역 추출 (신뢰도 기준: 부트스트랩 샘플)
        b = self.bounds
        regions = tuple(extract_boundaries(tree, b.x_min, b.x_max,
                                           b.y_min, b.y_max, sample))
        self.tree_boundaries.append(regions)

        # 5. 격자 투표
        aggregated = self._update_grid(tree)

        # 6. 피처 중요도
        importances = self._update_importance(tree)

        # 7. OOB 오차
        n_oob, oob_error = self._update_oob(tree, bootstrap_indices)

        # 8. 학습 정확도
        train_accuracy = self._update_train_accuracy(tree)

        snapshot = RandomForestSnapshot(
            tree_index=t,
            total_trees=n_estimators,
            tree_boundaries=tuple(self.tree_boundaries),
            aggregated_boundary=aggregated,
            feature_importances=importances,
            oob_error=oob_error,
            train_accuracy=train_accuracy,
            bootstrap_indices=tuple(bootstrap_indices),
            selected_features=tuple(features),
            n_oob_samples=n_oob,
            tree=tree
        )
        self._round += 1

        # 진행 상황 출력
        if self.verbose > 0 and (t + 1) % max(1, n_estimators // 10) == 0:
            print(f"트리 {t + 1}/{n_estimators} 완료")
        if self.verbose > 0 and self.done:
            print(f"OOB 오차: {oob_error:.4f} / 학습 정확도: {train_accuracy:.4f}")

        return snapshot

    def __iter__(self) -> Iterator[RandomForestSnapshot]:
        while not self.done:
            yield self.step()


def iter_random_forest(
    data: Sequence[DataPoint],
    config: Optional[RandomForestConfig] = None,
    verbose: int = 0
) -> Iterator[RandomForestSnapshot]:
    """라운드마다 스냅샷을 하나씩 내보내는 지연 시퀀스"""
    yield from RandomForestBuilder(data, config, verbose)


def run_random_forest(
    data: Sequence[DataPoint],
    config: Optional[RandomForestConfig] = None,
    verbose: int = 0
) -> List[RandomForestSnapshot]:
    """
    Random Forest를 트리 하나씩 학습하며 라운드별 스냅샷 목록 반환

    Parameters
    ----------
    data : sequence of DataPoint
        학습 데이터. 비어 있으면 빈 리스트 반환.
    config : RandomForestConfig, optional
        실행 설정
    verbose : int, default=0
        출력 수준

    Returns
    -------
    snapshots : list of RandomForestSnapshot
        길이 n_estimators
    """
    return list(iter_random_forest(data, config, verbose))


class RandomForestClassifier:
    """
    Random Forest 분류 모델 (From Scratch)

    Parameters
    ----------
    n_estimators : int, default=10
        트리 개수

    max_depth : int, default=5
        각 트리의 최대 깊이

    max_features : int, default=1
        트리마다 고려할 피처 수 (2보다 크면 2로 잘림)

    bootstrap : bool, default=True
        부트스트랩 샘플 사용 여부

    random_state : int, default=42
        랜덤 시드

    verbose : int, default=0
        출력 수준

    Attributes
    ----------
    estimators_ : list of TreeNode
        학습된 트리들

    snapshots_ : list of RandomForestSnapshot
        라운드별 앙상블 상태

    classes_ : ndarray
        정렬된 클래스 레이블

    feature_importances_ : ndarray of shape (2,)
        앙상블 전체의 정규화된 피처 중요도

    oob_error_ : float
        Out-of-Bag 분류 오차

    train_accuracy_ : float
        학습 데이터에 대한 앙상블 정확도

    Examples
    --------
    >>> from forest_from_scratch import RandomForestClassifier
    >>> import numpy as np
    >>> X = np.random.randn(100, 2)
    >>> y = (X[:, 0] > 0).astype(int)
    >>> rf = RandomForestClassifier(n_estimators=20, max_features=2)
    >>> rf.fit(X, y)
    >>> predictions = rf.predict(X[:5])
    """

    def __init__(
        self,
        n_estimators: int = 10,
        max_depth: int = 5,
        max_features: int = 1,
        bootstrap: bool = True,
        random_state: int = 42,
        verbose: int = 0
    ):
        self.n_estimators = n_estimators
        self.max_depth = max_depth
        self.max_features = max_features
        self.bootstrap = bootstrap
        self.random_state = random_state
        self.verbose = verbose

        # 학습 후 설정되는 속성들
        self.estimators_: List[TreeNode] = []
        self.snapshots_: List[RandomForestSnapshot] = []
        self.classes_: Optional[np.ndarray] = None
        self.feature_importances_: Optional[np.ndarray] = None
        self.oob_error_: Optional[float] = None
        self.train_accuracy_: Optional[float] = None

    def fit(self, X: np.ndarray, y: np.ndarray) -> 'RandomForestClassifier':
        """
        Random Forest 모델 학습

        Parameters
        ----------
        X : ndarray of shape (n_samples, 2)
        y : ndarray of shape (n_samples,)

        Returns
        -------
        self : RandomForestClassifier
        """
        data = points_from_arrays(X, y)
        if len(data) == 0:
            raise ValueError("학습 데이터가 비어 있습니다.")

        config = RandomForestConfig(
            n_estimators=self.n_estimators,
            max_depth=self.max_depth,
            max_features=self.max_features,
            bootstrap=self.bootstrap,
            seed=self.random_state
        )
        builder = RandomForestBuilder(data, config, self.verbose)

        self.snapshots_ = list(builder)
        self.estimators_ = list(builder.trees)
        self.classes_ = builder.classes_

        last = self.snapshots_[-1]
        self.feature_importances_ = np.array(last.feature_importances)
        self.oob_error_ = last.oob_error
        self.train_accuracy_ = last.train_accuracy

        return self

    def _check_fitted(self):
        if len(self.estimators_) == 0:
            raise RuntimeError("모델이 학습되지 않았습니다. fit()을 먼저 호출하세요.")

    def _tree_predictions(self, X: np.ndarray) -> np.ndarray:
        """(n_estimators, n_samples) 크기의 트리별 예측 클래스 인덱스"""
        X = np.asarray(X, dtype=float)
        if X.ndim == 1:
            X = X.reshape(1, -1)

        index = {int(c): k for k, c in enumerate(self.classes_)}
        return np.array([
            [index[predict_point(tree, row[0], row[1])] for row in X]
            for tree in self.estimators_
        ], dtype=int).reshape(len(self.estimators_), len(X))

    def _votes(self, tree_preds: np.ndarray) -> np.ndarray:
        n_samples = tree_preds.shape[1]
        votes = np.zeros((n_samples, len(self.classes_)), dtype=int)
        for preds in tree_preds:
            votes[np.arange(n_samples), preds] += 1
        return votes

    def predict(self, X: np.ndarray) -> np.ndarray:
        """
        예측 수행 (모든 트리의 다수결)

        Parameters
        ----------
        X : ndarray of shape (n_samples, 2)

        Returns
        -------
        y_pred : ndarray of shape (n_samples,)
        """
        self._check_fitted()
        winners, _ = vote_winner(self._votes(self._tree_predictions(X)))
        return self.classes_[winners]

    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        """클래스별 득표 비율, shape (n_samples, n_classes)"""
        self._check_fitted()
        votes = self._votes(self._tree_predictions(X))
        return votes / len(self.estimators_)

    def staged_predict(self, X: np.ndarray) -> np.ndarray:
        """
        각 트리 추가 후의 앙상블 예측 반환 (수렴 분석용)

        Returns
        -------
        predictions : ndarray of shape (n_estimators, n_samples)
        """
        self._check_fitted()
        tree_preds = self._tree_predictions(X)
        n_estimators, n_samples = tree_preds.shape

        staged = np.zeros((n_estimators, n_samples), dtype=self.classes_.dtype)
        votes = np.zeros((n_samples, len(self.classes_)), dtype=int)
        for m, preds in enumerate(tree_preds):
            votes[np.arange(n_samples), preds] += 1
            winners, _ = vote_winner(votes)
            staged[m] = self.classes_[winners]

        return staged

    def get_oob_error(self) -> Optional[float]:
        """OOB 분류 오차 반환"""
        return self.oob_error_

    def __repr__(self) -> str:
        if len(self.estimators_) == 0:
            return "RandomForestClassifier(not fitted)"

        return (
            f"RandomForestClassifier("
            f"n_estimators={len(self.estimators_)}, "
            f"max_depth={self.max_depth}, "
            f"oob_error={self.oob_error_:.4f})"
        )
