"""
Forest From Scratch - 랜덤 포레스트 직접 구현
=============================================

2차원 분류 데이터 위에서 부트스트랩 결정 트리 앙상블을 한 그루씩 키우며
라운드별 스냅샷(결정 영역, 다수결 격자, 피처 중요도, OOB 오차)을 만듭니다.
NumPy만 사용하여 알고리즘의 수학적 원리를 명확히 보여줍니다.

구성:
- SeededRandom: 재현 가능한 난수 생성기 (mulberry32)
- build_tree / DecisionTreeClassifier: Gini 기반 CART 분류 트리
- extract_boundaries: 트리의 축 정렬 결정 영역 추출
- run_random_forest / RandomForestBuilder: 라운드별 스냅샷 드라이버
- RandomForestClassifier: 배깅 기반 앙상블 분류기
- ForestVisualizer: 스냅샷 시각화

Author: ML From Scratch Project
"""

from .rng import SeededRandom
from .impurity import gini_impurity, majority_class
from .decision_tree import (
    DataPoint,
    TreeNode,
    DecisionTreeClassifier,
    build_tree,
    predict_point,
    accumulate_importance,
    points_from_arrays,
)
from .boundary import DecisionBoundaryRegion, extract_boundaries, data_bounds
from .random_forest import (
    GridCell,
    RandomForestConfig,
    RandomForestSnapshot,
    RandomForestBuilder,
    RandomForestClassifier,
    iter_random_forest,
    run_random_forest,
)
from .visualizer import ForestVisualizer

__all__ = [
    'SeededRandom',
    'gini_impurity',
    'majority_class',
    'DataPoint',
    'TreeNode',
    'DecisionTreeClassifier',
    'build_tree',
    'predict_point',
    'accumulate_importance',
    'points_from_arrays',
    'DecisionBoundaryRegion',
    'extract_boundaries',
    'data_bounds',
    'GridCell',
    'RandomForestConfig',
    'RandomForestSnapshot',
    'RandomForestBuilder',
    'RandomForestClassifier',
    'iter_random_forest',
    'run_random_forest',
    'ForestVisualizer'
]

__version__ = '1.0.0'
