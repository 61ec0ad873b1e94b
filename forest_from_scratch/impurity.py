"""
Gini 불순도와 다수결

    Gini(S) = 1 - Σ p_c²      (p_c: 클래스 c의 비율)

동률 처리: 득표수가 같으면 숫자가 가장 작은 레이블을 선택합니다.
"""

import numpy as np
from typing import Sequence, Tuple


def gini_impurity(labels: Sequence[int]) -> float:
    """
    Gini 불순도 계산

    빈 집합이거나 단일 클래스이면 0.0
    """
    labels = np.asarray(labels)
    if labels.size == 0:
        return 0.0

    _, counts = np.unique(labels, return_counts=True)
    if len(counts) == 1:
        return 0.0

    p = counts / labels.size
    return float(1.0 - np.sum(p * p))


def majority_class(labels: Sequence[int]) -> int:
    """최빈 레이블 (동률이면 가장 작은 레이블)"""
    labels = np.asarray(labels)
    if labels.size == 0:
        raise ValueError("빈 레이블 집합에서는 다수 클래스를 정할 수 없습니다.")

    # np.unique는 오름차순 정렬, argmax는 첫 번째 최댓값 → 가장 작은 레이블
    values, counts = np.unique(labels, return_counts=True)
    return int(values[np.argmax(counts)])


def vote_winner(votes: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    득표 테이블의 마지막 축에서 승자 인덱스와 득표수 반환

    votes[..., k]는 k번째 레이블(오름차순)의 득표수.
    argmax는 첫 번째 최댓값을 고르므로 동률이면 가장 작은 레이블이 이김.
    """
    votes = np.asarray(votes)
    winners = np.argmax(votes, axis=-1)
    counts = np.take_along_axis(votes, winners[..., np.newaxis], axis=-1)[..., 0]
    return winners, counts
