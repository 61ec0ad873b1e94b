"""
Forest From Scratch - 알고리즘 검증 테스트
=========================================

각 구성 요소의 정확성과 논리적 일관성을 검증합니다.

테스트 항목:
1. 난수 생성기 재현성
2. Gini 불순도 / 다수결 동률 처리
3. 트리 분할 규칙과 종료 조건
4. 결정 영역 타일링
5. 앙상블 스냅샷 (중요도, OOB, 학습 정확도)
6. sklearn과의 일관성

Author: ML From Scratch Project
"""

import numpy as np
import pytest

from forest_from_scratch import (
    DataPoint,
    DecisionTreeClassifier,
    RandomForestBuilder,
    RandomForestClassifier,
    RandomForestConfig,
    SeededRandom,
    build_tree,
    data_bounds,
    extract_boundaries,
    gini_impurity,
    iter_random_forest,
    majority_class,
    points_from_arrays,
    predict_point,
    run_random_forest,
)
from forest_from_scratch.datasets import make_moons, make_separable, make_tree_friendly
from forest_from_scratch.impurity import vote_winner
from forest_from_scratch.random_forest import GRID_SIZE


def _banner(name):
    print("\n" + "=" * 50)
    print(f"Test: {name}")
    print("=" * 50)


def test_rng_reproducibility():
    """같은 시드 → 같은 난수열"""
    _banner("Seeded Random Reproducibility")

    rng_a = SeededRandom(7)
    rng_b = SeededRandom(7)
    seq_a = [rng_a.next() for _ in range(100)]
    seq_b = [rng_b() for _ in range(100)]

    assert seq_a == seq_b, "같은 시드인데 난수열이 다름"
    assert all(0.0 <= u < 1.0 for u in seq_a), "[0, 1) 범위를 벗어남"

    rng_a.reset(7)
    assert [rng_a.next() for _ in range(100)] == seq_a, "reset 후 난수열이 다름"

    other = SeededRandom(8)
    assert [other.next() for _ in range(100)] != seq_a, "다른 시드인데 난수열이 같음"

    print(f"  ✓ 첫 난수: {seq_a[0]:.6f}")
    print("  ✓ 모든 테스트 통과!")


def test_rng_shuffle_and_randint():
    """Fisher-Yates 셔플은 순열을 만들고 randint는 범위 안"""
    _banner("Seeded Random Shuffle")

    rng = SeededRandom(3)
    items = list(range(20))
    shuffled = rng.shuffle(list(items))

    assert sorted(shuffled) == items, "셔플 결과가 순열이 아님"
    assert all(0 <= rng.randint(5) < 5 for _ in range(200)), "randint 범위 오류"

    print(f"  ✓ 셔플 결과: {shuffled[:8]}...")
    print("  ✓ 모든 테스트 통과!")


def test_gini_and_majority():
    """Gini 불순도 값과 다수결 동률 처리"""
    _banner("Gini Impurity & Majority Class")

    assert gini_impurity([]) == 0.0
    assert gini_impurity([4, 4, 4]) == 0.0
    assert gini_impurity([0, 1]) == pytest.approx(0.5)
    assert gini_impurity([0, 1, 2]) == pytest.approx(2 / 3)

    # 동률이면 숫자가 가장 작은 레이블
    assert majority_class([3, 1, 3, 1]) == 1
    assert majority_class([5, 2, 2]) == 2
    assert majority_class([7]) == 7

    with pytest.raises(ValueError):
        majority_class([])

    print("  ✓ 모든 테스트 통과!")


def test_build_tree_two_point_split():
    """두 점: x = 0.0에서 한 번 분할"""
    _banner("Build Tree - Two Points")

    data = [DataPoint(-1.0, 0.0, 0), DataPoint(1.0, 0.0, 1)]
    tree = build_tree(data, max_depth=1, min_samples_split=2,
                      allowed_features=[0, 1], rng=SeededRandom(1))

    assert not tree.is_leaf
    assert tree.feature == 0
    assert tree.threshold == 0.0
    assert tree.impurity_decrease == pytest.approx(0.5 * 2)
    assert tree.left.is_leaf and tree.left.prediction == 0
    assert tree.right.is_leaf and tree.right.prediction == 1

    assert predict_point(tree, -0.3, 5.0) == 0
    assert predict_point(tree, 0.0, 5.0) == 0  # 경계값은 왼쪽
    assert predict_point(tree, 0.3, -5.0) == 1

    print(f"  ✓ 분할: feature={tree.feature}, threshold={tree.threshold}")
    print("  ✓ 모든 테스트 통과!")


def test_build_tree_stopping_rules():
    """종료 조건: 깊이, 샘플 수, 순수 노드, 이득 없음"""
    _banner("Build Tree - Stopping Rules")

    separable = [DataPoint(-1.0, 0.0, 0), DataPoint(1.0, 0.0, 1)]

    # 1. max_depth = 0
    root = build_tree(separable, 0, 2, [0, 1], None)
    assert root.is_leaf and root.prediction == 0

    # 2. 샘플 하나
    single = build_tree([DataPoint(0.0, 0.0, 3)], 5, 2, [0, 1], None)
    assert single.is_leaf and single.prediction == 3

    # 3. 순수 노드
    pure = build_tree([DataPoint(float(i), 0.0, 2) for i in range(4)], 5, 2, [0, 1], None)
    assert pure.is_leaf and pure.prediction == 2

    # 4-a. 같은 좌표 → 후보 임계값 없음
    stacked = build_tree([DataPoint(0.0, 0.0, 1), DataPoint(0.0, 0.0, 0)], 5, 2, [0, 1], None)
    assert stacked.is_leaf and stacked.prediction == 0

    # 4-b. XOR → 모든 후보의 이득이 0
    xor = [
        DataPoint(0.0, 0.0, 0), DataPoint(1.0, 1.0, 0),
        DataPoint(0.0, 1.0, 1), DataPoint(1.0, 0.0, 1),
    ]
    flat = build_tree(xor, 5, 2, [0, 1], None)
    assert flat.is_leaf and flat.prediction == 0

    print("  ✓ 모든 테스트 통과!")


def test_build_tree_feature_tie_break():
    """이득이 같으면 allowed_features 순서상 먼저인 피처"""
    _banner("Build Tree - Feature Tie Break")

    data = [DataPoint(0.0, 0.0, 0), DataPoint(1.0, 1.0, 1)]

    assert build_tree(data, 1, 2, [0, 1], None).feature == 0
    assert build_tree(data, 1, 2, [1, 0], None).feature == 1
    assert build_tree(data, 1, 2, [1], None).feature == 1

    print("  ✓ 모든 테스트 통과!")


def test_extract_boundaries_tiling():
    """한 트리의 영역들은 경계 상자를 정확히 덮음"""
    _banner("Boundary Regions Tiling")

    data = make_tree_friendly(120, n_splits=4, seed=5)
    tree = build_tree(data, 6, 2, [0, 1], None)
    box = data_bounds(data)

    regions = extract_boundaries(tree, box.x_min, box.x_max, box.y_min, box.y_max, data)

    total_area = sum(r.area for r in regions)
    assert total_area == pytest.approx(box.area, rel=1e-9), "면적 합이 상자 면적과 다름"
    assert all(r.x_min <= r.x_max and r.y_min <= r.y_max for r in regions)
    assert all(0.0 <= r.confidence <= 1.0 for r in regions)

    # 임의의 점은 정확히 한 영역에 속함
    rng = SeededRandom(11)
    for _ in range(500):
        px = box.x_min + rng.next() * (box.x_max - box.x_min)
        py = box.y_min + rng.next() * (box.y_max - box.y_min)
        owners = [r for r in regions if r.contains(px, py)]
        assert len(owners) == 1, f"({px}, {py})의 소속 영역 수: {len(owners)}"
        assert owners[0].prediction == predict_point(tree, px, py)

    # 배깅 실행의 모든 라운드, 모든 트리
    bagged = run_random_forest(data, RandomForestConfig(n_estimators=6, max_depth=4, seed=5))
    assert len(bagged[-1].tree_boundaries) == 6
    for snap in bagged:
        for tree_regions in snap.tree_boundaries:
            assert sum(r.area for r in tree_regions) == pytest.approx(box.area, rel=1e-9)
            assert all(r.x_min <= r.x_max and r.y_min <= r.y_max for r in tree_regions)

    print(f"  ✓ 영역 수: {len(regions)}")
    print(f"  ✓ 면적 합: {total_area:.4f} / {box.area:.4f}")
    print("  ✓ 모든 테스트 통과!")


def test_extract_boundaries_confidence():
    """리프 신뢰도: 일치 비율, 점이 없으면 1.0"""
    _banner("Boundary Regions Confidence")

    leaf = build_tree([DataPoint(0.0, 0.0, 1)], 3, 2, [0, 1], None)
    empty = extract_boundaries(leaf, 5.0, 6.0, 5.0, 6.0, [DataPoint(0.0, 0.0, 1)])
    assert len(empty) == 1 and empty[0].confidence == 1.0

    mixed = [DataPoint(0.0, 0.0, 1), DataPoint(0.5, 0.5, 1),
             DataPoint(0.2, 0.1, 0), DataPoint(0.9, 0.9, 1)]
    regions = extract_boundaries(leaf, -1.0, 1.0, -1.0, 1.0, mixed)
    assert regions[0].confidence == pytest.approx(0.75)

    print("  ✓ 모든 테스트 통과!")


def test_random_forest_two_point_scenario():
    """두 점, 배깅 없음: x = 0.0 분할, 정확도 1, OOB 0"""
    _banner("Random Forest - Two Point Scenario")

    data = [DataPoint(-1.0, 0.0, 0), DataPoint(1.0, 0.0, 1)]
    config = RandomForestConfig(n_estimators=1, max_depth=1, max_features=2,
                                bootstrap=False, seed=1)
    snapshots = run_random_forest(data, config)

    assert len(snapshots) == 1
    snap = snapshots[0]
    tree = snap.tree

    assert snap.tree_index == 0 and snap.total_trees == 1
    assert not tree.is_leaf and tree.feature == 0 and tree.threshold == 0.0
    assert tree.left.prediction == 0 and tree.right.prediction == 1
    assert snap.train_accuracy == 1.0
    assert snap.oob_error == 0.0
    assert snap.n_oob_samples == 0
    assert snap.bootstrap_indices == (0, 1)
    assert snap.feature_importances == pytest.approx((1.0, 0.0))
    assert len(snap.tree_boundaries) == 1 and len(snap.tree_boundaries[0]) == 2

    print(f"  ✓ 학습 정확도: {snap.train_accuracy}")
    print(f"  ✓ OOB 오차: {snap.oob_error}")
    print("  ✓ 모든 테스트 통과!")


def test_random_forest_single_class():
    """단일 클래스: 모든 트리가 리프, 정확도 1, OOB 0"""
    _banner("Random Forest - Single Class")

    data = [DataPoint(float(i), 0.0, 2) for i in range(5)]
    snapshots = run_random_forest(data, RandomForestConfig(n_estimators=4, seed=3))

    assert len(snapshots) == 4
    for snap in snapshots:
        assert snap.tree.is_leaf and snap.tree.prediction == 2
        assert snap.train_accuracy == 1.0
        assert snap.oob_error == 0.0
        assert snap.feature_importances == (0.5, 0.5)
        assert all(cell.prediction == 2 and cell.confidence == 1.0
                   for cell in snap.aggregated_boundary)

    print("  ✓ 모든 테스트 통과!")


def test_random_forest_empty_data():
    """빈 데이터 → 빈 스냅샷 목록"""
    _banner("Random Forest - Empty Data")

    assert run_random_forest([], RandomForestConfig()) == []
    assert list(iter_random_forest([])) == []
    assert RandomForestBuilder([]).done

    print("  ✓ 모든 테스트 통과!")


def test_random_forest_determinism():
    """같은 (data, config) → 비트 단위로 같은 스냅샷"""
    _banner("Random Forest - Determinism")

    data = make_moons(60, noise=0.2, seed=4)
    config = RandomForestConfig(n_estimators=8, max_depth=4, seed=99)

    first = run_random_forest(data, config)
    second = run_random_forest(data, config)

    assert [s.bootstrap_indices for s in first] == [s.bootstrap_indices for s in second]
    assert [s.tree for s in first] == [s.tree for s in second]
    assert first == second

    other = run_random_forest(data, RandomForestConfig(n_estimators=8, max_depth=4, seed=100))
    assert [s.bootstrap_indices for s in other] != [s.bootstrap_indices for s in first]

    print("  ✓ 모든 테스트 통과!")


def test_feature_importance_normalization():
    """중요도 합 = 1, 유일하게 유효한 피처의 중요도 → 1"""
    _banner("Feature Importance Normalization")

    moons = make_moons(80, noise=0.2, seed=2)
    for snap in run_random_forest(moons, RandomForestConfig(n_estimators=15, seed=2)):
        assert sum(snap.feature_importances) == pytest.approx(1.0)
        assert all(0.0 <= w <= 1.0 for w in snap.feature_importances)

    # x만 레이블을 결정하는 데이터
    separable = make_separable(60, seed=6)
    snapshots = run_random_forest(
        separable, RandomForestConfig(n_estimators=20, max_features=2, seed=6)
    )
    final = snapshots[-1].feature_importances
    assert final[0] > 0.99, f"x 중요도가 1에 가깝지 않음: {final}"

    print(f"  ✓ 분리 가능 데이터 중요도: {np.round(final, 4)}")
    print("  ✓ 모든 테스트 통과!")


def test_oob_coverage():
    """OOB 분모는 단조 증가, 배깅이 없으면 항상 0"""
    _banner("Out-of-Bag Coverage")

    data = make_moons(50, noise=0.25, seed=8)

    bagged = run_random_forest(data, RandomForestConfig(n_estimators=12, seed=8))
    coverage = [s.n_oob_samples for s in bagged]
    assert all(a <= b for a, b in zip(coverage, coverage[1:])), f"감소한 구간 존재: {coverage}"
    assert coverage[-1] > 0
    assert all(0.0 <= s.oob_error <= 1.0 for s in bagged)

    plain = run_random_forest(data, RandomForestConfig(n_estimators=5, bootstrap=False))
    assert all(s.n_oob_samples == 0 for s in plain)
    assert all(s.oob_error == 0.0 for s in plain)
    assert all(s.bootstrap_indices == tuple(range(len(data))) for s in plain)

    print(f"  ✓ OOB 분모: {coverage}")
    print("  ✓ 모든 테스트 통과!")


def test_oob_error_matches_out_of_bag_votes():
    """OOB 투표는 해당 점이 부트스트랩에서 빠진 트리에서만"""
    _banner("Out-of-Bag Votes")

    data = make_moons(40, noise=0.3, seed=17)
    snapshots = run_random_forest(data, RandomForestConfig(n_estimators=10, max_depth=3, seed=17))

    votes = [[] for _ in data]
    for snap in snapshots:
        in_bag = set(snap.bootstrap_indices)
        for i, p in enumerate(data):
            if i not in in_bag:
                votes[i].append(predict_point(snap.tree, p.x, p.y))

        covered = [i for i, v in enumerate(votes) if v]
        assert snap.n_oob_samples == len(covered)

        if covered:
            correct = sum(1 for i in covered if majority_class(votes[i]) == data[i].label)
            expected = 1.0 - correct / len(covered)
        else:
            expected = 0.0
        assert snap.oob_error == pytest.approx(expected)

    print(f"  ✓ 최종 OOB 오차: {snapshots[-1].oob_error:.4f}")
    print("  ✓ 모든 테스트 통과!")


def test_region_confidence_uses_bootstrap_sample():
    """드라이버의 리프 신뢰도는 그 라운드의 부트스트랩 샘플(중복 포함) 기준"""
    _banner("Region Confidence - Bootstrap Sample")

    data = make_moons(30, noise=0.4, seed=23)
    snapshots = run_random_forest(data, RandomForestConfig(n_estimators=5, max_depth=2, seed=23))
    final = snapshots[-1]

    for t, snap in enumerate(snapshots):
        sample = [data[i] for i in snap.bootstrap_indices]
        assert len(set(snap.bootstrap_indices)) < len(sample), "중복 추출이 없음"
        assert final.tree_boundaries[t] == snap.tree_boundaries[t]

        for region in snap.tree_boundaries[t]:
            inside = [p for p in sample if region.contains(p.x, p.y)]
            if inside:
                expected = sum(1 for p in inside if p.label == region.prediction) / len(inside)
            else:
                expected = 1.0
            assert region.confidence == pytest.approx(expected)

    print("  ✓ 모든 테스트 통과!")


def test_ensemble_vote_tie_break():
    """앙상블 다수결 동률 → 가장 작은 레이블 (격자, 학습 정확도, predict)"""
    _banner("Ensemble Vote Tie Break")

    winners, counts = vote_winner(np.array([[1, 1], [0, 2], [3, 3]]))
    assert winners.tolist() == [0, 1, 0]
    assert counts.tolist() == [1, 2, 3]

    # x 분할은 완벽, y 분할은 왼쪽 리프가 3/7 동률 → 3
    data = [DataPoint(-1.0, -1.0, 3), DataPoint(1.0, 1.0, 7), DataPoint(1.0, -1.0, 7)]

    # x 트리 하나, y 트리 하나가 나오는 시드 찾기
    snapshots = None
    for seed in range(100):
        config = RandomForestConfig(n_estimators=2, max_depth=1, max_features=1,
                                    bootstrap=False, seed=seed)
        candidate = run_random_forest(data, config)
        if candidate[0].selected_features != candidate[1].selected_features:
            snapshots = candidate
            break
    assert snapshots is not None, "x/y 트리가 하나씩 나오는 시드가 없음"

    final = snapshots[-1]
    first, second = snapshots[0].tree, snapshots[1].tree
    tied = [c for c in final.aggregated_boundary
            if predict_point(first, c.x, c.y) != predict_point(second, c.x, c.y)]

    assert len(tied) > 0
    for cell in tied:
        assert cell.prediction == 3
        assert cell.confidence == 0.5

    # (1, -1, 7)은 7 대 3 동률 → 3으로 틀림
    assert final.train_accuracy == pytest.approx(2 / 3)

    X = np.array([[p.x, p.y] for p in data])
    y = np.array([p.label for p in data])
    rf = RandomForestClassifier(n_estimators=2, max_depth=1, max_features=1,
                                bootstrap=False, random_state=seed).fit(X, y)
    assert rf.predict(np.array([[-1.0, 1.0], [1.0, -1.0]])).tolist() == [3, 3]
    assert rf.train_accuracy_ == pytest.approx(2 / 3)

    print(f"  ✓ 시드: {seed}, 동률 칸 수: {len(tied)}")
    print("  ✓ 모든 테스트 통과!")


def test_points_from_arrays_validation():
    """배열 변환: 정수가 아닌 레이블, 잘못된 피처 수는 ValueError"""
    _banner("Points From Arrays Validation")

    X = np.array([[0.0, 1.0], [2.0, 3.0]])
    points = points_from_arrays(X, np.array([0.0, 1.0]))
    assert [p.label for p in points] == [0, 1]

    with pytest.raises(ValueError):
        points_from_arrays(X, np.array([0.7, 1.0]))
    with pytest.raises(ValueError):
        points_from_arrays(np.zeros((2, 3)), [0, 1])
    with pytest.raises(ValueError):
        RandomForestClassifier().fit(X, np.array([0.5, 1.0]))

    print("  ✓ 모든 테스트 통과!")


def test_train_accuracy_separable():
    """축 분리 가능 데이터: 트리 하나로 정확도 1"""
    _banner("Training Accuracy - Separable")

    data = make_separable(40, seed=10)
    config = RandomForestConfig(n_estimators=1, max_depth=1, max_features=2,
                                bootstrap=False)
    snap = run_random_forest(data, config)[0]

    assert snap.train_accuracy == 1.0
    assert snap.tree.feature == 0

    print("  ✓ 모든 테스트 통과!")


def test_aggregated_boundary_grid():
    """격자 다수결: 25x25, x 우선 순서, 득표 비율 신뢰도"""
    _banner("Aggregated Boundary Grid")

    data = make_tree_friendly(80, seed=12)
    snapshots = run_random_forest(data, RandomForestConfig(n_estimators=6, seed=12))
    box = data_bounds(data)

    for snap in snapshots:
        cells = snap.aggregated_boundary
        n_trees = snap.tree_index + 1
        assert len(cells) == GRID_SIZE * GRID_SIZE
        assert cells[0].x == cells[1].x and cells[0].y < cells[1].y
        assert cells[0].x == pytest.approx(box.x_min)
        assert cells[-1].y == pytest.approx(box.y_max)
        for cell in cells:
            assert 0.0 < cell.confidence <= 1.0
            assert cell.confidence * n_trees == pytest.approx(round(cell.confidence * n_trees))

    print("  ✓ 모든 테스트 통과!")


def test_builder_streaming():
    """스트리밍 드라이버 = 일괄 실행, 이전 스냅샷은 불변"""
    _banner("Random Forest Builder Streaming")

    data = make_moons(40, seed=13)
    config = RandomForestConfig(n_estimators=5, seed=13)

    builder = RandomForestBuilder(data, config)
    first = builder.step()
    rest = list(builder)

    assert builder.done
    assert [first] + rest == run_random_forest(data, config)
    assert len(first.tree_boundaries) == 1
    assert [len(s.tree_boundaries) for s in rest] == [2, 3, 4, 5]

    with pytest.raises(StopIteration):
        builder.step()

    # 중간에 멈춰도 이미 받은 스냅샷은 유효
    lazy = iter_random_forest(data, config)
    partial = [next(lazy), next(lazy)]
    assert partial == [first, rest[0]]

    print("  ✓ 모든 테스트 통과!")


def test_config_validation():
    """설정 제약 위반은 ValueError, max_features는 2로 잘림"""
    _banner("Random Forest Config Validation")

    with pytest.raises(ValueError):
        RandomForestConfig(n_estimators=0)
    with pytest.raises(ValueError):
        RandomForestConfig(max_depth=-1)
    with pytest.raises(ValueError):
        RandomForestConfig(max_features=0)
    with pytest.raises(ValueError):
        RandomForestConfig(n_estimators=2.5)

    config = RandomForestConfig(max_features=7, n_estimators=2)
    assert config.effective_max_features == 2
    snaps = run_random_forest(make_moons(20), config)
    assert all(s.selected_features == (0, 1) for s in snaps)

    narrow = run_random_forest(make_moons(20), RandomForestConfig(max_features=1, n_estimators=6))
    assert all(len(s.selected_features) == 1 for s in narrow)

    print("  ✓ 모든 테스트 통과!")


def test_random_forest_classifier():
    """분류기 API: predict / predict_proba / staged_predict"""
    _banner("Random Forest Classifier")

    data = make_moons(80, noise=0.2, seed=21)
    X = np.array([[p.x, p.y] for p in data])
    y = np.array([p.label for p in data])

    rf = RandomForestClassifier(n_estimators=15, max_depth=4, random_state=21)

    with pytest.raises(RuntimeError):
        rf.predict(X)

    rf.fit(X, y)
    pred = rf.predict(X)
    proba = rf.predict_proba(X)
    staged = rf.staged_predict(X)

    assert len(rf.estimators_) == 15 and len(rf.snapshots_) == 15
    assert np.mean(pred == y) == pytest.approx(rf.train_accuracy_)
    assert np.allclose(proba.sum(axis=1), 1.0)
    assert staged.shape == (15, len(X))
    assert np.array_equal(staged[-1], pred)
    assert rf.feature_importances_.sum() == pytest.approx(1.0)
    assert rf.get_oob_error() == rf.snapshots_[-1].oob_error

    # 같은 random_state → 같은 예측
    again = RandomForestClassifier(n_estimators=15, max_depth=4, random_state=21).fit(X, y)
    assert np.array_equal(again.predict(X), pred)

    with pytest.raises(ValueError):
        RandomForestClassifier().fit(X, y[:-1])

    print(f"  ✓ 학습 정확도: {rf.train_accuracy_:.4f}")
    print(f"  ✓ OOB 오차: {rf.oob_error_:.4f}")
    print("  ✓ 모든 테스트 통과!")


def test_decision_tree_classifier():
    """단일 트리 분류기 기본 동작"""
    _banner("Decision Tree Classifier")

    data = make_tree_friendly(100, n_splits=3, seed=30)
    X = np.array([[p.x, p.y] for p in data])
    y = np.array([p.label for p in data])

    tree = DecisionTreeClassifier(max_depth=3)
    tree.fit(X, y)
    pred = tree.predict(X)

    assert tree.get_depth() <= 3
    assert len(pred) == len(y)
    leaves = [h for h in tree.training_history_ if h['action'] == 'leaf']
    assert len(leaves) == tree.get_n_leaves()
    assert tree.feature_importances_.sum() == pytest.approx(1.0)
    assert tree.export_tree_structure()['is_leaf'] is False

    print(f"  ✓ 트리 깊이: {tree.get_depth()}")
    print(f"  ✓ 리프 수: {tree.get_n_leaves()}")
    print(f"  ✓ 정확도: {np.mean(pred == y):.4f}")
    print("  ✓ 모든 테스트 통과!")


def test_sklearn_root_split_consistency():
    """루트 분할이 sklearn DecisionTreeClassifier와 일치"""
    _banner("sklearn Consistency - Root Split")
    sklearn_tree = pytest.importorskip("sklearn.tree")

    data = make_separable(50, seed=40)
    X = np.array([[p.x, p.y] for p in data])
    y = np.array([p.label for p in data])

    ours = DecisionTreeClassifier(max_depth=1).fit(X, y)
    reference = sklearn_tree.DecisionTreeClassifier(max_depth=1, random_state=0).fit(X, y)

    assert ours.root_.feature == reference.tree_.feature[0]
    assert ours.root_.threshold == pytest.approx(reference.tree_.threshold[0], abs=1e-4)
    assert np.array_equal(ours.predict(X), reference.predict(X))

    print(f"  ✓ threshold: {ours.root_.threshold:.5f} vs {reference.tree_.threshold[0]:.5f}")
    print("  ✓ 모든 테스트 통과!")


def run_all_tests():
    """모든 테스트 실행"""
    print("\n" + "=" * 60)
    print("FOREST FROM SCRATCH - 전체 검증 테스트")
    print("=" * 60)

    tests = [
        test_rng_reproducibility,
        test_rng_shuffle_and_randint,
        test_gini_and_majority,
        test_build_tree_two_point_split,
        test_build_tree_stopping_rules,
        test_build_tree_feature_tie_break,
        test_extract_boundaries_tiling,
        test_extract_boundaries_confidence,
        test_random_forest_two_point_scenario,
        test_random_forest_single_class,
        test_random_forest_empty_data,
        test_random_forest_determinism,
        test_feature_importance_normalization,
        test_oob_coverage,
        test_oob_error_matches_out_of_bag_votes,
        test_region_confidence_uses_bootstrap_sample,
        test_ensemble_vote_tie_break,
        test_points_from_arrays_validation,
        test_train_accuracy_separable,
        test_aggregated_boundary_grid,
        test_builder_streaming,
        test_config_validation,
        test_random_forest_classifier,
        test_decision_tree_classifier,
        test_sklearn_root_split_consistency,
    ]

    passed = 0
    failed = 0

    for test in tests:
        try:
            test()
            passed += 1
        except Exception as e:
            print(f"\n  ✗ 테스트 실패: {e}")
            failed += 1

    print("\n" + "=" * 60)
    print(f"테스트 결과: {passed} 통과, {failed} 실패")
    print("=" * 60)

    return failed == 0


if __name__ == "__main__":
    success = run_all_tests()
    exit(0 if success else 1)
