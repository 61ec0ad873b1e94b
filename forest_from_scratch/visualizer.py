"""
Forest Visualizer - Random Forest 스냅샷 시각화 도구
=====================================================

스냅샷 시퀀스를 읽기 전용으로 받아 정적인 그림으로 그립니다.

주요 기능:
- 개별 트리의 결정 영역 (부트스트랩 샘플 표시)
- 격자 다수결 결정 경계
- 결정 트리 구조
- 피처 중요도 변화
- OOB 오차 / 학습 정확도 수렴

Author: ML From Scratch Project
"""

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
from typing import Optional, List, Dict, Tuple, Sequence

from .decision_tree import DataPoint, TreeNode, FEATURE_NAMES, export_tree_structure
from .random_forest import RandomForestSnapshot


class ForestVisualizer:
    """
    Random Forest 시각화 클래스

    Parameters
    ----------
    figsize : tuple, default=(12, 8)
        기본 Figure 크기

    style : str, optional
        Matplotlib 스타일

    dpi : int, default=100
        Figure DPI
    """

    def __init__(
        self,
        figsize: Tuple[int, int] = (12, 8),
        style: Optional[str] = None,
        dpi: int = 100
    ):
        self.figsize = figsize
        self.style = style
        self.dpi = dpi

        # 스타일 설정
        if self.style:
            try:
                plt.style.use(self.style)
            except OSError:
                pass  # 스타일을 찾을 수 없으면 기본값 사용

        # 색상 팔레트
        self.colors = {
            'primary': '#2E86AB',
            'secondary': '#A23B72',
            'accent': '#F18F01',
            'neutral': '#3B3B3B',
            'train': '#2E86AB',
            'oob': '#C73E1D'
        }
        self.class_cmap = plt.cm.tab10

    def _class_color(self, label: int, classes: Sequence[int]):
        return self.class_cmap(list(classes).index(label) % 10)

    def _scatter_points(
        self,
        ax: plt.Axes,
        data: Sequence[DataPoint],
        classes: Sequence[int],
        highlight: Optional[set] = None
    ):
        """데이터 점 그리기 (클래스마다 scatter 한 번, highlight에 없는 점은 흐리게)"""
        xs = np.array([p.x for p in data], dtype=float)
        ys = np.array([p.y for p in data], dtype=float)
        labels = np.array([p.label for p in data])

        alphas = np.full(len(data), 0.9)
        if highlight is not None:
            faded = np.array([i not in highlight for i in range(len(data))], dtype=bool)
            alphas[faded] = 0.25

        for label in classes:
            mask = labels == label
            if not np.any(mask):
                continue
            rgba = np.tile(self._class_color(label, classes), (int(mask.sum()), 1))
            rgba[:, 3] = alphas[mask]
            ax.scatter(xs[mask], ys[mask], s=14, c=rgba,
                       edgecolors='white', linewidths=0.5, zorder=3)

    def plot_tree_boundaries(
        self,
        snapshot: RandomForestSnapshot,
        data: Sequence[DataPoint],
        max_trees: int = 9,
        figsize: Optional[Tuple[int, int]] = None,
        title: str = "Individual Tree Decision Regions"
    ) -> plt.Figure:
        """
        개별 트리의 결정 영역 격자

        Parameters
        ----------
        snapshot : RandomForestSnapshot
            시각화할 스냅샷 (라운드 0..t의 트리 포함)
        data : sequence of DataPoint
            학습 데이터
        max_trees : int
            표시할 최대 트리 수 (앞에서부터)
        figsize : tuple, optional
            Figure 크기
        title : str
            그래프 제목

        Returns
        -------
        fig : matplotlib.Figure
        """
        boundaries = snapshot.tree_boundaries[:max_trees]
        n_trees = len(boundaries)
        n_cols = int(np.ceil(np.sqrt(n_trees)))
        n_rows = int(np.ceil(n_trees / n_cols))

        fig, axes = plt.subplots(n_rows, n_cols,
                                 figsize=figsize or (4 * n_cols, 4 * n_rows),
                                 dpi=self.dpi, squeeze=False)
        classes = sorted({p.label for p in data})

        for idx, ax in enumerate(axes.ravel()):
            if idx >= n_trees:
                ax.axis('off')
                continue

            for region in boundaries[idx]:
                ax.add_patch(mpatches.Rectangle(
                    (region.x_min, region.y_min),
                    region.x_max - region.x_min,
                    region.y_max - region.y_min,
                    facecolor=self._class_color(region.prediction, classes),
                    alpha=0.15 + 0.35 * region.confidence,
                    edgecolor='white',
                    linewidth=0.5
                ))

            # 마지막 트리만 자신의 부트스트랩 샘플을 강조
            highlight = (set(snapshot.bootstrap_indices)
                         if idx == snapshot.tree_index else None)
            self._scatter_points(ax, data, classes, highlight)

            first = boundaries[idx][0]
            last = boundaries[idx][-1]
            ax.set_xlim(first.x_min, last.x_max)
            ax.set_ylim(first.y_min, last.y_max)
            ax.set_title(f'Tree {idx + 1}', fontsize=11, fontweight='bold')
            ax.set_xticks([])
            ax.set_yticks([])

        fig.suptitle(title, fontsize=14, fontweight='bold')
        plt.tight_layout()
        return fig

    def plot_aggregated_boundary(
        self,
        snapshot: RandomForestSnapshot,
        data: Sequence[DataPoint],
        figsize: Optional[Tuple[int, int]] = None,
        title: str = "Ensemble Majority Vote"
    ) -> plt.Figure:
        """
        격자 다수결 결정 경계 (투명도 = 득표 비율)

        Returns
        -------
        fig : matplotlib.Figure
        """
        cells = snapshot.aggregated_boundary
        xs = np.array([c.x for c in cells])
        ys = np.array([c.y for c in cells])
        classes = sorted({p.label for p in data} | {c.prediction for c in cells})

        fig, ax = plt.subplots(figsize=figsize or (8, 7), dpi=self.dpi)

        colors = [self._class_color(c.prediction, classes) for c in cells]
        alphas = np.array([0.15 + 0.45 * c.confidence for c in cells])
        rgba = np.array(colors)
        rgba[:, 3] = alphas
        ax.scatter(xs, ys, s=60, marker='s', c=rgba, zorder=1)

        self._scatter_points(ax, data, classes)

        handles = [mpatches.Patch(color=self._class_color(c, classes), label=f'Class {c}')
                   for c in classes]
        ax.legend(handles=handles, loc='upper right', fontsize=9)
        ax.set_xlabel(FEATURE_NAMES[0], fontsize=11)
        ax.set_ylabel(FEATURE_NAMES[1], fontsize=11)
        ax.set_title(
            f"{title} ({snapshot.tree_index + 1}/{snapshot.total_trees} trees)",
            fontsize=12, fontweight='bold'
        )

        plt.tight_layout()
        return fig

    def plot_decision_tree(
        self,
        tree: TreeNode,
        max_depth: int = 4,
        figsize: Optional[Tuple[int, int]] = None,
        title: str = "Decision Tree Structure"
    ) -> plt.Figure:
        """
        결정 트리 구조 시각화

        Parameters
        ----------
        tree : TreeNode
            시각화할 트리 (스냅샷의 tree 필드 등)
        max_depth : int
            표시할 최대 깊이

        Returns
        -------
        fig : matplotlib.Figure
        """
        fig, ax = plt.subplots(figsize=figsize or (14, 10), dpi=self.dpi)

        tree_dict = export_tree_structure(tree)
        positions = self._calculate_tree_positions(tree_dict, max_depth)
        self._draw_tree_nodes(ax, tree_dict, positions, max_depth)

        ax.set_xlim(-0.1, 1.1)
        ax.set_ylim(-0.1, 1.1)
        ax.axis('off')
        ax.set_title(title, fontsize=14, fontweight='bold', pad=20)

        plt.tight_layout()
        return fig

    def _calculate_tree_positions(
        self,
        node: Dict,
        max_depth: int,
        x: float = 0.5,
        y: float = 0.95,
        x_offset: float = 0.25,
        depth: int = 0,
        positions: Optional[Dict] = None
    ) -> Dict:
        """트리 노드 위치 계산"""
        if positions is None:
            positions = {}

        positions[id(node)] = (x, y)

        if depth >= max_depth or node['is_leaf']:
            return positions

        y_child = y - 0.15
        self._calculate_tree_positions(node['left'], max_depth, x - x_offset,
                                       y_child, x_offset / 2, depth + 1, positions)
        self._calculate_tree_positions(node['right'], max_depth, x + x_offset,
                                       y_child, x_offset / 2, depth + 1, positions)
        return positions

    def _draw_tree_nodes(
        self,
        ax: plt.Axes,
        node: Dict,
        positions: Dict,
        max_depth: int,
        depth: int = 0
    ):
        """트리 노드와 엣지 그리기"""
        if id(node) not in positions:
            return

        x, y = positions[id(node)]

        if node['is_leaf']:
            color = plt.cm.Greens(0.6)
            text = f"class {node['prediction']}\n샘플: {node['n_samples']}"
        else:
            color = plt.cm.Blues(0.3 + 0.5 * (1 - depth / max(max_depth, 1)))
            feat_name = FEATURE_NAMES[node['feature_idx']]
            text = (f"{feat_name} ≤ {node['threshold']:.2f}\n"
                    f"gini: {node['gini']:.3f}\n샘플: {node['n_samples']}")

        bbox = dict(boxstyle='round,pad=0.3', facecolor=color,
                    edgecolor='gray', alpha=0.9)
        ax.text(x, y, text, ha='center', va='center', fontsize=8, bbox=bbox)

        if node['is_leaf']:
            return

        for child, mark, mark_color, dx in ((node['left'], 'T', 'green', -0.02),
                                            (node['right'], 'F', 'red', 0.02)):
            if id(child) in positions:
                cx, cy = positions[id(child)]
                ax.plot([x, cx], [y - 0.03, cy + 0.03], 'k-', linewidth=1, alpha=0.7)
                ax.text((x + cx) / 2 + dx, (y + cy) / 2, mark,
                        fontsize=7, color=mark_color)
                self._draw_tree_nodes(ax, child, positions, max_depth, depth + 1)

    def plot_feature_importance(
        self,
        snapshots: List[RandomForestSnapshot],
        figsize: Optional[Tuple[int, int]] = None,
        title: str = "Feature Importance"
    ) -> plt.Figure:
        """
        피처 중요도: 최종 값(막대)과 라운드별 변화(선)

        Returns
        -------
        fig : matplotlib.Figure
        """
        if not snapshots:
            raise ValueError("스냅샷이 비어 있습니다.")

        history = np.array([s.feature_importances for s in snapshots])
        rounds = np.arange(1, len(snapshots) + 1)

        fig, axes = plt.subplots(1, 2, figsize=figsize or (12, 4), dpi=self.dpi)
        palette = [self.colors['primary'], self.colors['accent']]

        ax1 = axes[0]
        ax1.barh(range(len(FEATURE_NAMES)), history[-1], color=palette, alpha=0.8)
        ax1.set_yticks(range(len(FEATURE_NAMES)))
        ax1.set_yticklabels(FEATURE_NAMES)
        ax1.invert_yaxis()
        ax1.set_xlim(0, 1)
        ax1.set_xlabel('Importance', fontsize=10)
        ax1.set_title('Final', fontsize=11, fontweight='bold')
        ax1.grid(True, alpha=0.3, axis='x')

        ax2 = axes[1]
        for f, name in enumerate(FEATURE_NAMES):
            ax2.plot(rounds, history[:, f], color=palette[f], linewidth=2, label=name)
        ax2.set_ylim(0, 1)
        ax2.set_xlabel('Number of Trees', fontsize=10)
        ax2.set_title('By Round', fontsize=11, fontweight='bold')
        ax2.legend(loc='upper right', fontsize=9)
        ax2.grid(True, alpha=0.3)

        fig.suptitle(title, fontsize=14, fontweight='bold', y=1.02)
        plt.tight_layout()
        return fig

    def plot_ensemble_convergence(
        self,
        snapshots: List[RandomForestSnapshot],
        figsize: Optional[Tuple[int, int]] = None,
        title: str = "Ensemble Convergence"
    ) -> plt.Figure:
        """
        라운드별 OOB 오차와 학습 정확도

        Returns
        -------
        fig : matplotlib.Figure
        """
        if not snapshots:
            raise ValueError("스냅샷이 비어 있습니다.")

        rounds = np.arange(1, len(snapshots) + 1)
        oob = [s.oob_error for s in snapshots]
        acc = [s.train_accuracy for s in snapshots]

        fig, ax = plt.subplots(figsize=figsize or (10, 5), dpi=self.dpi)

        ax.plot(rounds, acc, color=self.colors['train'], linewidth=2,
                marker='o', markersize=4, label='Train Accuracy')
        ax.plot(rounds, oob, color=self.colors['oob'], linewidth=2,
                marker='s', markersize=4, label='OOB Error')
        ax.fill_between(rounds, oob, alpha=0.15, color=self.colors['oob'])

        ax.set_ylim(0, 1.05)
        ax.set_xlabel('Number of Trees', fontsize=11)
        ax.set_ylabel('Rate', fontsize=11)
        ax.set_title(title, fontsize=12, fontweight='bold')
        ax.legend(loc='center right', fontsize=9)
        ax.grid(True, alpha=0.3)

        plt.tight_layout()
        return fig

    def save_figure(
        self,
        fig: plt.Figure,
        filepath: str,
        dpi: Optional[int] = None
    ):
        """Figure 저장"""
        fig.savefig(filepath, dpi=dpi or self.dpi, bbox_inches='tight',
                    facecolor='white', edgecolor='none')
        print(f"Figure saved: {filepath}")
