from __future__ import annotations
import os
import math
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

import matplotlib.pyplot as plt
import matplotlib as mpl
from matplotlib.colors import TwoSlopeNorm
from matplotlib.lines import Line2D

from .genome import Genome
from .graph_utils import evaluation_order
from .history import EvolutionHistory
from .neat import NEATConfig

SENSOR = "sensor"
BIAS = "bias"
HIDDEN = "hidden"
ACTUATOR = "actuator"

def neuron_role(cfg: NEATConfig, nid: int) -> str:
    if nid == cfg.bias_neuron:
        return BIAS
    if nid < cfg.inputs:
        return SENSOR
    if nid < cfg.first_hidden:
        return ACTUATOR
    return HIDDEN

def _neurons(genome: Genome, cfg: NEATConfig) -> List[int]:
    ids = set(range(cfg.first_hidden))
    for s in genome.genes:
        ids.update((s.source, s.target))
    return sorted(ids)

def _compute_depths(genome: Genome, cfg: NEATConfig) -> Dict[int, int]:
    neurons = _neurons(genome, cfg)
    order = evaluation_order(neurons, genome.genes, cfg.inputs, cfg.first_hidden)
    depths: Dict[int, int] = {nid: 0 for nid in range(cfg.inputs)}
    if order is None:
        depths.update({nid: 1 for nid in neurons if nid >= cfg.inputs})
        return depths
    incoming = defaultdict(list)
    for s in genome.genes:
        if s.enabled:
            incoming[s.target].append(s.source)
    for nid in order:
        depths[nid] = 1 + max((depths.get(p, 0) for p in incoming[nid]), default=0)
    # actuators share the last column
    last = max(depths.values())
    for nid in range(cfg.inputs, cfg.first_hidden):
        depths[nid] = max(last, 1)
    return depths

def visualize_genome(
    genome: Genome,
    cfg: NEATConfig,
    filename: str,
    title: Optional[str] = None,
    figsize=(9, 6),
    show_weights: bool = True,
    show_disabled: bool = True,
    theme: str = "light",
    dpi: int = 180,
    weight_fmt: str = "{:+.2f}",
) -> None:
    """
    Visualize a genome.
    - Neurons are laid out in columns by depth from the sensors.
    - Marker shape and fill encode the neuron role (sensor/bias/hidden/actuator).
    - Edge colour and width encode weight; disabled genes are dashed.
    """
    os.makedirs(os.path.dirname(filename) or ".", exist_ok=True)
    is_dark = (theme or "light").lower().startswith("d")
    bg = "#111111" if is_dark else "white"
    fg = "white" if is_dark else "black"
    label_bg = (1, 1, 1, 0.85) if not is_dark else (0.05, 0.05, 0.05, 0.85)
    label_edge = (0, 0, 0, 0.25) if not is_dark else (1, 1, 1, 0.25)

    role_style = {
        SENSOR:   ("s", "#4C78A8"),
        BIAS:     ("s", "#8E8E8E"),
        HIDDEN:   ("o", "#59A14F"),
        ACTUATOR: ("D", "#E45756"),
    }

    depths = _compute_depths(genome, cfg)
    max_depth = max(depths.values()) if depths else 1
    by_depth: Dict[int, List[int]] = defaultdict(list)
    for nid, d in depths.items():
        by_depth[d].append(nid)

    pos: Dict[int, Tuple[float, float]] = {}
    for d, nodes_at_d in by_depth.items():
        nodes_at_d.sort()
        n = len(nodes_at_d)
        for i, nid in enumerate(nodes_at_d):
            x = 0.06 + 0.88 * (d / max(1, max_depth))
            y = 0.5 if n == 1 else 0.1 + 0.8 * (i / (n - 1))
            pos[nid] = (x, y)

    enabled_weights = [s.weight for s in genome.genes if s.enabled]
    max_abs = max((abs(w) for w in enabled_weights), default=0.0)
    wmin, wmax = (-1.0, 1.0) if max_abs == 0 else (-max_abs, max_abs)
    norm = TwoSlopeNorm(vmin=wmin, vcenter=0.0, vmax=wmax)
    cmap = plt.get_cmap("coolwarm")

    fig, ax = plt.subplots(figsize=figsize)
    fig.patch.set_facecolor(bg)
    ax.set_facecolor(bg)
    ax.set_axis_off()
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    ax.set_aspect("equal", adjustable="box")

    for s in genome.genes:
        x1, y1 = pos[s.source]; x2, y2 = pos[s.target]
        if not s.enabled:
            if show_disabled:
                ax.plot([x1, x2], [y1, y2],
                        color=(0.5, 0.5, 0.5, 0.35), lw=1.0, ls="--", zorder=1)
            continue
        color = cmap(norm(s.weight))
        lw = 1.0 + 2.5 * min(1.0, abs(s.weight))
        ax.plot([x1, x2], [y1, y2], color=color, linewidth=lw, alpha=0.95, zorder=2)

        if show_weights:
            mx, my = (x1 + x2) / 2.0, (y1 + y2) / 2.0
            dx, dy = (x2 - x1), (y2 - y1)
            L = math.hypot(dx, dy) + 1e-12
            lx, ly = mx - 0.02 * dy / L, my + 0.02 * dx / L
            ax.text(lx, ly, weight_fmt.format(s.weight), fontsize=8, ha="center", va="center",
                    color=fg, zorder=4,
                    bbox=dict(boxstyle="round,pad=0.2", fc=label_bg, ec=label_edge))

    for nid, (x, y) in pos.items():
        marker, face = role_style[neuron_role(cfg, nid)]
        ax.scatter([x], [y], s=360, c=face, marker=marker,
                   edgecolors=fg, lw=1.2, zorder=3)
        ax.text(x, y, str(nid), fontsize=8, ha="center", va="center", color=fg, zorder=5)

    handles = [
        Line2D([0], [0], marker=marker, color='none', markerfacecolor=face,
               markeredgecolor=fg, markersize=10, lw=0, label=role.capitalize())
        for role, (marker, face) in role_style.items()
    ]
    leg = ax.legend(handles=handles, title="Neurons", loc="upper right", frameon=True)
    leg.get_frame().set_facecolor(label_bg)
    for txt in leg.get_texts():
        txt.set_color(fg)
    leg.get_title().set_color(fg)

    sm = mpl.cm.ScalarMappable(cmap=cmap, norm=norm)
    sm.set_array([])
    cbar = fig.colorbar(sm, ax=ax, fraction=0.05, pad=0.04)
    cbar.set_label("Edge weight", color=fg)
    cbar.ax.yaxis.set_tick_params(color=fg)
    plt.setp(plt.getp(cbar.ax.axes, "yticklabels"), color=fg)

    if title:
        ax.set_title(title, color=fg)

    fig.tight_layout()
    plt.savefig(filename, dpi=dpi, bbox_inches="tight", facecolor=bg)
    plt.close(fig)

def plot_history(history: EvolutionHistory, save_path: str = 'neat_fitness.png', show: bool = False) -> None:
    if not history.generations:
        print("No history to plot.")
        return
    fig, ax1 = plt.subplots(figsize=(9, 5.5))
    ax1.plot(history.generations, history.best_overall, label='Best Overall', color='tab:blue', linewidth=2)
    ax1.plot(history.generations, history.gen_best, label='Gen Best', color='tab:green', alpha=0.8)
    ax1.plot(history.generations, history.avg, label='Average', color='tab:orange', alpha=0.8)
    ax1.set_xlabel('Generation')
    ax1.set_ylabel('Fitness (higher is better)')
    ax1.grid(True, alpha=0.3)

    ax2 = ax1.twinx()
    ax2.plot(history.generations, history.species, label='Species count', color='tab:red', linestyle='--', alpha=0.7)
    ax2.plot(history.generations, history.hidden, label='Max hidden neurons', color='tab:purple', linestyle=':', alpha=0.7)
    ax2.set_ylabel('Count')

    lines, labels = [], []
    for ax in (ax1, ax2):
        l, lab = ax.get_legend_handles_labels()
        lines += l; labels += lab
    ax1.legend(lines, labels, loc='lower right')

    fig.tight_layout()
    os.makedirs(os.path.dirname(save_path) or ".", exist_ok=True)
    plt.savefig(save_path, dpi=150)
    if show:
        plt.show()
    plt.close(fig)
    print(f"Saved fitness curves to {save_path}")
