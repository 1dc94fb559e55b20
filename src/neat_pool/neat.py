from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, TYPE_CHECKING

from .genome import Genome, MutationKind, Synapse
from .graph_utils import has_path

if TYPE_CHECKING:
    from .pool import Population

# =========================
# Configuration Parameters
# =========================
@dataclass
class NEATConfig:
    pop_size: int = 50
    stale_species: int = 15
    inputs: int = 4
    outputs: int = 1
    delta_disjoint: float = 2.0
    delta_weights: float = 0.4
    delta_threshold: float = 1.0
    conn_mutation: float = 0.25
    link_mutation: float = 2.0
    bias_mutation: float = 0.4
    node_mutation: float = 0.5
    enable_mutation: float = 0.2
    disable_mutation: float = 0.4
    step_size: float = 0.1
    perturbation: float = 0.9
    crossover_rate: float = 0.75
    weight_range: float = 2.0
    link_retries: int = 30
    random_seed: Optional[int] = 7
    target_fitness: Optional[float] = None

    @property
    def first_hidden(self) -> int:
        return self.inputs + self.outputs

    @property
    def bias_neuron(self) -> int:
        # the host keeps the last sensor at a constant 1.0
        return self.inputs - 1

    def initial_mutation_rates(self) -> List[float]:
        rates = {
            MutationKind.CONNECTION: self.conn_mutation,
            MutationKind.LINK: self.link_mutation,
            MutationKind.BIAS: self.bias_mutation,
            MutationKind.NODE: self.node_mutation,
            MutationKind.ENABLE: self.enable_mutation,
            MutationKind.DISABLE: self.disable_mutation,
            MutationKind.STEP: self.step_size,
        }
        return [rates[kind] for kind in MutationKind]

    def validate(self) -> None:
        if self.pop_size < 1:
            raise ValueError(f"pop_size must be positive, got {self.pop_size}")
        if self.inputs < 1 or self.outputs < 1:
            raise ValueError(f"Need at least one input and one output, got {self.inputs}/{self.outputs}")
        if self.stale_species < 1:
            raise ValueError(f"stale_species must be positive, got {self.stale_species}")
        if min(self.initial_mutation_rates()) < 0.0:
            raise ValueError("Mutation rates must be non-negative")
        for name in ("perturbation", "crossover_rate"):
            p = getattr(self, name)
            if not 0.0 <= p <= 1.0:
                raise ValueError(f"{name} must lie in [0, 1], got {p}")
        if self.link_retries < 1:
            raise ValueError(f"link_retries must be positive, got {self.link_retries}")

# =========================
# Compatibility Distance (δ)
# =========================
def compatibility_distance(cfg: NEATConfig, g1: Genome, g2: Genome) -> float:
    w1 = {s.innovation: s.weight for s in g1.genes}
    w2 = {s.innovation: s.weight for s in g2.genes}
    matching = w1.keys() & w2.keys()
    disjoint = len(w1.keys() ^ w2.keys())
    N = max(len(g1.genes), len(g2.genes), 1)
    W = sum(abs(w1[inn] - w2[inn]) for inn in matching)
    W_bar = (W / len(matching)) if matching else 0.0
    return cfg.delta_disjoint * disjoint / N + cfg.delta_weights * W_bar

def same_species(cfg: NEATConfig, g1: Genome, g2: Genome) -> bool:
    return compatibility_distance(cfg, g1, g2) < cfg.delta_threshold

# =========================
# Crossover & Mutations
# =========================
def new_gene(pool: "Population", source: int, target: int, weight: float) -> Synapse:
    return Synapse(source, target, weight, True, pool.next_innovation())

def crossover(pool: "Population", g1: Genome, g2: Genome) -> Genome:
    """
    Child of two parents. Every gene of the fitter parent is inherited; on a
    marker match the other parent's copy wins a fair coin if it is enabled.
    """
    if g2.fitness > g1.fitness:
        g1, g2 = g2, g1
    other = {s.innovation: s for s in g2.genes}
    child = Genome()
    for gene1 in g1.genes:
        gene2 = other.get(gene1.innovation)
        if gene2 is not None and pool.rng.random() < 0.5 and gene2.enabled:
            child.genes.append(gene2.copy())
        else:
            child.genes.append(gene1.copy())
    child.max_neuron = max(g1.max_neuron, g2.max_neuron)
    child.mutation_rates = list(g1.mutation_rates)
    return child

def mutate_weights(pool: "Population", g: Genome) -> bool:
    cfg, rng = pool.cfg, pool.rng
    step = g.rate(MutationKind.STEP)
    for s in g.genes:
        if rng.random() < cfg.perturbation:
            s.weight += rng.random() * step * 2.0 - step
        else:
            s.weight = rng.uniform(-cfg.weight_range, cfg.weight_range)
    return bool(g.genes)

def random_neuron(pool: "Population", g: Genome, sensors: bool, actuators: bool) -> int:
    cfg = pool.cfg
    candidates = set()
    if sensors:
        candidates.update(range(cfg.inputs))
    if actuators:
        candidates.update(range(cfg.inputs, cfg.first_hidden))
    for s in g.genes:
        for nid in (s.source, s.target):
            if nid >= cfg.first_hidden:
                candidates.add(nid)
    return pool.rng.choice(sorted(candidates))

def mutate_link(pool: "Population", g: Genome, force_bias: bool = False) -> bool:
    cfg, rng = pool.cfg, pool.rng
    for _ in range(cfg.link_retries):
        if force_bias:
            src = cfg.bias_neuron
        else:
            src = random_neuron(pool, g, sensors=True, actuators=False)
        dst = random_neuron(pool, g, sensors=False, actuators=True)
        if src >= cfg.first_hidden and dst >= cfg.first_hidden and dst < src:
            src, dst = dst, src
        if src == dst or g.has_link(src, dst):
            continue
        # disabled genes count too, so re-enabling one can never close a cycle
        if has_path(g, dst, src):
            continue
        g.genes.append(new_gene(pool, src, dst, rng.uniform(-cfg.weight_range, cfg.weight_range)))
        return True
    return False

def mutate_bias(pool: "Population", g: Genome) -> bool:
    return mutate_link(pool, g, force_bias=True)

def mutate_node(pool: "Population", g: Genome) -> bool:
    enabled = [s for s in g.genes if s.enabled]
    if not enabled:
        return False
    old = pool.rng.choice(enabled)
    old.enabled = False
    g.max_neuron = max(g.max_neuron, pool.cfg.first_hidden - 1) + 1
    neuron = g.max_neuron
    g.genes.append(new_gene(pool, old.source, neuron, 1.0))
    g.genes.append(new_gene(pool, neuron, old.target, old.weight))
    return True

def _toggle(pool: "Population", g: Genome, enable: bool) -> bool:
    candidates = [s for s in g.genes if s.enabled != enable]
    if not candidates:
        return False
    gene = pool.rng.choice(candidates)
    gene.enabled = not gene.enabled
    return True

def mutate_enable(pool: "Population", g: Genome) -> bool:
    return _toggle(pool, g, True)

def mutate_disable(pool: "Population", g: Genome) -> bool:
    return _toggle(pool, g, False)

MUTATION_OPERATORS: Dict[MutationKind, Callable[["Population", Genome], bool]] = {
    MutationKind.CONNECTION: mutate_weights,
    MutationKind.LINK: mutate_link,
    MutationKind.BIAS: mutate_bias,
    MutationKind.NODE: mutate_node,
    MutationKind.ENABLE: mutate_enable,
    MutationKind.DISABLE: mutate_disable,
}

def mutate(pool: "Population", g: Genome) -> None:
    """
    Jitters all seven rates, then applies each operator floor(rate) times
    plus once more with probability rate - floor(rate).
    """
    rng = pool.rng
    for kind in MutationKind:
        if rng.random() < 0.5:
            g.mutation_rates[kind] *= 0.95
        else:
            g.mutation_rates[kind] /= 0.95
    for kind, op in MUTATION_OPERATORS.items():
        p = g.mutation_rates[kind]
        while p > 0:
            if rng.random() < p:
                op(pool, g)
            p -= 1.0
    g.network = None
