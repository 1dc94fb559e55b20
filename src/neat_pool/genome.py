from __future__ import annotations
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .network import Network

# =========================
# Gene & Genome Structures
# =========================
class MutationKind(IntEnum):
    """Index of each self-adapting rate in ``Genome.mutation_rates``."""
    CONNECTION = 0
    LINK = 1
    BIAS = 2
    NODE = 3
    ENABLE = 4
    DISABLE = 5
    STEP = 6

N_MUTATION_RATES = len(MutationKind)

@dataclass
class Synapse:
    source: int
    target: int
    weight: float
    enabled: bool
    innovation: int

    def copy(self) -> "Synapse":
        return Synapse(self.source, self.target, self.weight, self.enabled, self.innovation)

@dataclass(eq=False)
class Genome:
    genes: List[Synapse] = field(default_factory=list)
    max_neuron: int = 0
    mutation_rates: List[float] = field(default_factory=lambda: [0.0] * N_MUTATION_RATES)
    fitness: float = 0.0
    global_rank: int = 0
    network: Optional["Network"] = field(default=None, repr=False)

    def clone(self) -> "Genome":
        """Heritable state only: fitness, rank and network start fresh."""
        g = Genome()
        g.genes = [s.copy() for s in self.genes]
        g.max_neuron = self.max_neuron
        g.mutation_rates = list(self.mutation_rates)
        return g

    def rate(self, kind: MutationKind) -> float:
        return self.mutation_rates[kind]

    def has_link(self, source: int, target: int) -> bool:
        for s in self.genes:
            if s.enabled and s.source == source and s.target == target:
                return True
        return False

    def hidden_neurons(self, first_hidden: int) -> List[int]:
        return sorted({nid for s in self.genes for nid in (s.source, s.target) if nid >= first_hidden})
