from __future__ import annotations
from dataclasses import dataclass, field
from typing import List

@dataclass
class EvolutionHistory:
    """Data class to store metrics from an evolution run."""
    generations: List[int] = field(default_factory=list)
    best_overall: List[float] = field(default_factory=list)
    gen_best: List[float] = field(default_factory=list)
    avg: List[float] = field(default_factory=list)
    species: List[int] = field(default_factory=list)
    hidden: List[int] = field(default_factory=list)

    def record(self, generation: int, best_overall: float, gen_best: float,
               avg: float, species: int, hidden: int) -> None:
        self.generations.append(generation)
        self.best_overall.append(best_overall)
        self.gen_best.append(gen_best)
        self.avg.append(avg)
        self.species.append(species)
        self.hidden.append(hidden)
