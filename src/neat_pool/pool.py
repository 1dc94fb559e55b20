from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Set
import math
import random
import threading

from .errors import PopulationError
from .genome import Genome
from .neat import NEATConfig, crossover, mutate, same_species
from .network import evaluate_network, generate_network

# =========================
# Species
# =========================
@dataclass(eq=False)
class Species:
    genomes: List[Genome] = field(default_factory=list)
    top_fitness: float = 0.0
    average_fitness: float = 0.0
    staleness: int = 0

    def copy(self) -> "Species":
        return Species(list(self.genomes), self.top_fitness, self.average_fitness, self.staleness)

    def sort_by_fitness(self) -> None:
        # stable: equal fitness keeps the order members joined in
        self.genomes.sort(key=lambda g: g.fitness, reverse=True)

    def calculate_average_fitness(self) -> None:
        """Mean global rank, so fitness scale does not skew breeding quotas."""
        total = sum(g.global_rank for g in self.genomes)
        self.average_fitness = total / len(self.genomes)

    def breed_child(self, pool: "Population") -> Genome:
        rng = pool.rng
        if rng.random() < pool.cfg.crossover_rate:
            g1 = rng.choice(self.genomes)
            g2 = rng.choice(self.genomes)
            child = crossover(pool, g1, g2)
        else:
            child = rng.choice(self.genomes).clone()
        mutate(pool, child)
        return child

# =========================
# Population
# =========================
class Population:
    """
    Owns every species and genome plus the innovation counter. The host
    drives a run with begin_run / evaluate / report_fitness and calls
    new_generation once all_runs_finished() is true.
    """

    def __init__(self, cfg: Optional[NEATConfig] = None):
        self.cfg = cfg if cfg is not None else NEATConfig()
        self.cfg.validate()
        self.rng = random.Random(self.cfg.random_seed)
        self.species: List[Species] = []
        self.generation = 0
        self.innovation = self.cfg.outputs
        self.max_fitness = 0.0
        self._lock = threading.Lock()
        self._finished: Set[int] = set()

    # ----- bookkeeping -----
    def next_innovation(self) -> int:
        self.innovation += 1
        return self.innovation

    def genomes(self) -> Iterator[Genome]:
        for s in self.species:
            yield from s.genomes

    def size(self) -> int:
        return sum(len(s.genomes) for s in self.species)

    def basic_genome(self) -> Genome:
        g = Genome()
        g.max_neuron = self.cfg.first_hidden - 1
        g.mutation_rates = self.cfg.initial_mutation_rates()
        return g

    def initialize(self) -> None:
        with self._lock:
            for _ in range(self.cfg.pop_size):
                g = self.basic_genome()
                mutate(self, g)
                self.add_to_species(g)

    def add_to_species(self, child: Genome) -> None:
        for s in self.species:
            if same_species(self.cfg, child, s.genomes[0]):
                s.genomes.append(child)
                return
        self.species.append(Species(genomes=[child]))

    # ----- host boundary -----
    def begin_run(self) -> None:
        for g in self.genomes():
            generate_network(g, self.cfg.inputs, self.cfg.outputs)
        self._finished.clear()

    def evaluate(self, genome: Genome, sensors: Sequence[float]) -> List[float]:
        return evaluate_network(genome, sensors)

    def report_fitness(self, genome: Genome, fitness: float) -> None:
        """Safe to call from several evaluation threads."""
        with self._lock:
            genome.fitness = fitness
            if fitness > self.max_fitness:
                self.max_fitness = fitness
            self._finished.add(id(genome))

    def all_runs_finished(self) -> bool:
        return all(id(g) in self._finished for g in self.genomes())

    def best_genome(self) -> Optional[Genome]:
        """Valid only until the next new_generation()."""
        return max(self.genomes(), key=lambda g: g.fitness, default=None)

    # ----- generational cycle -----
    def cull_species(self, cut_to_one: bool) -> None:
        for s in self.species:
            s.sort_by_fitness()
            remaining = 1 if cut_to_one else math.ceil(len(s.genomes) / 2)
            del s.genomes[remaining:]

    def rank_globally(self) -> None:
        ranked = sorted(self.genomes(), key=lambda g: g.fitness)
        for i, g in enumerate(ranked):
            g.global_rank = i

    def remove_stale_species(self) -> None:
        survived = []
        for s in self.species:
            s.sort_by_fitness()
            if s.genomes[0].fitness > s.top_fitness:
                s.top_fitness = s.genomes[0].fitness
                s.staleness = 0
            else:
                s.staleness += 1
            if s.staleness < self.cfg.stale_species or s.top_fitness >= self.max_fitness:
                survived.append(s)
        self.species = survived

    def total_average_fitness(self) -> float:
        return sum(s.average_fitness for s in self.species)

    def offspring_quota(self, species: Species, total: float) -> int:
        if total <= 0.0:
            raise PopulationError(f"Total average fitness is {total}; cannot allocate offspring")
        return math.floor(species.average_fitness / total * self.cfg.pop_size)

    def remove_weak_species(self) -> None:
        total = self.total_average_fitness()
        self.species = [s for s in self.species if self.offspring_quota(s, total) >= 1]

    def breed_quota_children(self) -> List[Genome]:
        total = self.total_average_fitness()
        children: List[Genome] = []
        for s in self.species:
            for _ in range(self.offspring_quota(s, total) - 1):
                children.append(s.breed_child(self))
        return children

    def top_up(self, children: List[Genome]) -> None:
        while len(children) + len(self.species) < self.cfg.pop_size:
            s = self.rng.choice(self.species)
            children.append(s.breed_child(self))

    def new_generation(self) -> None:
        """
        Replaces the population with the next generation. On PopulationError
        the species list is restored and the generation index is unchanged.
        """
        with self._lock:
            if not self.species:
                raise PopulationError("Population has no species")
            for s in self.species:
                if not s.genomes:
                    raise PopulationError("Found an empty species before culling")
            previous = self.species
            self.species = [s.copy() for s in previous]
            try:
                self.cull_species(cut_to_one=False)
                self.rank_globally()
                self.remove_stale_species()
                if not self.species:
                    raise PopulationError("Every species went stale")
                self.rank_globally()
                for s in self.species:
                    s.calculate_average_fitness()
                self.remove_weak_species()
                if not self.species:
                    raise PopulationError("No species earned an offspring slot")
                children = self.breed_quota_children()
            except PopulationError:
                self.species = previous
                raise
            self.cull_species(cut_to_one=True)
            self.top_up(children)
            for child in children:
                self.add_to_species(child)
            self.generation += 1
            self._finished.clear()
