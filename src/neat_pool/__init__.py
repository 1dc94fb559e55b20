"""
A NEAT (NeuroEvolution of Augmenting Topologies) engine.
Evolves a population of small feed-forward networks through speciation,
rank-based breeding quotas and self-adapting mutation rates.
"""
from .genome import Genome, Synapse, MutationKind
from .errors import NEATError, NetworkError, PopulationError
from .network import Neuron, Network, sigmoid, generate_network, evaluate_network, decode_to_network
from .neat import (
    NEATConfig,
    compatibility_distance,
    same_species,
    crossover,
    mutate,
    MUTATION_OPERATORS,
)
from .pool import Species, Population
from .problem import Problem, survival_fitness
from .history import EvolutionHistory
from .runner import run_neat
from .visualization import visualize_genome, plot_history

__all__ = [
    "Genome",
    "Synapse",
    "MutationKind",
    "NEATError",
    "NetworkError",
    "PopulationError",
    "Neuron",
    "Network",
    "sigmoid",
    "generate_network",
    "evaluate_network",
    "decode_to_network",
    "NEATConfig",
    "compatibility_distance",
    "same_species",
    "crossover",
    "mutate",
    "MUTATION_OPERATORS",
    "Species",
    "Population",
    "Problem",
    "survival_fitness",
    "EvolutionHistory",
    "run_neat",
    "visualize_genome",
    "plot_history",
]
