from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Sequence
import math

from .errors import NetworkError
from .genome import Genome, Synapse
from .graph_utils import evaluation_order

# =========================
# Activation
# =========================
_UPPER = math.nextafter(1.0, 0.0)
_LOWER = -_UPPER

def sigmoid(x: float) -> float:
    """
    Steepened sigmoid rescaled to (-1, 1); sigmoid(0) == 0.
    Saturated values are held one ulp inside the open interval.
    """
    z = -4.9 * x
    if z > 700.0:
        return _LOWER
    return min(_UPPER, max(_LOWER, 2.0 / (1.0 + math.exp(z)) - 1.0))

# =========================
# Network Runtime
# =========================
@dataclass
class Neuron:
    value: float = 0.0
    incoming: List[Synapse] = field(default_factory=list)

@dataclass
class Network:
    neurons: Dict[int, Neuron]
    order: List[int]
    n_inputs: int
    n_outputs: int

    @property
    def actuators(self) -> List[int]:
        return list(range(self.n_inputs, self.n_inputs + self.n_outputs))

    def evaluate(self, inputs: Sequence[float]) -> List[float]:
        if len(inputs) != self.n_inputs:
            raise ValueError(f"Expected {self.n_inputs} inputs, got {len(inputs)}")
        for nid, x in enumerate(inputs):
            self.neurons[nid].value = float(x)
        for nid in self.order:
            neuron = self.neurons[nid]
            total = 0.0
            for s in neuron.incoming:
                total += s.weight * self.neurons[s.source].value
            neuron.value = sigmoid(total)
        return [self.neurons[nid].value for nid in self.actuators]

def generate_network(genome: Genome, n_inputs: int, n_outputs: int) -> Network:
    """
    Builds the runtime network of a genome and stores it on ``genome.network``.
    Only enabled genes are wired; every gene must still reference a sensor,
    an actuator or an allocated hidden neuron.
    """
    first_hidden = n_inputs + n_outputs
    highest = max(genome.max_neuron, first_hidden - 1)
    neurons: Dict[int, Neuron] = {nid: Neuron() for nid in range(first_hidden)}
    for s in genome.genes:
        for nid in (s.source, s.target):
            if nid < 0 or nid > highest:
                raise NetworkError(f"Gene {s.innovation} references unknown neuron {nid}")
        if s.target < n_inputs:
            raise NetworkError(f"Gene {s.innovation} feeds sensor neuron {s.target}")
        if not s.enabled:
            continue
        neurons.setdefault(s.source, Neuron())
        neurons.setdefault(s.target, Neuron()).incoming.append(s)

    order = evaluation_order(neurons.keys(), genome.genes, n_inputs, first_hidden)
    if order is None:
        raise NetworkError("Genome has cycles; cannot evaluate.")
    net = Network(neurons=neurons, order=order, n_inputs=n_inputs, n_outputs=n_outputs)
    genome.network = net
    return net

def evaluate_network(genome: Genome, inputs: Sequence[float]) -> List[float]:
    if genome.network is None:
        raise NetworkError("Network was not generated for this genome.")
    return genome.network.evaluate(inputs)

def decode_to_network(genome: Genome, n_inputs: int, n_outputs: int) -> Callable[[Sequence[float]], List[float]]:
    """Returns a forward function backed by a freshly generated network."""
    net = generate_network(genome, n_inputs, n_outputs)
    return net.evaluate
