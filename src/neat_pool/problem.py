from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Tuple, Callable, Iterable, Sequence

class Problem(ABC):
    """
    Abstract base class for a task the population is evolved against.
    A problem fixes the sensor/actuator counts and scores one genome at a time.
    """
    @abstractmethod
    def get_input_output_size(self) -> Tuple[int, int]:
        """
        Returns the number of sensor and actuator neurons.
        By convention the last sensor is held at 1.0 and acts as the bias.
        """
        ...

    @abstractmethod
    def evaluate(self, forward: Callable[[Sequence[float]], List[float]], genome) -> float:
        """
        Runs one genome and returns its fitness (higher is better).
        `forward` maps a sensor vector to the actuator values in (-1, 1).
        """
        ...

    def demo_samples(self) -> Iterable[Tuple[List[float], List[float]]]:
        """Optional input/target pairs shown for the champion after training."""
        return []

    def goal_reached(self, forward: Callable[[Sequence[float]], List[float]], genome) -> bool:
        """Optional early-stopping test. Never reached by default."""
        return False

def survival_fitness(ticks: int, flaps: int, flap_penalty: float = 1.5) -> float:
    """
    Survival time minus a penalty per actuation. An exact zero becomes -1.0
    so it still ranks below any run that made progress.
    """
    fitness = ticks - flaps * flap_penalty
    return -1.0 if fitness == 0.0 else fitness
