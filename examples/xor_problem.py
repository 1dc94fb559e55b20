from __future__ import annotations
from typing import List, Tuple, Callable, Iterable, Sequence

from neat_pool import Problem

class XORProblem(Problem):
    """
    A simple problem to evolve a network that can solve the XOR logic gate.
    The third sensor is the bias and always reads 1.0.
    """
    def get_input_output_size(self) -> Tuple[int, int]:
        return (3, 1)

    def _patterns(self) -> List[Tuple[List[float], List[float]]]:
        return [
            ([0.0, 0.0, 1.0], [0.0]),
            ([0.0, 1.0, 1.0], [1.0]),
            ([1.0, 0.0, 1.0], [1.0]),
            ([1.0, 1.0, 1.0], [0.0]),
        ]

    def evaluate(self, forward: Callable[[Sequence[float]], List[float]], _genome) -> float:
        """
        The fitness is 4.0 minus the sum of squared errors over the four XOR patterns.
        Outputs below zero count as zero. A perfect score is 4.0.
        """
        sse = 0.0
        for x, y_true in self._patterns():
            y = max(0.0, forward(x)[0])
            sse += (y - y_true[0]) ** 2
        return 4.0 - sse

    def demo_samples(self) -> Iterable[Tuple[List[float], List[float]]]:
        return self._patterns()

    def goal_reached(self, forward: Callable[[Sequence[float]], List[float]], _genome) -> bool:
        """Every pattern lands on the right side of the 0.5 decision threshold."""
        for x, y_true in self._patterns():
            if (forward(x)[0] > 0.5) != (y_true[0] > 0.5):
                return False
        return True
