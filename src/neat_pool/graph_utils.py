from __future__ import annotations
from collections import deque, defaultdict
import heapq
from typing import Dict, Iterable, List, Optional

from .genome import Genome, Synapse

def has_path(genome: Genome, src: int, dst: int) -> bool:
    """Checks if a path exists from src to dst through any gene, enabled or not."""
    adj = defaultdict(list)
    for s in genome.genes:
        adj[s.source].append(s.target)
    q = deque([src])
    visited = {src}
    while q:
        u = q.popleft()
        if u == dst:
            return True
        for v in adj[u]:
            if v not in visited:
                visited.add(v)
                q.append(v)
    return False

def evaluation_order(neurons: Iterable[int], genes: Iterable[Synapse],
                     n_inputs: int, first_hidden: int) -> Optional[List[int]]:
    """
    Orders the non-sensor neurons so that every neuron comes after all
    neurons feeding it. Among the neurons that are ready, hidden neurons go
    first in ascending id, then actuators in ascending id.
    Returns None if the enabled genes contain a cycle.
    """
    def key(nid: int):
        is_actuator = n_inputs <= nid < first_hidden
        return (is_actuator, nid)

    nodes = [nid for nid in neurons if nid >= n_inputs]
    indeg: Dict[int, int] = {nid: 0 for nid in nodes}
    adj = defaultdict(list)
    for s in genes:
        if s.enabled and s.source >= n_inputs:
            adj[s.source].append(s.target)
            indeg[s.target] += 1

    heap = [key(nid) for nid, d in indeg.items() if d == 0]
    heapq.heapify(heap)
    order: List[int] = []
    while heap:
        _, u = heapq.heappop(heap)
        order.append(u)
        for v in adj[u]:
            indeg[v] -= 1
            if indeg[v] == 0:
                heapq.heappush(heap, key(v))

    if len(order) == len(nodes):
        return order
    return None
