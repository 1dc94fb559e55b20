from __future__ import annotations
from typing import Optional, Tuple
import os

from .genome import Genome
from .history import EvolutionHistory
from .neat import NEATConfig
from .network import decode_to_network
from .pool import Population
from .problem import Problem
from .visualization import visualize_genome

# =========================
# History + Main Evolution Loop
# =========================
def run_neat(
    cfg: NEATConfig,
    problem: Problem,
    max_generations: int = 300,
    viz_dir: Optional[str] = None,
    viz_each_gen: bool = True
) -> Tuple[Optional[Genome], EvolutionHistory]:
    cfg.inputs, cfg.outputs = problem.get_input_output_size()
    pool = Population(cfg)
    pool.initialize()
    best_overall: Optional[Genome] = None
    history = EvolutionHistory()

    if viz_dir: os.makedirs(viz_dir, exist_ok=True)

    for gen in range(1, max_generations + 1):
        pool.begin_run()
        for g in pool.genomes():
            pool.report_fitness(g, problem.evaluate(g.network.evaluate, g))

        gen_best = pool.best_genome()
        if best_overall is None or gen_best.fitness > best_overall.fitness:
            best_overall = gen_best.clone()
            best_overall.fitness = gen_best.fitness
        fitnesses = [g.fitness for g in pool.genomes()]
        avg_fit = sum(fitnesses) / max(1, len(fitnesses))
        hidden = max(len(g.hidden_neurons(cfg.first_hidden)) for g in pool.genomes())
        print(f"Gen {gen:03d} Species: {len(pool.species):02d} Best: {best_overall.fitness:.4f} "
              f"GenBest: {gen_best.fitness:.4f} Avg: {avg_fit:.4f} Hidden: {hidden}")
        history.record(gen, best_overall.fitness, gen_best.fitness, avg_fit, len(pool.species), hidden)

        if viz_dir and viz_each_gen:
            fname = os.path.join(viz_dir, f"gen_{gen:03d}_champion.png")
            try:
                visualize_genome(gen_best, cfg, fname, title=f"Gen {gen} champion (fit={gen_best.fitness:.3f})")
            except Exception as e:
                print(f"[viz] Failed to save {fname}: {e}")

        if cfg.target_fitness is not None and best_overall.fitness >= cfg.target_fitness:
            print("Early stopping: target fitness reached.")
            break
        net_best = decode_to_network(best_overall, cfg.inputs, cfg.outputs)
        if problem.goal_reached(net_best, best_overall):
            print("Early stopping: problem-specific goal reached.")
            break
        if gen < max_generations:
            pool.new_generation()

    if viz_dir and best_overall is not None:
        final_path = os.path.join(viz_dir, "final_champion.png")
        try:
            visualize_genome(best_overall, cfg, final_path, title=f"Final champion (fit={best_overall.fitness:.3f})")
        except Exception as e:
            print(f"[viz] Failed to save final visualization: {e}")
    return best_overall, history
