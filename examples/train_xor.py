"""
This script provides an example of how to use the `neat_pool` library
to train a network for the XOR problem without using the CLI.
"""
import os

from neat_pool import (
    NEATConfig,
    run_neat,
    plot_history,
    decode_to_network,
    visualize_genome
)
from xor_problem import XORProblem

def main():
    # --- 1. Define the problem ---
    problem = XORProblem()

    # --- 2. Configure the engine ---
    config = NEATConfig(
        pop_size=150,
        # inputs/outputs are taken from the problem.
        # Any other tunable can be overridden here, e.g.:
        # delta_threshold=1.5,
        # node_mutation=0.6,
        random_seed=42,
    )

    # --- 3. Run the evolution ---
    print("Starting NEAT evolution for the XOR problem...")
    artifacts_dir = "artifacts"
    viz_dir = "viz"

    champion, history = run_neat(
        cfg=config,
        problem=problem,
        max_generations=100,
        viz_dir=viz_dir,
        viz_each_gen=False,
    )

    if champion is None:
        print("\nEvolution did not produce a champion.")
        return

    print(f"\nEvolution complete! Champion fitness: {champion.fitness:.4f}")

    # --- 4. Save plots ---
    plot_history(history, save_path=os.path.join(artifacts_dir, "xor_fitness_history.png"))
    visualize_genome(champion, config, os.path.join(viz_dir, "final_xor_champion.png"), title="XOR Champion")

    # --- 5. Demonstrate the champion's performance ---
    net = decode_to_network(champion, config.inputs, config.outputs)
    print("\nChampion's performance on XOR patterns:")
    for x, y_true in problem.demo_samples():
        y_pred = net(x)[0]
        print(f"  Input: {x}, Target: {y_true[0]}, Predicted: {y_pred:.4f}")

if __name__ == "__main__":
    main()
