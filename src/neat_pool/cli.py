import argparse
import importlib
import os

from .neat import NEATConfig
from .network import decode_to_network
from .problem import Problem
from .runner import run_neat
from .visualization import plot_history

def _import_problem_class(path: str) -> type[Problem]:
    """Dynamically imports a Problem class from a string path like 'module.ClassName'."""
    try:
        module_path, class_name = path.rsplit('.', 1)
        module = importlib.import_module(module_path)
        problem_class = getattr(module, class_name)
    except (ValueError, ImportError, AttributeError) as e:
        raise ImportError(f"Could not import problem class '{path}'. "
                        f"Please provide a valid Python import path. Original error: {e}") from e

    if not isinstance(problem_class, type) or not issubclass(problem_class, Problem):
        raise TypeError(f"The class at '{path}' is not a subclass of neat_pool.Problem.")

    return problem_class


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Evolve a population of networks against a problem.")
    parser.add_argument(
        "problem",
        type=str,
        help="The import path to the Problem class to solve (e.g., 'xor_problem.XORProblem')."
    )
    parser.add_argument(
        "--viz-dir",
        type=str,
        default="viz",
        help="Directory to save visualization images."
    )
    parser.add_argument(
        "--no-viz",
        action="store_true",
        help="Disable all visualization output."
    )
    parser.add_argument(
        "--generations",
        type=int,
        default=300,
        help="Number of generations to run the evolution."
    )
    parser.add_argument(
        "--pop-size",
        type=int,
        default=50,
        help="Population size for each generation."
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed; omit for a different run each time."
    )
    parser.add_argument(
        "--target-fitness",
        type=float,
        default=None,
        help="Stop as soon as the best fitness reaches this value."
    )
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        problem_class = _import_problem_class(args.problem)
        problem_instance = problem_class()
    except (ImportError, TypeError) as e:
        parser.error(str(e))

    cfg = NEATConfig(
        pop_size=args.pop_size,
        random_seed=args.seed,
        target_fitness=args.target_fitness,
    )
    try:
        cfg.validate()
    except ValueError as e:
        parser.error(str(e))

    print(f"Running NEAT for problem: {args.problem}")
    print(f"Population size: {cfg.pop_size}, Generations: {args.generations}")

    champion, history = run_neat(
        cfg,
        problem_instance,
        max_generations=args.generations,
        viz_dir=None if args.no_viz else args.viz_dir,
        viz_each_gen=(not args.no_viz),
    )

    if champion is None:
        print("\nNo champion found after evolution.")
        return

    print(f"\nChampion fitness: {champion.fitness:.4f}")

    demos = list(problem_instance.demo_samples())
    if demos:
        net = decode_to_network(champion, cfg.inputs, cfg.outputs)
        print("\nChampion predictions on demo samples:")
        for x, y in demos:
            pred = net(x)[0]
            print(f"  input={x} -> pred={pred:.4f} target={y[0]:.4f}")

    if not args.no_viz:
        plot_history(history, save_path=os.path.join(args.viz_dir, 'fitness_history.png'), show=False)

if __name__ == "__main__":
    main()
