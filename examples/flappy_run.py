"""
Headless Flappy Bird host driving the population one tick at a time.

Every genome flies its own bird through the same tubes. A bird flaps when the
first actuator reads above 0.5; it dies on the floor or a tube. When the last
bird is down the population breeds the next generation.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional
import argparse
import random

from neat_pool import NEATConfig, Population, survival_fitness
from neat_pool.genome import Genome

WIDTH = 576
HEIGHT = 768
BIRD_WIDTH = 72
BIRD_HEIGHT = 52
BIRD_X = WIDTH / 3 - BIRD_WIDTH / 2
FLOOR_OFFSET = 96
FLOOR_SPEED = 5
TUBE_WIDTH = 104
TUBE_APERTURE = 200

@dataclass
class Bird:
    genome: Genome
    height: float = HEIGHT / 2.0
    velocity: float = 0.0
    flap: bool = False
    flaps: int = 0
    dead: bool = False

@dataclass
class Tube:
    height: float
    position: float = float(WIDTH)
    passed: bool = False

class World:
    def __init__(self, rng: random.Random):
        self.rng = rng
        self.tubes: List[Tube] = []
        self.speed = 75
        self.ticks_tubes = 0
        self.score = 0

    def next_tube(self) -> Optional[Tube]:
        ahead = [t for t in self.tubes if t.position + TUBE_WIDTH > BIRD_X]
        return min(ahead, key=lambda t: t.position, default=None)

    def advance(self) -> None:
        self.ticks_tubes += 1
        if self.ticks_tubes == self.speed:
            height = FLOOR_OFFSET + 100 + self.rng.randrange(HEIGHT - 200 - TUBE_APERTURE - FLOOR_OFFSET)
            self.tubes.append(Tube(height))
            self.ticks_tubes = 0
        for tube in self.tubes:
            tube.position -= FLOOR_SPEED
            if not tube.passed and tube.position + TUBE_WIDTH < BIRD_X:
                tube.passed = True
                self.score += 1
                if self.score % 10 == 0:
                    self.speed = max(self.speed - 5, 20)
        self.tubes = [t for t in self.tubes if t.position + TUBE_WIDTH >= 0.0]

    def collides(self, bird: Bird) -> bool:
        if bird.height < FLOOR_OFFSET + BIRD_HEIGHT / 2:
            return True
        top, bottom = bird.height + BIRD_HEIGHT / 2, bird.height - BIRD_HEIGHT / 2
        for tube in self.tubes:
            if tube.position < BIRD_X + BIRD_WIDTH and tube.position + TUBE_WIDTH > BIRD_X:
                if bottom < tube.height or top > tube.height + TUBE_APERTURE:
                    return True
        return False

def sensors(bird: Bird, tube: Optional[Tube]) -> List[float]:
    if tube is None:
        return [bird.height / HEIGHT, 0.5, 1.0, 1.0]
    return [bird.height / HEIGHT, tube.height / HEIGHT, tube.position / WIDTH, 1.0]

def play_generation(pool: Population, rng: random.Random, max_ticks: int) -> int:
    """Runs one generation to completion and returns the tubes passed."""
    pool.begin_run()
    birds = [Bird(g) for g in pool.genomes()]
    world = World(rng)
    ticks = 0
    while not pool.all_runs_finished():
        tube = world.next_tube()
        for bird in birds:
            if not bird.dead and pool.evaluate(bird.genome, sensors(bird, tube))[0] > 0.5:
                bird.flap = True
        ticks += 1
        world.advance()
        for bird in birds:
            if bird.dead:
                continue
            if bird.flap:
                bird.velocity = 10
                bird.flap = False
                bird.flaps += 1
            bird.height += bird.velocity
            bird.velocity -= 0.98
            if bird.height > HEIGHT:
                bird.height = HEIGHT
                bird.velocity = 0.0
            if world.collides(bird) or ticks >= max_ticks:
                bird.dead = True
                pool.report_fitness(bird.genome, survival_fitness(ticks, bird.flaps))
    return world.score

def main():
    parser = argparse.ArgumentParser(description="Evolve Flappy Bird players without a window.")
    parser.add_argument("--generations", type=int, default=30)
    parser.add_argument("--max-ticks", type=int, default=5000)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()

    pool = Population(NEATConfig(random_seed=args.seed))
    pool.initialize()
    world_rng = random.Random(args.seed)
    for _ in range(args.generations):
        score = play_generation(pool, world_rng, args.max_ticks)
        best = pool.best_genome()
        print(f"Gen {pool.generation:03d} Species: {len(pool.species):02d} Score: {score} "
              f"GenBest: {best.fitness:.1f} Best: {pool.max_fitness:.1f}")
        pool.new_generation()

if __name__ == "__main__":
    main()
