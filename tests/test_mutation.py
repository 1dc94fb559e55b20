import pytest

from neat_pool import (
    Genome,
    MutationKind,
    NEATConfig,
    Population,
    Synapse,
    compatibility_distance,
    crossover,
    generate_network,
    mutate,
    same_species,
)
from neat_pool.neat import (
    mutate_bias,
    mutate_disable,
    mutate_enable,
    mutate_link,
    mutate_node,
    mutate_weights,
    new_gene,
    random_neuron,
)
from neat_pool.graph_utils import has_path


def _genome(genes, fitness=0.0, max_neuron=4):
    g = Genome()
    g.genes = [Synapse(src, dst, w, enabled, inn) for inn, src, dst, w, enabled in genes]
    g.fitness = fitness
    g.max_neuron = max_neuron
    g.mutation_rates = NEATConfig().initial_mutation_rates()
    return g


def test_counter_starts_at_output_count(pool):
    assert pool.innovation == 1
    assert pool.next_innovation() == 2
    assert pool.innovation == 2


def test_node_mutation_scenario(pool):
    g = pool.basic_genome()
    assert g.max_neuron == 4

    assert mutate_node(pool, g) is False
    assert g.genes == []
    assert g.max_neuron == 4
    assert pool.innovation == 1

    g.genes.append(new_gene(pool, 0, 4, 1.0))
    assert mutate_node(pool, g) is True
    assert len(g.genes) == 3
    assert g.max_neuron == 5
    old, into, out = g.genes
    assert not old.enabled
    assert (into.source, into.target, into.weight, into.enabled) == (0, 5, 1.0, True)
    assert (out.source, out.target, out.weight, out.enabled) == (5, 4, 1.0, True)
    assert (into.innovation, out.innovation) == (3, 4)


def test_node_mutation_allocates_above_actuators():
    pool = Population(NEATConfig(inputs=3, outputs=2, random_seed=5))
    g = pool.basic_genome()
    g.genes.append(new_gene(pool, 0, 3, 0.5))
    mutate_node(pool, g)
    assert g.max_neuron == 5
    assert {s.target for s in g.genes} == {3, 5}


def test_link_mutation_on_empty_genome_joins_sensor_to_actuator(pool):
    g = pool.basic_genome()
    assert mutate_link(pool, g) is True
    (gene,) = g.genes
    assert gene.source in range(4)
    assert gene.target == 4
    assert gene.enabled
    assert -2.0 <= gene.weight <= 2.0
    assert gene.innovation == 2


def test_bias_mutation_starts_at_bias_sensor(pool):
    g = pool.basic_genome()
    assert mutate_bias(pool, g) is True
    assert (g.genes[0].source, g.genes[0].target) == (3, 4)


def test_link_mutation_without_free_pair_is_noop():
    pool = Population(NEATConfig(inputs=1, outputs=1, random_seed=3))
    g = pool.basic_genome()
    g.genes.append(new_gene(pool, 0, 1, 0.3))
    before = pool.innovation
    assert mutate_link(pool, g) is False
    assert len(g.genes) == 1
    assert pool.innovation == before


def test_link_mutation_never_closes_a_cycle(pool):
    # 6 was split into 0->6->5, and the disabled 6->5 still blocks 5->6
    g = _genome([(2, 0, 6, 1.0, True), (3, 6, 5, 1.0, False), (4, 5, 4, 1.0, True)], max_neuron=6)
    for _ in range(50):
        mutate_link(pool, g)
    assert not any(s.source == 5 and s.target == 6 for s in g.genes)
    mutate_enable(pool, g)
    generate_network(g, 4, 1)


def test_enable_and_disable_flip_one_gene(pool):
    g = _genome([(2, 0, 4, 1.0, True), (3, 1, 4, 1.0, True)])
    assert mutate_enable(pool, g) is False
    assert mutate_disable(pool, g) is True
    assert sorted(s.enabled for s in g.genes) == [False, True]
    assert mutate_enable(pool, g) is True
    assert all(s.enabled for s in g.genes)


def test_weight_perturbation_stays_within_step():
    pool = Population(NEATConfig(perturbation=1.0, random_seed=8))
    g = _genome([(2, 0, 4, 0.5, True), (3, 1, 4, -0.5, True)])
    step = g.rate(MutationKind.STEP)
    mutate_weights(pool, g)
    assert abs(g.genes[0].weight - 0.5) <= step
    assert abs(g.genes[1].weight + 0.5) <= step


def test_weight_reset_draws_fresh_weight():
    pool = Population(NEATConfig(perturbation=0.0, random_seed=8))
    g = _genome([(2, 0, 4, 50.0, True)])
    mutate_weights(pool, g)
    assert -2.0 <= g.genes[0].weight <= 2.0


def test_mutate_jitters_every_rate(pool):
    g = pool.basic_genome()
    g.mutation_rates = [0.0] * 6 + [0.1]
    mutate(pool, g)
    assert g.mutation_rates[:6] == [0.0] * 6
    assert g.rate(MutationKind.STEP) in (pytest.approx(0.1 * 0.95), pytest.approx(0.1 / 0.95))
    assert g.genes == []


def _links_after_mutate(seed, link_rate):
    pool = Population(NEATConfig(random_seed=seed))
    g = pool.basic_genome()
    g.mutation_rates = [0.0] * 7
    g.mutation_rates[MutationKind.LINK] = link_rate
    mutate(pool, g)
    return len(g.genes)


def test_rate_above_one_applies_whole_part_plus_fraction():
    # 2.0 jitters to 1.9 or 2.105: one or two sure links, one more by chance
    counts = {_links_after_mutate(seed, 2.0) for seed in range(40)}
    assert counts <= {1, 2, 3}
    assert max(counts) >= 2
    # 2.2 never jitters below 2.0
    for seed in range(40):
        assert 2 <= _links_after_mutate(seed, 2.2) <= 3


def test_rate_below_one_applies_at_most_once():
    counts = [_links_after_mutate(seed, 0.5) for seed in range(40)]
    assert set(counts) == {0, 1}


def test_bias_link_draws_only_the_target():
    pool = Population(NEATConfig(random_seed=21))
    g = pool.basic_genome()
    mutate_bias(pool, g)

    twin = Population(NEATConfig(random_seed=21))
    assert random_neuron(twin, twin.basic_genome(), sensors=False, actuators=True) == 4
    assert g.genes[0].weight == twin.rng.uniform(-2.0, 2.0)


def test_has_path_follows_disabled_genes():
    g = _genome([(2, 0, 6, 1.0, True), (3, 6, 5, 1.0, False)], max_neuron=6)
    assert has_path(g, 0, 5)
    assert not has_path(g, 5, 6)


def test_mutations_preserve_feed_forward_order(pool):
    g = pool.basic_genome()
    for _ in range(200):
        mutate(pool, g)
    assert any(s.source >= 5 for s in g.genes)
    assert all(s.source != s.target for s in g.genes)
    net = generate_network(g, 4, 1)
    position = {nid: i for i, nid in enumerate(net.order)}
    for s in g.genes:
        if s.enabled and s.source >= 4:
            assert position[s.source] < position[s.target]
    ids = {nid for s in g.genes for nid in (s.source, s.target)}
    assert max(ids) <= g.max_neuron


def test_compatibility_distance_by_hand(cfg):
    a = _genome([(1, 0, 4, 0.5, True), (2, 1, 4, 1.0, True), (3, 2, 4, 0.0, True)])
    b = _genome([(1, 0, 4, -0.5, True), (2, 1, 4, 1.0, True), (4, 3, 4, 0.0, True), (5, 0, 4, 0.0, True)])
    assert compatibility_distance(cfg, a, b) == pytest.approx(2.0 * 3 / 4 + 0.4 * 0.5)


def test_compatibility_distance_is_symmetric(seeded_pool):
    genomes = list(seeded_pool.genomes())[:10]
    for a in genomes:
        for b in genomes:
            d1 = compatibility_distance(seeded_pool.cfg, a, b)
            d2 = compatibility_distance(seeded_pool.cfg, b, a)
            assert d1 == pytest.approx(d2)


def test_empty_genomes_are_same_species(cfg):
    a, b = _genome([]), _genome([])
    assert compatibility_distance(cfg, a, b) == 0.0
    assert same_species(cfg, a, b)


def test_clone_resets_evaluation_state(pool):
    g = _genome([(2, 0, 4, 0.5, True)], fitness=12.0)
    g.global_rank = 7
    generate_network(g, 4, 1)
    c = g.clone()
    assert c.fitness == 0.0
    assert c.global_rank == 0
    assert c.network is None
    assert c.max_neuron == g.max_neuron
    assert c.genes == g.genes
    c.genes[0].weight = 9.0
    c.mutation_rates[0] = 9.0
    assert g.genes[0].weight == 0.5
    assert g.mutation_rates[0] != 9.0


@pytest.mark.parametrize("seed", range(10))
def test_crossover_inherits_fitter_parent_genes(seed):
    pool = Population(NEATConfig(random_seed=seed))
    fit = _genome([(1, 0, 4, 1.0, True), (2, 1, 4, 2.0, True), (3, 2, 4, 3.0, True)], fitness=10.0, max_neuron=4)
    fit.mutation_rates = [0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7]
    weak = _genome([(2, 1, 4, -2.0, True), (3, 2, 4, -3.0, False), (9, 0, 6, 1.0, True)], fitness=1.0, max_neuron=6)
    child = crossover(pool, weak, fit)
    assert [s.innovation for s in child.genes] == [1, 2, 3]
    assert child.genes[0].weight == 1.0
    assert child.genes[1].weight in (2.0, -2.0)
    # disabled copy in the weaker parent is never taken
    assert child.genes[2].weight == 3.0
    assert child.max_neuron == 6
    assert child.mutation_rates == fit.mutation_rates
    assert child.mutation_rates is not fit.mutation_rates
    assert child.genes[0] is not fit.genes[0]
