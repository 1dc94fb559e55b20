import pytest

from neat_pool import Genome, Synapse, NetworkError, sigmoid, generate_network, evaluate_network


def _genome(genes, max_neuron=4):
    g = Genome()
    g.max_neuron = max_neuron
    g.genes = [Synapse(src, dst, w, enabled, inn) for inn, (src, dst, w, enabled) in enumerate(genes, start=2)]
    return g


def test_sigmoid_is_zero_at_origin_and_bounded():
    assert sigmoid(0.0) == 0.0
    for x in (-5.0, -1.0, -0.1, 0.1, 1.0, 5.0):
        assert -1.0 < sigmoid(x) < 1.0


@pytest.mark.parametrize("x", [8.0, 20.0, 1e6, float("inf")])
def test_sigmoid_saturates_inside_open_interval(x):
    assert -1.0 < sigmoid(-x) < sigmoid(x) < 1.0
    assert sigmoid(x) == -sigmoid(-x)


def test_saturated_actuator_stays_below_one():
    g = _genome([(0, 4, 50.0, True)])
    generate_network(g, 4, 1)
    assert evaluate_network(g, [1.0, 0.0, 0.0, 0.0])[0] < 1.0
    assert evaluate_network(g, [-1.0, 0.0, 0.0, 0.0])[0] > -1.0


def test_sigmoid_is_monotonic():
    xs = [i / 10.0 for i in range(-50, 51)]
    values = [sigmoid(x) for x in xs]
    assert all(a < b for a, b in zip(values, values[1:]))


def test_direct_link_output():
    g = _genome([(0, 4, 1.0, True)])
    generate_network(g, 4, 1)
    assert evaluate_network(g, [1.0, 0.0, 0.0, 0.0]) == [pytest.approx(sigmoid(1.0))]


def test_evaluation_is_deterministic():
    g = _genome([(0, 5, 0.7, True), (5, 4, -1.3, True), (3, 4, 0.2, True), (1, 5, 0.4, True)], max_neuron=5)
    generate_network(g, 4, 1)
    inputs = [0.3, -0.8, 0.5, 1.0]
    first = evaluate_network(g, inputs)
    for _ in range(5):
        assert evaluate_network(g, inputs) == first


def test_disabled_genes_are_not_wired():
    g = _genome([(0, 4, 1.0, False), (0, 5, 1.0, True), (5, 4, 1.0, True)], max_neuron=5)
    net = generate_network(g, 4, 1)
    assert [s.source for s in net.neurons[4].incoming] == [5]
    assert evaluate_network(g, [1.0, 0.0, 0.0, 0.0]) == [pytest.approx(sigmoid(sigmoid(1.0)))]


def test_split_hidden_link_is_evaluated_before_its_target():
    # 6 was inserted between 0 and 5, so it feeds a lower id
    g = _genome([(0, 6, 1.0, True), (6, 5, 1.0, True), (5, 4, 1.0, True)], max_neuron=6)
    net = generate_network(g, 4, 1)
    assert net.order == [6, 5, 4]
    expected = sigmoid(sigmoid(sigmoid(1.0)))
    assert evaluate_network(g, [1.0, 0.0, 0.0, 0.0]) == [pytest.approx(expected)]


def test_hidden_neurons_run_before_actuators():
    g = _genome([(0, 5, 1.0, True), (0, 7, 1.0, True), (7, 4, 1.0, True), (5, 4, 1.0, True)], max_neuron=7)
    net = generate_network(g, 4, 1)
    assert net.order == [5, 7, 4]


def test_unconnected_actuator_reads_zero():
    g = _genome([])
    generate_network(g, 4, 2)
    assert evaluate_network(g, [1.0, 1.0, 1.0, 1.0]) == [0.0, 0.0]


def test_wrong_sensor_count_is_rejected():
    g = _genome([(0, 4, 1.0, True)])
    generate_network(g, 4, 1)
    with pytest.raises(ValueError):
        evaluate_network(g, [1.0, 0.0])


def test_evaluating_without_network_is_rejected():
    with pytest.raises(NetworkError):
        evaluate_network(_genome([(0, 4, 1.0, True)]), [0.0] * 4)


@pytest.mark.parametrize("genes,max_neuron", [
    ([(0, 9, 1.0, True)], 5),
    ([(0, 9, 1.0, False)], 5),
    ([(-1, 4, 1.0, True)], 4),
    ([(5, 1, 1.0, True)], 5),
])
def test_inconsistent_genes_raise(genes, max_neuron):
    with pytest.raises(NetworkError):
        generate_network(_genome(genes, max_neuron), 4, 1)


def test_cycle_raises():
    g = _genome([(0, 5, 1.0, True), (5, 6, 1.0, True), (6, 5, 1.0, True), (6, 4, 1.0, True)], max_neuron=6)
    with pytest.raises(NetworkError):
        generate_network(g, 4, 1)
