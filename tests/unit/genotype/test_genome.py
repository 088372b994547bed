"""
Unit tests for Genome class.

Tests cover initialization, execution, mutations and their fallbacks,
crossover, distance calculation, copying and serialization.
"""

import math
import pytest
import random

from evoneat.errors                     import ArityError, InvariantViolation
from evoneat.genotype.genome            import Genome
from evoneat.genotype.innovation_ledger import InnovationLedger
from evoneat.genotype.node_gene         import NodeType


# ============================================================================
# Helpers
# ============================================================================

def sigmoid(z):
    return 1.0 / (1.0 + math.exp(-5.0 * z))


def make_dict(connections, nodes=None):
    """2 inputs (0, 1), bias (2), one output (3) in layer 1, plus any extra nodes."""
    nodes = nodes or [{"id": 0, "layer": 0}, {"id": 1, "layer": 0},
                      {"id": 2, "layer": 0}, {"id": 3, "layer": 1}]
    return {"num_inputs": 2, "num_outputs": 1, "nodes": nodes, "connections": connections}


def hidden_nodes(hidden_layer=1, output_layer=2):
    return [{"id": 0, "layer": 0}, {"id": 1, "layer": 0}, {"id": 2, "layer": 0},
            {"id": 3, "layer": output_layer}, {"id": 4, "layer": hidden_layer}]


def enabled(genome):
    return [conn for conn in genome.conn_genes.values() if conn.enabled]


# ============================================================================
# Initialization
# ============================================================================

class TestGenomeInit:
    """A new genome fully connects the inputs and the bias node to the outputs."""

    def test_minimal_genome(self, genome):
        assert len(genome.node_genes) == 4
        assert len(genome.conn_genes) == 3
        assert all(conn.enabled for conn in genome.conn_genes.values())
        assert all(-1.0 <= conn.weight <= 1.0 for conn in genome.conn_genes.values())
        assert genome.layers == 2

    def test_node_numbering(self, genome):
        assert [node.id for node in genome.input_nodes] == [0, 1]
        assert genome.bias_node_id == 2
        assert genome.node_genes[2].type == NodeType.BIAS
        assert [node.id for node in genome.output_nodes] == [3]
        assert genome.hidden_nodes == []

    def test_layers(self, genome):
        assert [genome.node_genes[i].layer for i in range(4)] == [0, 0, 0, 1]

    def test_connections_target_outputs(self, genome):
        assert {(c.node_in, c.node_out) for c in genome.conn_genes.values()} == {(0, 3), (1, 3), (2, 3)}

    def test_genomes_share_innovation_numbers(self, config, ledger, rng):
        genome1 = Genome(config, ledger, rng)
        genome2 = Genome(config, ledger, rng)
        assert set(genome1.conn_genes) == set(genome2.conn_genes) == {0, 1, 2}
        assert ledger.next_innovation == 3

    def test_weights_differ_between_genomes(self, config, ledger, rng):
        genome1 = Genome(config, ledger, rng)
        genome2 = Genome(config, ledger, rng)
        assert [c.weight for c in genome1.conn_genes.values()] != [c.weight for c in genome2.conn_genes.values()]

    def test_several_outputs(self, config, rng):
        config.num_inputs, config.num_outputs = 3, 2
        genome = Genome(config, InnovationLedger(3, 2), rng)
        assert len(genome.node_genes) == 6
        assert len(genome.conn_genes) == 8
        assert [node.id for node in genome.output_nodes] == [4, 5]


# ============================================================================
# Execution
# ============================================================================

class TestExecute:

    def test_wrong_number_of_inputs(self, genome):
        with pytest.raises(ArityError):
            genome.execute([1.0])
        with pytest.raises(ArityError):
            genome.execute([1.0, 2.0, 3.0])

    def test_arity_error_is_a_value_error(self, genome):
        with pytest.raises(ValueError):
            genome.execute([])

    def test_returns_one_finite_value_per_output(self, genome):
        outputs = genome.execute([0.3, -0.7])
        assert len(outputs) == 1
        assert all(math.isfinite(value) for value in outputs)

    def test_direct_connections(self, config):
        genome = Genome.from_dict(make_dict([
            {"innovation": 0, "from": 0, "to": 3, "weight":  0.5},
            {"innovation": 1, "from": 1, "to": 3, "weight": -0.5},
            {"innovation": 2, "from": 2, "to": 3, "weight":  0.25}]), config)

        assert genome.execute([1.0, 1.0])[0] == pytest.approx(sigmoid(0.25))
        assert genome.execute([1.0, 0.0])[0] == pytest.approx(sigmoid(0.75))

    def test_bias_input_is_one(self, config):
        genome = Genome.from_dict(make_dict([
            {"innovation": 2, "from": 2, "to": 3, "weight": 0.4}]), config)
        assert genome.execute([0.0, 0.0])[0] == pytest.approx(sigmoid(0.4))

    def test_hidden_node(self, config):
        genome = Genome.from_dict(make_dict([
            {"innovation": 0, "from": 0, "to": 4, "weight":  1.0},
            {"innovation": 1, "from": 4, "to": 3, "weight":  1.0},
            {"innovation": 2, "from": 2, "to": 3, "weight": -0.5}], hidden_nodes()), config)

        hidden = sigmoid(0.2)
        assert genome.execute([0.2, 9.0])[0] == pytest.approx(sigmoid(hidden - 0.5))

    def test_disabled_connections_carry_nothing(self, config):
        genome = Genome.from_dict(make_dict([
            {"innovation": 0, "from": 0, "to": 3, "weight": 1.0, "enabled": False},
            {"innovation": 2, "from": 2, "to": 3, "weight": 0.1}]), config)
        assert genome.execute([5.0, 0.0]) == genome.execute([-5.0, 0.0])

    def test_repeated_execution_is_stateless(self, genome):
        first  = genome.execute([0.5, 0.5])
        second = genome.execute([0.5, 0.5])
        assert first == second
        assert all(node.input_sum == 0.0 for node in genome.node_genes.values())


# ============================================================================
# Add-node mutation
# ============================================================================

class TestMutateAddNode:

    def test_fresh_genome(self, genome, ledger, rng):
        genome._mutate_add_node(ledger, rng)

        assert len(genome.node_genes) == 5
        assert len(genome.conn_genes) == 5
        assert len(enabled(genome)) == 4
        assert len([c for c in genome.conn_genes.values() if not c.enabled]) == 1
        assert genome.number_nodes_hidden == 1
        assert genome.layers == 3

    def test_new_node_and_connections(self, genome, ledger, rng):
        weights = {innov: conn.weight for innov, conn in genome.conn_genes.items()}
        genome._mutate_add_node(ledger, rng)

        split = next(c for c in genome.conn_genes.values() if not c.enabled)
        new_node = genome.hidden_nodes[0]
        assert new_node.id == 4
        assert new_node.layer == 1
        assert genome.node_genes[3].layer == 2

        conn_in  = genome.conn_genes[3]
        conn_out = genome.conn_genes[4]
        assert (conn_in.node_in, conn_in.node_out, conn_in.weight) == (split.node_in, 4, 1.0)
        assert (conn_out.node_in, conn_out.node_out) == (4, split.node_out)
        assert conn_out.weight == weights[split.innovation]

    def test_bias_connection_kept_when_it_is_the_only_one(self, config, ledger):
        for seed in range(20):
            genome = Genome(config, ledger, random.Random(seed))
            genome._mutate_add_node(ledger, random.Random(seed))
            split = next(c for c in genome.conn_genes.values() if not c.enabled)
            assert split.node_in != genome.bias_node_id

    def test_same_split_same_ids_across_genomes(self, config_1x1):
        ledger = InnovationLedger(1, 1)
        genome1 = Genome(config_1x1, ledger, random.Random(1))
        genome2 = Genome(config_1x1, ledger, random.Random(2))

        # The only candidate is the input => output connection
        genome1._mutate_add_node(ledger, random.Random(3))
        genome2._mutate_add_node(ledger, random.Random(4))

        assert set(genome1.node_genes) == set(genome2.node_genes) == {0, 1, 2, 3}
        assert set(genome1.conn_genes) == set(genome2.conn_genes) == {0, 1, 2, 3}
        for innov in (2, 3):
            c1, c2 = genome1.conn_genes[innov], genome2.conn_genes[innov]
            assert (c1.node_in, c1.node_out) == (c2.node_in, c2.node_out)

    def test_splitting_again_reuses_genes(self, config_1x1, rng):
        ledger = InnovationLedger(1, 1)
        genome = Genome(config_1x1, ledger, rng)
        genome._mutate_add_node(ledger, rng)

        genome.conn_genes[0].enabled = True
        genome.conn_genes[2].enabled = False
        genome.conn_genes[3].enabled = False
        genome._mutate_add_node(ledger, rng)

        assert len(genome.node_genes) == 4
        assert len(genome.conn_genes) == 4
        assert genome.conn_genes[0].enabled is False
        assert genome.conn_genes[2].enabled is True
        assert genome.conn_genes[3].enabled is True
        assert ledger.num_splits == 1

    def test_layer_inserted_when_needed(self, config):
        ledger = InnovationLedger(2, 1)
        genome = Genome.from_dict(make_dict([
            {"innovation": 0, "from": 0, "to": 4, "weight": 0.3, "enabled": False},
            {"innovation": 1, "from": 2, "to": 3, "weight": 0.2},
            {"innovation": 2, "from": 4, "to": 3, "weight": 0.7}], hidden_nodes()), config, ledger)

        # The only candidate is 4 => 3, from layer 1 to layer 2
        genome._mutate_add_node(ledger, random.Random(0))

        assert genome.layers == 4
        assert genome.node_genes[4].layer == 1
        assert genome.node_genes[5].layer == 2
        assert genome.node_genes[3].layer == 3
        genome.check_invariants()

    def test_fallback_gives_up_when_nothing_is_possible(self, config_1x1, rng):
        ledger = InnovationLedger(1, 1)
        genome = Genome(config_1x1, ledger, rng)
        genome.conn_genes[1].enabled = False
        before = genome.to_dict()

        # Fewer than 2 enabled connections, and the network is full
        genome._mutate_add_node(ledger, rng)

        assert genome.to_dict() == before


# ============================================================================
# Add-connection mutation
# ============================================================================

class TestMutateAddConnection:

    def test_fresh_genome_is_full(self, genome):
        assert genome._is_full()

    def test_full_genome_adds_a_node_instead(self, genome, ledger, rng):
        genome._mutate_add_connection(ledger, rng)
        assert genome.number_nodes_hidden == 1
        assert len(genome.conn_genes) == 5

    def test_connects_open_pair(self, genome, ledger, rng):
        genome._mutate_add_node(ledger, rng)
        split = next(c for c in genome.conn_genes.values() if not c.enabled)
        assert not genome._is_full()

        genome._mutate_add_connection(ledger, rng)

        assert len(genome.conn_genes) == 6
        new_conn = genome.conn_genes[5]
        assert new_conn.node_out == 4
        assert new_conn.node_in in {0, 1, 2} - {split.node_in}
        assert -1.0 <= new_conn.weight <= 1.0
        assert new_conn.enabled
        genome.check_invariants()

    def test_becomes_full(self, genome, ledger, rng):
        genome._mutate_add_node(ledger, rng)
        genome._mutate_add_connection(ledger, rng)
        genome._mutate_add_connection(ledger, rng)

        assert genome._is_full()
        pairs = [(c.node_in, c.node_out) for c in genome.conn_genes.values()]
        assert len(pairs) == len(set(pairs)) == 7

    def test_disabled_connections_count_as_present(self, genome):
        for conn in genome.conn_genes.values():
            conn.enabled = False
        assert genome._is_full()

    def test_new_connection_is_executed(self, genome, ledger, rng):
        genome._mutate_add_node(ledger, rng)
        genome._mutate_add_connection(ledger, rng)
        assert 5 in genome._outgoing[genome.conn_genes[5].node_in]


# ============================================================================
# Mutation dispatch
# ============================================================================

class TestMutate:

    def test_weight_mutation_only(self, genome, ledger, rng, config):
        config.node_add_probability = 0.0
        config.connection_add_probability = 0.0
        for _ in range(500):
            genome.mutate(ledger, rng)
            assert all(-1.0 <= conn.weight <= 1.0 for conn in genome.conn_genes.values())
        assert len(genome.conn_genes) == 3
        assert genome.number_nodes_hidden == 0

    def test_add_node_band(self, genome, ledger, rng, config):
        config.node_add_probability = 1.0
        config.connection_add_probability = 0.0
        genome.mutate(ledger, rng)
        assert genome.number_nodes_hidden == 1

    def test_add_connection_band(self, genome, ledger, rng, config):
        config.node_add_probability = 0.0
        config.connection_add_probability = 1.0
        genome.mutate(ledger, rng)        # full: falls back to adding a node
        genome.mutate(ledger, rng)
        assert genome.number_nodes_hidden == 1
        assert len(genome.conn_genes) == 6

    def test_many_mutations_keep_the_network_layered(self, genome, ledger, rng, config):
        config.node_add_probability = 0.2
        config.connection_add_probability = 0.3
        for _ in range(300):
            genome.mutate(ledger, rng)
            genome.check_invariants()
            outputs = genome.execute([rng.uniform(-1, 1), rng.uniform(-1, 1)])
            assert len(outputs) == 1 and math.isfinite(outputs[0])
        assert genome.number_nodes_hidden > 0


# ============================================================================
# Crossover
# ============================================================================

class TestCrossover:

    @pytest.fixture
    def parents(self, config, ledger, rng):
        fitter = Genome(config, ledger, rng)
        other  = Genome(config, ledger, rng)
        fitter._mutate_add_node(ledger, rng)
        other._mutate_add_node(ledger, rng)
        other._mutate_add_connection(ledger, rng)
        return fitter, other

    def test_child_has_fitter_parent_structure(self, parents, rng):
        fitter, other = parents
        child = fitter.crossover(other, rng)
        assert set(child.conn_genes) == set(fitter.conn_genes)
        assert set(child.node_genes) == set(fitter.node_genes)
        assert child.layers == fitter.layers
        child.check_invariants()

    def test_all_from_fitter(self, parents, rng, config):
        config.crossover_fitter_prob = 1.0
        fitter, other = parents
        assert fitter.crossover(other, rng).to_dict() == fitter.to_dict()

    def test_matching_from_other(self, parents, rng, config):
        config.crossover_fitter_prob = 0.0
        fitter, other = parents
        child = fitter.crossover(other, rng)
        for innov, conn in child.conn_genes.items():
            source = other if innov in other.conn_genes else fitter
            assert conn.weight == source.conn_genes[innov].weight
            assert conn.enabled == source.conn_genes[innov].enabled

    def test_no_shared_genes(self, parents, rng):
        fitter, other = parents
        child = fitter.crossover(other, rng)
        for innov, conn in child.conn_genes.items():
            assert conn is not fitter.conn_genes[innov]
            assert conn is not other.conn_genes.get(innov)
        for node_id, node in child.node_genes.items():
            assert node is not fitter.node_genes[node_id]

    def test_child_innovations_come_from_parents(self, config, ledger):
        rng = random.Random(7)
        config.node_add_probability = 0.3
        config.connection_add_probability = 0.3
        for _ in range(20):
            fitter = Genome(config, ledger, rng)
            other  = Genome(config, ledger, rng)
            for _ in range(5):
                fitter.mutate(ledger, rng)
                other.mutate(ledger, rng)
            child = fitter.crossover(other, rng)
            assert set(child.conn_genes) <= set(fitter.conn_genes)
            assert child.execute([0.1, 0.2])


# ============================================================================
# Distance
# ============================================================================

class TestDistance:

    def test_distance_to_self(self, genome):
        assert genome.distance(genome) == 0.0
        assert genome.distance(genome.copy()) == 0.0

    def test_weight_difference(self, genome):
        other = genome.copy()
        other.conn_genes[0].weight = genome.conn_genes[0].weight + 0.3
        # mean |dw| = 0.1, weighted by 0.5
        assert genome.distance(other) == pytest.approx(0.05)

    def test_excess_counts_reference_genes_only(self, genome, ledger, rng):
        grown = genome.copy()
        grown._mutate_add_node(ledger, rng)
        assert genome.distance(grown) == pytest.approx(2.0)
        assert grown.distance(genome) == pytest.approx(0.0)

    def test_no_matching_connections(self, config):
        genome1 = Genome.from_dict(make_dict([{"innovation": 0,  "from": 0, "to": 3, "weight": 0.5}]), config)
        genome2 = Genome.from_dict(make_dict([{"innovation": 10, "from": 1, "to": 3, "weight": 0.5}]), config)
        assert genome1.distance(genome2) == pytest.approx(1.0 + 0.5 * 1000.0)

    def test_no_connections_at_all(self, config):
        genome1 = Genome.from_dict(make_dict([]), config)
        genome2 = Genome.from_dict(make_dict([]), config)
        assert genome1.distance(genome2) == 0.0

    def test_large_genomes_are_normalized(self, config, ledger):
        rng = random.Random(11)
        config.node_add_probability = 0.5
        config.connection_add_probability = 0.5
        big = Genome(config, ledger, rng)
        while len(big.conn_genes) < 30:
            big.mutate(ledger, rng)
        small = Genome(config, ledger, rng)

        matching = [i for i in small.conn_genes if i in big.conn_genes]
        wdiff    = sum(abs(small.conn_genes[i].weight - big.conn_genes[i].weight) for i in matching) / len(matching)
        excess   = len(big.conn_genes) - len(matching)

        expected = excess / max(1, len(big.conn_genes) - 20) + 0.5 * wdiff
        assert big.distance(big) == 0.0
        assert small.distance(big) == pytest.approx(excess / 1 + 0.5 * wdiff)
        assert big.distance(small) == pytest.approx(0.5 * wdiff)
        assert expected < small.distance(big)


# ============================================================================
# Copy & serialization
# ============================================================================

class TestCopy:

    def test_copy_is_independent(self, genome, ledger, rng):
        clone = genome.copy()
        clone.conn_genes[0].weight = 0.123
        clone._mutate_add_node(ledger, rng)

        assert genome.conn_genes[0].weight != 0.123
        assert len(genome.conn_genes) == 3
        assert genome.layers == 2

    def test_copy_computes_the_same(self, genome):
        assert genome.copy().execute([0.4, 0.9]) == genome.execute([0.4, 0.9])


class TestSerialization:

    def test_roundtrip(self, genome, ledger, rng, config):
        genome._mutate_add_node(ledger, rng)
        restored = Genome.from_dict(genome.to_dict(), config)
        assert restored.to_dict() == genome.to_dict()
        assert restored.layers == genome.layers
        assert restored.execute([0.3, 0.6]) == genome.execute([0.3, 0.6])

    def test_node_types_follow_numbering(self, config):
        genome = Genome.from_dict(make_dict([], hidden_nodes()), config)
        assert genome.node_genes[2].type == NodeType.BIAS
        assert genome.node_genes[3].type == NodeType.OUTPUT
        assert genome.node_genes[4].type == NodeType.HIDDEN

    def test_registers_with_ledger(self, config):
        ledger = InnovationLedger(2, 1)
        Genome.from_dict(make_dict([{"innovation": 6, "from": 4, "to": 3, "weight": 0.5}], hidden_nodes()),
                         config, ledger)
        assert ledger.next_innovation == 7
        assert ledger.next_node_id == 5
        assert ledger.get_innovation_number(4, 3) == 6

    def test_registers_unconnected_hidden_nodes(self, config):
        ledger = InnovationLedger(2, 1)
        nodes  = hidden_nodes(hidden_layer=1, output_layer=3) + [{"id": 5, "layer": 2}]
        conns  = [{"innovation": 0, "from": 0, "to": 4, "weight": 0.5},
                  {"innovation": 1, "from": 4, "to": 3, "weight": 0.5},
                  {"innovation": 2, "from": 2, "to": 3, "weight": 0.5},
                  {"innovation": 3, "from": 1, "to": 3, "weight": 0.5}]
        Genome.from_dict(make_dict(conns, nodes), config, ledger)
        assert ledger.next_node_id == 6

    @pytest.mark.parametrize("seed", range(20))
    def test_add_node_after_load_never_reuses_node_ids(self, config, seed):
        ledger = InnovationLedger(2, 1)
        nodes  = hidden_nodes(hidden_layer=1, output_layer=3) + [{"id": 5, "layer": 2}]
        conns  = [{"innovation": 0, "from": 0, "to": 4, "weight": 0.5},
                  {"innovation": 1, "from": 4, "to": 3, "weight": 0.5},
                  {"innovation": 2, "from": 2, "to": 3, "weight": 0.5},
                  {"innovation": 3, "from": 1, "to": 3, "weight": 0.5}]
        genome = Genome.from_dict(make_dict(conns, nodes), config, ledger)
        genome._mutate_add_node(ledger, random.Random(seed))
        genome.check_invariants()
        assert len(genome.node_genes) == 7
        assert genome.node_genes[6].type == NodeType.HIDDEN

    def test_backward_connection_rejected(self, config):
        with pytest.raises(InvariantViolation):
            Genome.from_dict(make_dict([{"innovation": 0, "from": 3, "to": 0, "weight": 0.5}]), config)

    def test_same_layer_connection_rejected(self, config):
        with pytest.raises(InvariantViolation):
            Genome.from_dict(make_dict([{"innovation": 0, "from": 0, "to": 1, "weight": 0.5}]), config)

    def test_dangling_connection_rejected(self, config):
        with pytest.raises(InvariantViolation):
            Genome.from_dict(make_dict([{"innovation": 0, "from": 0, "to": 9, "weight": 0.5}]), config)

    def test_missing_output_rejected(self, config):
        nodes = [{"id": 0, "layer": 0}, {"id": 1, "layer": 0}, {"id": 2, "layer": 0}]
        with pytest.raises(InvariantViolation):
            Genome.from_dict(make_dict([], nodes), config)

    def test_output_in_layer_zero_rejected(self, config):
        nodes = [{"id": 0, "layer": 0}, {"id": 1, "layer": 0}, {"id": 2, "layer": 0}, {"id": 3, "layer": 0}]
        with pytest.raises(InvariantViolation):
            Genome.from_dict(make_dict([], nodes), config)

    def test_missing_field(self, config):
        with pytest.raises(KeyError):
            Genome.from_dict({"num_inputs": 2, "nodes": [], "connections": []}, config)


class TestStringRepresentation:

    def test_str(self, genome):
        s = str(genome)
        assert s.startswith("Nodes: [I0][I1][B2][O3,L1,SIG]")
        assert "Conns: [000,E,00=>03," in s
