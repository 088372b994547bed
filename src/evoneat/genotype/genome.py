"""
NEAT Genome Module

This module implements the Genome class for the NEAT
(NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    Genome: Complete genome representing a layered feed-forward neural network
"""

import logging
import random
from typing import TYPE_CHECKING

from evoneat.errors                      import ArityError, InvariantViolation
from evoneat.genotype.connection_gene    import ConnectionGene
from evoneat.genotype.innovation_ledger  import InnovationLedger
from evoneat.genotype.node_gene          import NodeType, NodeGene

if TYPE_CHECKING:
    from evoneat.run.config import Config

logger = logging.getLogger(__name__)

class Genome:
    """
    A NEAT genome representing a neural network as a collection of node and connection genes.

    The genome is both the genotype and the executable network: its nodes are
    arranged in layers, every connection goes from a lower layer to a strictly
    higher one, and evaluating the network means visiting the nodes layer by
    layer, each one pushing its output along its enabled outgoing connections.

    Nodes and connections live in two per-genome arenas keyed by ID; connections
    refer to their endpoints by node ID only. Copying a genome therefore copies
    both arenas and rebuilds the indexes, and no gene is ever shared between
    two genomes.

    A new genome has every input (plus the bias node) connected to every output,
    with random weights in [min_weight, max_weight]. Via mutation, genomes can
    grow by adding nodes and connections.

    Node numbering convention:
        - Input nodes:  [0, num_inputs)
        - Bias node:    num_inputs
        - Output nodes: [num_inputs + 1, num_inputs + num_outputs + 1)
        - Hidden nodes: [num_inputs + num_outputs + 1, ...)

    Attributes:
        node_genes: Dictionary mapping node IDs to NodeGene objects
        conn_genes: Dictionary mapping innovation numbers to ConnectionGene objects
        layers:     Number of layers in the network (at least 2)

    Public Properties:
        num_inputs, num_outputs, bias_node_id
        input_nodes, output_nodes, hidden_nodes
        number_nodes_hidden, number_connections_enabled

    Public Methods:
        execute(inputs):              Evaluate the network on one input vector
        mutate(ledger, rng):          Apply exactly one random mutation
        crossover(other, rng):        Create an offspring (self being the fitter parent)
        distance(reference):          Compatibility distance to a species reference
        copy():                       Create an independent copy
        check_invariants():           Verify the graph is strictly layered
        to_dict() / from_dict(d):     Dictionary (de)serialization
    """

    def __init__(self, config: 'Config', ledger: InnovationLedger, rng: random.Random | None = None):
        """
        Initialize a fully connected minimal Genome.

        The number of input and output nodes is retrieved from the Config object.
        Connection IDs are obtained from the ledger, so that all genomes of the
        population share the same innovation numbers for the initial connections.

        Parameters:
            config: Stores configuration parameters
            ledger: Innovation ledger of the population
            rng:    Source of randomness for the initial weights
        """
        rng = rng or random.Random()

        self._config     = config
        self._num_inputs : int = config.num_inputs
        self._num_outputs: int = config.num_outputs
        self.layers      : int = 2

        self.node_genes: dict[int, NodeGene]       = {}  # node ID => node gene
        self.conn_genes: dict[int, ConnectionGene] = {}  # innovation number => connection gene

        # Input nodes and the bias node sit in layer 0
        for node_id in range(self._num_inputs):
            self.node_genes[node_id] = NodeGene(node_id, NodeType.INPUT, 0)
        self.node_genes[self.bias_node_id] = NodeGene(self.bias_node_id, NodeType.BIAS, 0)

        # Output nodes sit in the last layer
        for node_id in self._output_ids:
            self.node_genes[node_id] = NodeGene(node_id, NodeType.OUTPUT, 1, config.activation)

        # Connect every input (and the bias) to every output
        for node_in in range(self._num_inputs + 1):
            for node_out in self._output_ids:
                innovation = ledger.get_innovation_number(node_in, node_out)
                weight     = rng.uniform(config.min_weight, config.max_weight)
                self.conn_genes[innovation] = ConnectionGene(node_in, node_out, weight, innovation, config)

        self._rebuild_network()

    @classmethod
    def from_dict(cls, genome_dict: dict, config: 'Config', ledger: InnovationLedger | None = None) -> 'Genome':
        """
        Create a Genome from a dictionary description.

        Dictionary format:
            {
                "num_inputs":  2,
                "num_outputs": 1,
                "nodes": [
                    {"id": 0, "layer": 0},
                    {"id": 1, "layer": 0},
                    {"id": 2, "layer": 0},      # bias
                    {"id": 3, "layer": 2},      # output
                    {"id": 4, "layer": 1}       # hidden
                ],
                "connections": [
                    {"innovation": 0, "from": 0, "to": 4, "weight":  0.5, "enabled": true},
                    {"innovation": 1, "from": 4, "to": 3, "weight": -0.3, "enabled": true},
                    {"innovation": 2, "from": 2, "to": 3, "weight":  0.8}
                ]
            }

        Node types follow from the node numbering convention. 'enabled' defaults to true.

        Parameters:
            genome_dict: Dictionary describing the genome structure
            config:      Stores configuration parameters (its dimensions are not used)
            ledger:      If given, the nodes and connections are registered with it, so
                         that later mutations never reuse their IDs or innovation numbers

        Returns:
            A new Genome object with the specified structure

        Raises:
            InvariantViolation: if input/bias/output nodes are missing, a connection
                                references a missing node, or a connection does not
                                go from a lower to a higher layer
            KeyError:           if required fields are missing from the dictionary
        """
        num_inputs  = genome_dict["num_inputs"]
        num_outputs = genome_dict["num_outputs"]

        genome = cls.__new__(cls)
        genome._config      = config
        genome._num_inputs  = num_inputs
        genome._num_outputs = num_outputs
        genome.node_genes   = {}
        genome.conn_genes   = {}

        for node_data in genome_dict["nodes"]:
            ID    = node_data["id"]
            layer = node_data["layer"]
            if ID < num_inputs:
                node_type = NodeType.INPUT
            elif ID == num_inputs:
                node_type = NodeType.BIAS
            elif ID <= num_inputs + num_outputs:
                node_type = NodeType.OUTPUT
            else:
                node_type = NodeType.HIDDEN
            genome.node_genes[ID] = NodeGene(ID, node_type, layer, node_data.get("activation", config.activation))

        required_ids = set(range(num_inputs + num_outputs + 1))
        missing_ids  = required_ids - set(genome.node_genes)
        if missing_ids:
            raise InvariantViolation(f"Input, bias or output nodes missing: {sorted(missing_ids)}")

        for conn_data in genome_dict["connections"]:
            innovation = conn_data["innovation"]
            conn = ConnectionGene(conn_data["from"], conn_data["to"], conn_data["weight"],
                                  innovation, config, conn_data.get("enabled", True))
            genome.conn_genes[innovation] = conn

        genome.layers = max(node.layer for node in genome.node_genes.values()) + 1
        genome._rebuild_network()

        if ledger is not None:
            # Unconnected hidden nodes must reserve their IDs too
            for node_id in genome.node_genes:
                ledger.register_node(node_id)
            for conn in genome.conn_genes.values():
                ledger.register_connection(conn.node_in, conn.node_out, conn.innovation)
        return genome

    def to_dict(self) -> dict:
        """
        Convert the Genome to a dictionary description (see 'from_dict()' for the format).
        """
        return {
            "num_inputs" : self._num_inputs,
            "num_outputs": self._num_outputs,
            "nodes"      : [{"id": node.id, "layer": node.layer, "activation": node.activation_name}
                            for node in self.node_genes.values()],
            "connections": [{"innovation": conn.innovation,
                             "from"      : conn.node_in,
                             "to"        : conn.node_out,
                             "weight"    : conn.weight,
                             "enabled"   : conn.enabled}
                            for conn in self.conn_genes.values()],
        }

    @property
    def num_inputs(self) -> int:
        return self._num_inputs

    @property
    def num_outputs(self) -> int:
        return self._num_outputs

    @property
    def bias_node_id(self) -> int:
        return self._num_inputs

    @property
    def _output_ids(self) -> range:
        return range(self._num_inputs + 1, self._num_inputs + self._num_outputs + 1)

    @property
    def input_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.INPUT]

    @property
    def output_nodes(self) -> list[NodeGene]:
        return [self.node_genes[node_id] for node_id in self._output_ids]

    @property
    def hidden_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.HIDDEN]

    @property
    def number_nodes_hidden(self) -> int:
        return len(self.hidden_nodes)

    @property
    def number_connections_enabled(self) -> int:
        return sum(1 for conn in self.conn_genes.values() if conn.enabled)

    # ------------------------------------------------------------------
    # Network evaluation
    # ------------------------------------------------------------------

    def execute(self, inputs) -> list[float]:
        """
        Perform a complete forward pass through the network.

        Nodes are visited in order of non-decreasing layer. Since every
        connection goes to a strictly higher layer, all the inputs of a node
        have been accumulated by the time the node is visited.

        Parameters:
            inputs: the network inputs (as many as input nodes)

        Returns:
            the network outputs (as many as output nodes)

        Raises:
            ArityError: if the number of inputs does not match the number of input nodes
        """
        if len(inputs) != self._num_inputs:
            raise ArityError(f"Expected {self._num_inputs} inputs, got {len(inputs)}")

        try:
            for node_id in range(self._num_inputs):
                self.node_genes[node_id].add_input(float(inputs[node_id]))
            self.node_genes[self.bias_node_id].input_sum = 1.0

            for node_id in self._network:
                output = self.node_genes[node_id].compute_output()
                for innovation in self._outgoing[node_id]:
                    conn = self.conn_genes[innovation]
                    if conn.enabled:
                        self.node_genes[conn.node_out].add_input(output * conn.weight)

            return [self.node_genes[node_id].output for node_id in self._output_ids]

        finally:
            # Always leave the network ready for the next evaluation
            for node in self.node_genes.values():
                node.reset()

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def mutate(self, ledger: InnovationLedger, rng: random.Random) -> None:
        """
        Apply exactly one mutation to the genome.

        One random draw selects the mutation class:
          + add a node        (probability 'node_add_probability')
          + add a connection  (probability 'connection_add_probability')
          + mutate the weight of one random connection (all remaining probability)

        Structural mutations that cannot find a target fall back to the other
        structural mutation instead of failing.

        Parameters:
            ledger: Innovation ledger shared by the whole population
            rng:    Source of randomness
        """
        r = rng.random()
        if r < self._config.node_add_probability:
            self._mutate_add_node(ledger, rng)
        elif r < self._config.node_add_probability + self._config.connection_add_probability:
            self._mutate_add_connection(ledger, rng)
        else:
            self._mutate_weight(rng)

    def _mutate_weight(self, rng: random.Random) -> None:
        """
        Mutate one connection, chosen uniformly at random.
        """
        if not self.conn_genes:
            return
        conn = rng.choice(list(self.conn_genes.values()))
        conn.mutate(rng)

    def _mutate_add_node(self, ledger: InnovationLedger, rng: random.Random, allow_fallback: bool = True) -> None:
        """
        Split an existing enabled connection by adding a new node.

        The connection being split is disabled and replaced by two connections:
        'from' -> new node (weight 1.0) and new node -> 'to' (weight of the split
        connection). The new node goes into the layer right after the 'from'
        node; if that layer is the one of the 'to' node, a new layer is inserted.

        The IDs of the new node and connections come from the ledger, keyed by
        the innovation number of the split connection: splitting the same
        connection in two genomes yields the same IDs.

        Parameters:
            ledger:         Innovation ledger shared by the whole population
            rng:            Source of randomness
            allow_fallback: whether to try adding a connection when no connection can be split
        """
        enabled_conns = [conn for conn in self.conn_genes.values() if conn.enabled]

        # The bias node keeps its last enabled outgoing connection
        bias_conns = [conn for conn in enabled_conns if conn.node_in == self.bias_node_id]
        candidates = [conn for conn in enabled_conns if len(bias_conns) > 1 or conn not in bias_conns]

        if len(enabled_conns) < 2 or not candidates:
            if allow_fallback:
                logger.debug("no connection can be split, adding a connection instead")
                self._mutate_add_connection(ledger, rng, allow_fallback=False)
            return

        split_conn = rng.choice(candidates)
        split_conn.enabled = False

        # From the ledger, get the ID for the new node and the
        # innovation numbers (connection IDs) for the two new connections
        new_node_id, innov1, innov2 = ledger.get_split_IDs(split_conn)

        # The same connection may have been split before in this genome (it
        # was re-enabled since). Reuse the genes of that split in that case.
        if new_node_id not in self.node_genes:
            from_layer = self.node_genes[split_conn.node_in].layer
            to_layer   = self.node_genes[split_conn.node_out].layer
            new_layer  = from_layer + 1
            if new_layer == to_layer:
                self._insert_layer(new_layer)
            self.node_genes[new_node_id] = NodeGene(new_node_id, NodeType.HIDDEN, new_layer, self._config.activation)

        if innov1 in self.conn_genes:
            self.conn_genes[innov1].enabled = True
        else:
            self.conn_genes[innov1] = ConnectionGene(split_conn.node_in, new_node_id, 1.0, innov1, self._config)

        if innov2 in self.conn_genes:
            self.conn_genes[innov2].enabled = True
        else:
            self.conn_genes[innov2] = ConnectionGene(new_node_id, split_conn.node_out, split_conn.weight,
                                                     innov2, self._config)

        self._rebuild_network()

    def _insert_layer(self, layer: int) -> None:
        """
        Shift every node at or above the given layer up by one, freeing that layer.
        """
        for node in self.node_genes.values():
            if node.layer >= layer:
                node.layer += 1
        self.layers += 1

    def _mutate_add_connection(self, ledger: InnovationLedger, rng: random.Random, allow_fallback: bool = True) -> None:
        """
        Add a new connection between two existing nodes.

        The two ends are selected at random, however we cannot add a connection:
         + between two nodes in the same layer
         + between two nodes already connected (the connection may be disabled)
        The connection always goes from the lower layer to the higher one.

        Random pairs are tried 'max_mutation_attempts' times; after that, all
        the pairs that can still be connected are listed and one is picked.
        If the network is already full, a node is added instead.

        Parameters:
            ledger:         Innovation ledger shared by the whole population
            rng:            Source of randomness
            allow_fallback: whether to try adding a node when the network is full
        """
        if self._is_full():
            if allow_fallback:
                logger.debug("network is full, adding a node instead")
                self._mutate_add_node(ledger, rng, allow_fallback=False)
            return

        connected = self._connected_pairs()
        node_ids  = list(self.node_genes.keys())

        pair = None
        for _ in range(self._config.max_mutation_attempts):
            node_a = self.node_genes[rng.choice(node_ids)]
            node_b = self.node_genes[rng.choice(node_ids)]
            if node_a.layer == node_b.layer:
                continue
            if node_a.layer > node_b.layer:
                node_a, node_b = node_b, node_a
            if (node_a.id, node_b.id) in connected:
                continue
            pair = (node_a.id, node_b.id)
            break

        # Out of attempts: pick among the pairs that can still be connected
        if pair is None:
            open_pairs = [(a.id, b.id)
                          for a in self.node_genes.values()
                          for b in self.node_genes.values()
                          if a.layer < b.layer and (a.id, b.id) not in connected]
            pair = rng.choice(open_pairs)

        node_in, node_out = pair
        innovation = ledger.get_innovation_number(node_in, node_out)
        weight     = rng.uniform(self._config.min_weight, self._config.max_weight)
        self.conn_genes[innovation] = ConnectionGene(node_in, node_out, weight, innovation, self._config)
        self._outgoing[node_in].append(innovation)

    def _connected_pairs(self) -> set[tuple[int, int]]:
        return {(conn.node_in, conn.node_out) for conn in self.conn_genes.values()}

    def _is_full(self) -> bool:
        """
        Whether every node already has an outgoing connection (enabled or not)
        to every node in all strictly higher layers.
        """
        connected = self._connected_pairs()
        for a in self.node_genes.values():
            for b in self.node_genes.values():
                if a.layer < b.layer and (a.id, b.id) not in connected:
                    return False
        return True

    # ------------------------------------------------------------------
    # Reproduction & speciation
    # ------------------------------------------------------------------

    def crossover(self, other: 'Genome', rng: random.Random) -> 'Genome':
        """
        Perform NEAT crossover between this genome (the fitter parent) and another.

        The offspring inherits all nodes of the fitter parent. Connections:
        - matching (same innovation number in both parents): inherited from the
          fitter parent with probability 'crossover_fitter_prob', else from 'other'
        - disjoint/excess (only in the fitter parent): inherited from the fitter parent
        Connections only present in 'other' are never inherited.

        Parameters:
            other: the less fit parent
            rng:   Source of randomness

        Returns:
            New offspring genome, sharing no gene with either parent
        """
        offspring = Genome.__new__(Genome)
        offspring._config      = self._config
        offspring._num_inputs  = self._num_inputs
        offspring._num_outputs = self._num_outputs
        offspring.layers       = self.layers
        offspring.node_genes   = {node_id: node.copy() for node_id, node in self.node_genes.items()}
        offspring.conn_genes   = {}

        for innov, conn in self.conn_genes.items():
            if innov in other.conn_genes and rng.random() >= self._config.crossover_fitter_prob:
                conn = other.conn_genes[innov]
            offspring.conn_genes[innov] = conn.copy()

        offspring._rebuild_network()
        return offspring

    def distance(self, reference: 'Genome') -> float:
        """
        Calculate the compatibility distance between this genome and a species reference.

           distance = c1 * E / max(1, N - offset) + c2 * W

        Where:
        - E = number of connections of 'reference' with no matching innovation in this genome
        - N = number of connections of this genome
        - W = mean absolute weight difference of matching connections
              ('distance_no_match' if there is no matching connection)
        - c1, c2, offset = configuration parameters

        Parameters:
            reference: the genome of the species reference

        Returns:
            the compatibility distance (0 for a genome compared with itself)
        """
        if not self.conn_genes and not reference.conn_genes:
            return 0.0

        num_excess = sum(1 for innov in reference.conn_genes if innov not in self.conn_genes)

        matching = [innov for innov in self.conn_genes if innov in reference.conn_genes]
        if matching:
            weight_diff = sum(abs(self.conn_genes[i].weight - reference.conn_genes[i].weight) for i in matching)
            avg_weight_diff = weight_diff / len(matching)
        else:
            avg_weight_diff = self._config.distance_no_match

        normalizer = max(1, len(self.conn_genes) - self._config.distance_size_offset)
        return (self._config.distance_excess_coeff * num_excess / normalizer +
                self._config.distance_weight_coeff * avg_weight_diff)

    def copy(self) -> 'Genome':
        """
        Create an independent copy of this genome.
        """
        clone = Genome.__new__(Genome)
        clone._config      = self._config
        clone._num_inputs  = self._num_inputs
        clone._num_outputs = self._num_outputs
        clone.layers       = self.layers
        clone.node_genes   = {node_id: node.copy() for node_id, node in self.node_genes.items()}
        clone.conn_genes   = {innov: conn.copy() for innov, conn in self.conn_genes.items()}
        clone._rebuild_network()
        return clone

    # ------------------------------------------------------------------
    # Indexes & invariants
    # ------------------------------------------------------------------

    def check_invariants(self) -> None:
        """
        Verify that every connection joins two nodes of this genome and goes
        from a lower layer to a strictly higher one.

        Raises:
            InvariantViolation: if the genome is not a strictly layered feed-forward graph
        """
        for conn in self.conn_genes.values():
            if conn.node_in not in self.node_genes:
                raise InvariantViolation(f"Connection {conn.innovation} references non-existent source node {conn.node_in}")
            if conn.node_out not in self.node_genes:
                raise InvariantViolation(f"Connection {conn.innovation} references non-existent destination node {conn.node_out}")

            layer_in  = self.node_genes[conn.node_in].layer
            layer_out = self.node_genes[conn.node_out].layer
            if layer_in >= layer_out:
                raise InvariantViolation(f"Connection {conn.innovation} goes from layer {layer_in} "
                                         f"to layer {layer_out} ({conn.node_in} => {conn.node_out})")

        for node in self.node_genes.values():
            if (node.layer == 0) != (node.type in (NodeType.INPUT, NodeType.BIAS)):
                raise InvariantViolation(f"Node {node.id} of type {node.type.name} is in layer {node.layer}")

    def _rebuild_network(self) -> None:
        """
        Rebuild the outgoing connection index and the execution order
        (node IDs sorted by layer) after a structural change.
        """
        self.check_invariants()

        self._outgoing: dict[int, list[int]] = {node_id: [] for node_id in self.node_genes}
        for conn in self.conn_genes.values():
            self._outgoing[conn.node_in].append(conn.innovation)

        self._network: list[int] = sorted(self.node_genes, key=lambda node_id: self.node_genes[node_id].layer)

    def __str__(self):
        node_genes_str  = ''.join(str(node) for node in self.input_nodes)
        node_genes_str += str(self.node_genes[self.bias_node_id])
        node_genes_str += ''.join(str(node) for node in self.hidden_nodes)
        node_genes_str += ''.join(str(node) for node in self.output_nodes)
        conn_genes_str  = ''.join(str(conn) for conn in self.conn_genes.values())
        return f"Nodes: {node_genes_str}\nConns: {conn_genes_str}"
