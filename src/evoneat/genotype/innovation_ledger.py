"""
NEAT Innovation Ledger Module

This module implements the InnovationLedger class for the
NEAT (NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    InnovationLedger: Population-wide registry of innovation numbers and node IDs
"""

import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from evoneat.genotype.connection_gene import ConnectionGene

class InnovationLedger:
    """
    Tracks structural changes across all genomes of one population.
    Ensures the same structural change gets the same innovation
    number (for connections) and ID (for nodes).

    Each Population owns its own ledger, so independent populations never
    interfere. Genomes may be mutated concurrently: every lookup-or-allocate
    runs under a single lock, hence two genomes performing the same
    structural mutation at the same time still receive the same IDs.

    Public Properties:
        next_node_id:    ID the next new node will receive
        next_innovation: innovation number the next new connection will receive
        num_connections: number of distinct connections ever recorded
        num_splits:      number of distinct connection splits ever recorded

    Public Methods:
        get_innovation_number(node_in, node_out): connection ID for given endpoints
        get_split_IDs(conn_to_split):             IDs resulting from splitting a connection
        register_node(node_id):                   record an existing node
        register_connection(node_in, node_out, innovation): record an existing connection
    """

    def __init__(self, num_inputs: int, num_outputs: int):
        """
        Parameters:
            num_inputs:  number of input nodes (the bias node comes on top of these)
            num_outputs: number of output nodes
        """
        self._lock = threading.RLock()

        # Counters. Node IDs [0, num_inputs + num_outputs] are taken by the
        # input nodes, the bias node and the output nodes.
        self._next_innovation_number: int = 0
        self._next_node_id          : int = num_inputs + num_outputs + 1

        # For each connection ever created, map its endpoints to its innovation number
        self._innovation_numbers: dict[tuple[int, int], int] = {}   # (node_in, node_out) -> innovation number

        # When a connection is split, tracks what node was created and
        # what innovation numbers were assigned to the new connections.
        self._split_IDs: dict[int, tuple[int, int, int]] = {}   # split innovation -> (new_node_id, innov1, innov2)

    @property
    def next_node_id(self) -> int:
        return self._next_node_id

    @property
    def next_innovation(self) -> int:
        return self._next_innovation_number

    @property
    def num_connections(self) -> int:
        return len(self._innovation_numbers)

    @property
    def num_splits(self) -> int:
        return len(self._split_IDs)

    def get_innovation_number(self, node_in: int, node_out: int) -> int:
        """
        Get innovation number for a connection, identified by its endpoints.
        Returns existing innovation number if this connection was created
        before, otherwise assigns a new innovation number.

        Parameters:
            node_in:  node ID for the 'from' end of the connection
            node_out: node ID for the 'to'   end of the connection

        Returns:
            connection ID (a.k.a. innovation number)
        """
        key = (node_in, node_out)
        with self._lock:

            # This is a new connection
            if key not in self._innovation_numbers:
                self._innovation_numbers[key] = self._next_innovation_number
                self._next_innovation_number += 1

            return self._innovation_numbers[key]

    def get_split_IDs(self, conn_to_split: 'ConnectionGene') -> tuple[int, int, int]:
        """
        Get node ID and innovation numbers for splitting a connection.
        If this exact connection has been split before, in any genome,
        returns the same values, otherwise creates new ones.

        Parameters:
            conn_to_split: the connection being split

        Returns:
            3-tuple: (new_node_id, innovation1, innovation2)
            innovation1 is for the connection from the 'from' node of 'conn_to_split' to the new node
            innovation2 is for the connection from the new node to the 'to' node of 'conn_to_split'
        """
        key = conn_to_split.innovation
        with self._lock:

            # This connection hasn't been split before
            if key not in self._split_IDs:

                # Generate the ID for the new node
                new_node_id = self._next_node_id
                self._next_node_id += 1

                # First new connection: split source -> new node
                innov1 = self.get_innovation_number(conn_to_split.node_in, new_node_id)

                # Second new connection: new node -> split destination
                innov2 = self.get_innovation_number(new_node_id, conn_to_split.node_out)

                self._split_IDs[key] = (new_node_id, innov1, innov2)

            return self._split_IDs[key]

    def register_node(self, node_id: int) -> None:
        """
        Record a node created outside the ledger, so its ID is never handed out for a split.
        """
        with self._lock:
            self._next_node_id = max(self._next_node_id, node_id + 1)

    def register_connection(self, node_in: int, node_out: int, innovation: int) -> None:
        """
        Record a connection created outside the ledger (e.g. a genome loaded from a dictionary).
        Counters are advanced past the recorded IDs so they are never handed out again.

        Raises:
            ValueError: if the endpoints or the innovation number are already
                        recorded with a different meaning
        """
        key = (node_in, node_out)
        with self._lock:
            known = self._innovation_numbers.get(key)
            if known is not None and known != innovation:
                raise ValueError(f"Connection {node_in}->{node_out} is already recorded "
                                 f"with innovation {known}, not {innovation}")
            if known is None and innovation in self._innovation_numbers.values():
                raise ValueError(f"Innovation {innovation} is already recorded for other endpoints")

            self._innovation_numbers[key] = innovation
            self._next_innovation_number = max(self._next_innovation_number, innovation + 1)
            self._next_node_id = max(self._next_node_id, node_in + 1, node_out + 1)

    def __getstate__(self):
        state = self.__dict__.copy()
        del state['_lock']
        return state

    def __setstate__(self, state):
        self.__dict__.update(state)
        self._lock = threading.RLock()

    def __repr__(self):
        return (f"InnovationLedger(next_node_id={self._next_node_id}, "
                f"next_innovation={self._next_innovation_number}, splits={len(self._split_IDs)})")
