"""
NEAT Node Gene Module.

This module implements the NodeGene class and NodeType enumeration
for the NEAT (NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    NodeType: Enumeration for node types (INPUT, BIAS, HIDDEN, OUTPUT)
    NodeGene: Gene encoding a single network node, with its evaluation state
"""

from enum   import Enum
from typing import Callable

from evoneat.activations import activations, activation_codes

class NodeType(Enum):
    """
    Nodes come in four types: input, bias, hidden, output.
    """
    INPUT  = "I"
    BIAS   = "B"
    HIDDEN = "H"
    OUTPUT = "O"

class NodeGene:
    """
    A gene describing a node in a Neural Network.

    Besides its identity, a node gene carries its layer and the transient
    state used while the network is being evaluated: the sum of the signals
    received so far ('input_sum') and the last computed 'output'.

    Nodes in layer 0 (the inputs and the bias node) pass their input through
    unchanged. Every other node computes: activation(input_sum).

    Public Attributes:
        id:              Unique identifier for this node
        type:            Type of node (INPUT, BIAS, HIDDEN or OUTPUT)
        layer:           Position of the node in the layered network
        activation_name: Name of the activation function (e.g., 'sigmoid')
        input_sum:       Accumulated input of the current evaluation
        output:          Output of the current evaluation

    Public Methods:
        add_input(value): Accumulate a signal
        compute_output(): Compute and store the node output
        reset():          Clear the evaluation state
        copy():           Create an independent copy with cleared evaluation state
    """

    def __init__(self,
                 node_id        : int,
                 node_type      : NodeType,
                 layer          : int,
                 activation_name: str = 'sigmoid'):
        """
        Parameters:
            node_id:         Unique identifier for this node
            node_type:       Type of node
            layer:           Layer index (0 for input and bias nodes)
            activation_name: Name of the activation function used outside layer 0
        """
        self.id             : int      = node_id
        self.type           : NodeType = node_type
        self.layer          : int      = layer
        self.activation_name: str      = activation_name

        self.input_sum: float = 0.0
        self.output   : float = 0.0

    @property
    def activation(self) -> Callable[[float], float]:
        return activations[self.activation_name]

    def add_input(self, value: float) -> None:
        self.input_sum += value

    def compute_output(self) -> float:
        """
        Compute the output of this node from the input accumulated so far.
        The result is saved internally in 'self.output' and returned.
        """
        # layer 0 nodes always output their input, un-modified
        if self.layer == 0:
            self.output = self.input_sum
        else:
            self.output = float(self.activation(self.input_sum))
        return self.output

    def reset(self) -> None:
        self.input_sum = 0.0
        self.output    = 0.0

    def copy(self) -> 'NodeGene':
        return NodeGene(self.id, self.type, self.layer, self.activation_name)

    def __repr__(self):
        return (f"NodeGene(node_id={self.id:+03d}, node_type=NodeType.{self.type.name:6s},"
                f"layer={self.layer}, activation={self.activation_name!r})")

    def __str__(self):
        if self.layer == 0:
            return f"[{self.type.value}{self.id}]"
        else:
            act_code = activation_codes.get(self.activation_name, "???")
            return f"[{self.type.value}{self.id},L{self.layer},{act_code}]"
