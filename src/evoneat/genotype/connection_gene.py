"""
NEAT Connection Gene Module

This module implements the ConnectionGene class for the
NEAT (NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    ConnectionGene: Gene encoding a weighted connection between nodes
"""

import numpy as np
import random
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from evoneat.run.config import Config

class ConnectionGene:
    """
    A gene describing a weighted connection between two nodes in a Neural Network.

    Each connection gene represents a directed edge in the neural network graph,
    connecting a source node to a destination node with an associated weight.
    Connection genes are uniquely identified by their innovation number, which
    serves as a historical marker enabling proper gene alignment during crossover.

    The endpoints are node IDs, resolved through the genome owning the gene;
    a gene never holds a reference to a node object. The identity of a gene
    (innovation number and endpoints) never changes after creation.

    Connections can be enabled or disabled. Splitting a connection with a new
    node disables it; a weight mutation may enable it again.

    Public Attributes:
        node_in:    ID of the source node
        node_out:   ID of the destination node
        weight:     Weight of the connection
        enabled:    Whether this connection is active in the network
        innovation: Innovation number uniquely identifying this connection in the population

    Public Methods:
        mutate(rng): Stochastically mutate the connection weight or re-enable it
        copy():      Create an independent copy of this gene
    """

    def __init__(self,
                 node_in   : int,
                 node_out  : int,
                 weight    : float,
                 innovation: int,
                 config    : 'Config',
                 enabled   : bool = True):
        """
        Initialize a connection gene.

        Parameters:
            node_in:    ID of the source node
            node_out:   ID of the destination node
            weight:     Weight of the connection
            innovation: Number uniquely identifying this connection
            config:     Stores configuration parameters
            enabled:    Whether this connection is active in the network
        """
        self.node_in   : int    = node_in
        self.node_out  : int    = node_out
        self.weight    : float  = weight
        self.enabled   : bool   = enabled
        self.innovation: int    = innovation
        self._config   : 'Config' = config

    def mutate(self, rng: random.Random) -> None:
        """
        Stochastically mutate the (gene describing the) connection.

        A single random draw selects one of the following outcomes:
         + replacing the weight by a new uniformly drawn value
         + perturbing the weight by gaussian noise, clipped to the allowed range
         + re-enabling the connection, if it is currently disabled
         + nothing

        Parameters:
            rng: source of randomness
        """
        replace_prob  = self._config.weight_replace_prob    # prob of replacing  the 'weight'
        perturb_prob  = self._config.weight_perturb_prob    # prob of perturbing the 'weight'
        reenable_prob = self._config.weight_reenable_prob   # prob of re-enabling the connection

        r = rng.random()
        if r < replace_prob:
            self.weight = rng.uniform(self._config.min_weight, self._config.max_weight)

        elif r < replace_prob + perturb_prob:
            new_weight  = self.weight + rng.gauss(0, self._config.weight_perturb_strength)
            self.weight = float(np.clip(new_weight, self._config.min_weight, self._config.max_weight))

        elif r < replace_prob + perturb_prob + reenable_prob:
            self.enabled = True

    def copy(self) -> 'ConnectionGene':
        return ConnectionGene(self.node_in, self.node_out, self.weight,
                              self.innovation, self._config, self.enabled)

    def __repr__(self):
        return (f"ConnectionGene(node_in={self.node_in:03d}, node_out={self.node_out:03d},"
                f"weight={self.weight:+.6f}, enabled={self.enabled}, innovation={self.innovation:03d})")

    def __str__(self):
        s  = f"[{self.innovation:03d},{'E' if self.enabled else 'D'},"
        s += f"{self.node_in:02d}=>{self.node_out:02d},{self.weight:+.02f}]"
        return s
