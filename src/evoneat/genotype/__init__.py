"""
NEAT Genotype Package

This package implements the genotype representation for the NEAT (NeuroEvolution of
Augmenting Topologies) algorithm. It provides classes for encoding layered
feed-forward neural network structures and weights at the genetic level.

The NEAT genotype consists of two types of genes:
- Node genes:       Encode individual neurons with their layer and activation
- Connection genes: Encode weighted connections between neurons with innovation numbers

Modules:
    node_gene:         NodeType enumeration and NodeGene class
    connection_gene:   ConnectionGene class
    genome:            Genome class
    innovation_ledger: InnovationLedger class

Exported Classes:
    NodeType:         Enumeration for node types (INPUT, BIAS, HIDDEN, OUTPUT)
    NodeGene:         Gene encoding a single network node
    ConnectionGene:   Gene encoding a weighted connection between nodes
    Genome:           Complete genome representing a neural network
    InnovationLedger: Per-population registry of innovation numbers and node IDs
"""

from evoneat.genotype.connection_gene   import ConnectionGene
from evoneat.genotype.genome            import Genome
from evoneat.genotype.innovation_ledger import InnovationLedger
from evoneat.genotype.node_gene         import NodeType, NodeGene

__all__ = ['ConnectionGene',
           'Genome',
           'InnovationLedger',
           'NodeGene',
           'NodeType']
