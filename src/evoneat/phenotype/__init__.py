"""
NEAT Phenotype Package

This package implements the phenotype representation for the NEAT (NeuroEvolution
of Augmenting Topologies) algorithm. Genomes are directly executable networks,
so the phenotype layer only adds identity and fitness on top of them.

Modules:
    individual: Evolved agent combining genome and fitness

Exported Classes:
    Individual: A complete evolved agent with genome and fitness
"""

from evoneat.phenotype.individual import Individual

__all__ = ['Individual']
