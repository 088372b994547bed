"""
evoneat - NEAT (NeuroEvolution of Augmenting Topologies) in Python.

This package evolves populations of small, strictly feed-forward, layered
neural networks. Networks grow through mutation, are kept comparable by a
per-population innovation ledger, and are protected in their niche through
speciation.

Main components:
- genotype:    Genetic encoding (genomes, genes, innovation ledger)
- phenotype:   Evolved individuals (genome + identity + fitness)
- pool:        Population and speciation management
- run:         Trial execution and configuration
- activations: Activation functions for neural networks
- errors:      Exceptions raised by the engine

Example:
    >>> from evoneat import Config, Trial
    >>> config = Config("config.ini")
    >>> class MyTrial(Trial):
    ...     def _evaluate_fitness(self, individual):
    ...         # Implement fitness evaluation
    ...         pass
    >>> trial = MyTrial(config)
    >>> trial.run()
"""

__version__ = "0.1.0"

# Import main classes for convenient access
from evoneat.run.config import Config
from evoneat.run.trial import Trial
from evoneat.genotype.genome import Genome
from evoneat.genotype.node_gene import NodeGene
from evoneat.genotype.connection_gene import ConnectionGene
from evoneat.genotype.innovation_ledger import InnovationLedger
from evoneat.phenotype.individual import Individual
from evoneat.pool.species import Species
from evoneat.pool.population import Population

__all__ = [
    "Config",
    "Trial",
    "Genome",
    "NodeGene",
    "ConnectionGene",
    "InnovationLedger",
    "Individual",
    "Species",
    "Population",
]
