"""
NEAT Pool Package

This package manages the population of evolving individuals and its
division into species.

Modules:
    species:    Species class
    population: Population class

Exported Classes:
    Species:    A cluster of genetically similar individuals
    Population: Top-level evolutionary coordinator
"""

from evoneat.pool.species    import Species
from evoneat.pool.population import Population

__all__ = ['Population',
           'Species']
