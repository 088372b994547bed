"""
NEAT Individual Module

This module implements the Individual class, representing a complete evolved
agent in the NEAT (NeuroEvolution of Augmenting Topologies) population.

Classes:
    Individual: A complete evolved agent with genome and fitness
"""

import random
from itertools import count
from typing    import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from evoneat.genotype import Genome

class Individual:
    """
    An individual organism in the NEAT population.

    You can regard an individual as a thin wrapper around the genome that powers
    it, to which it adds a unique ID and a fitness. The genome is directly
    executable, so the individual "thinks" by running its genome.

    The NEAT algorithm operates on Individual(s) and not on genomes: individuals
    are evaluated, ranked, grouped into species and mated to create offspring.

    Public Attributes:
        ID:      Globally unique identifier for this individual
        fitness: Fitness score (None until evaluated)
        genome:  The genome encoding the network of this individual

    Public Methods:
        think(inputs):        Run the network on one input vector
        clone():              Create a genetic copy of this individual
        distance(other):      Calculate genetic distance to another individual
        mate(other, rng):     Reproduce with another individual via crossover
    """

    _id_generator = count(0)

    def __init__(self, genome: 'Genome'):
        """
        Parameters:
            genome: The Genome encoding the neural network that powers this Individual
        """
        self.ID     : int             = next(Individual._id_generator)  # unique ID
        self.fitness: Optional[float] = None                            # fitness used when reproducing
        self.genome : 'Genome'        = genome

    def think(self, inputs) -> list[float]:
        return self.genome.execute(inputs)

    def clone(self) -> 'Individual':
        """
        Create a new Individual from a copy of the current genome.
        The clone gets a new ID and no fitness.
        """
        return Individual(self.genome.copy())

    def distance(self, other: 'Individual') -> float:
        """
        Calculate the compatibility distance between this individual and another.

        Parameters:
            other: The individual acting as reference (e.g. a species reference)

        Returns:
            The compatibility distance between the two individuals' genomes
        """
        return self.genome.distance(other.genome)

    def mate(self, other: 'Individual', rng: random.Random) -> 'Individual':
        """
        Create a new Individual by crossover with another Individual.

        The genome of the fitter parent drives the crossover; on equal fitness,
        'other' is treated as the fitter one. The offspring is not mutated here,
        every individual is mutated once per generation by the population.

        Parameters:
            other: the Individual with whom this Individual is mating
            rng:   Source of randomness

        Returns:
            the offspring resulting from the mating process
        """
        if self.fitness > other.fitness:
            genome_child = self.genome.crossover(other.genome, rng)
        else:
            genome_child = other.genome.crossover(self.genome, rng)
        return Individual(genome_child)

    def __str__(self):
        fitness = "n/a" if self.fitness is None else f"{self.fitness:.4f}"
        return f"ID={self.ID}, fitness={fitness}\n{self.genome}"

    def __repr__(self):
        return f"Individual(ID={self.ID}, fitness={self.fitness})"
