"""
NEAT Species Module

This module implements the Species class for the NEAT algorithm.
A species represents a cluster of genetically similar individuals
that compete primarily within their own niche.

Classes:
    Species: Represents a single species with members and fitness tracking
"""

import logging
import math
import random
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from evoneat.phenotype import Individual
    from evoneat.run.config import Config

logger = logging.getLogger(__name__)

class Species:
    """
    A species representing a cluster of genetically similar individuals in NEAT.

    In NEAT, the population is divided into species based on genetic similarity,
    allowing different evolutionary niches to develop independently. This protects
    innovative structures from being eliminated by competition with more mature
    solutions, as individuals only compete within their own species.

    Each species keeps the individual that founded it as its reference, for its
    whole lifetime. An individual belongs to the species if its compatibility
    distance to the reference is below the compatibility threshold.

    Public Attributes:
        id:                Unique species identifier
        reference:         Individual used for distance calculations during speciation
        members:           The individuals that are part of this species (fittest first, once sorted)
        best_fitness:      Best fitness ever achieved by a member of this species
        best:              The member which achieved 'best_fitness'
        age:               Number of generations this species has existed
        stale_generations: Number of consecutive generations without improvement

    Public Methods:
        distance_to(individual):  Calculate the genetic distance to an individual
        is_compatible(individual): Whether an individual belongs to this species
        add_member(individual):   Add an individual to the species
        sort_members():           Rank members by fitness and update staleness
        cull():                   Remove the weakest members
        select_member(rng):       Pick a member, favouring the fittest
        reproduce(rng):           Create one offspring by crossover

    Life Cycle:
    1. Created when an individual doesn't fit into existing species
    2. Accumulates members during speciation based on genetic similarity
    3. Members are ranked; staleness is updated
    4. The weakest members are culled, or the whole species if stagnant
    5. Culled members are replaced by offspring of the survivors
    6. Removed if stagnant or all members die out
    """

    def __init__(self, species_id: int, reference: 'Individual', config: 'Config'):
        """
        Initialize a new species.

        Parameters:
            species_id: unique species identifier
            reference:  the Individual that founded this species
            config:     stores configuration parameters
        """
        self._config = config

        # Unique species identifier
        self.id: int = species_id

        # Reference individual for distance calculations during speciation
        self.reference: 'Individual' = reference

        # For now we only have one member: the reference.
        self.members: list['Individual'] = [reference]

        self.best_fitness     : float               = -math.inf  # Best fitness ever achieved by this species
        self.best             : 'Individual | None' = None       # Member which achieved 'best_fitness'
        self.age              : int                 = 0          # How many generations this species has existed
        self.stale_generations: int                 = 0          # Generations since 'best_fitness' last improved

    @property
    def size(self) -> int:
        return len(self.members)

    def distance_to(self, individual: 'Individual') -> float:
        """
        Calculate the compatibility distance between a given individual and this species.
        Uses the species reference individual for comparison.

        Parameters:
            individual: The individual whose distance to this species we want to calculate

        Returns:
            The compatibility distance between the individual and the species reference
        """
        return individual.distance(self.reference)

    def is_compatible(self, individual: 'Individual') -> bool:
        return self.distance_to(individual) < self._config.compatibility_threshold

    def add_member(self, individual: 'Individual') -> None:
        self.members.append(individual)

    def sort_members(self) -> None:
        """
        Sort members by fitness, fittest first, and update the staleness counter.
        Members with equal fitness keep their relative order.

        As a precondition, all members must have their fitness evaluated.
        """
        self.members.sort(key=lambda ind: ind.fitness, reverse=True)
        if not self.members:
            return

        champion = self.members[0]
        if champion.fitness > self.best_fitness:
            self.best_fitness      = champion.fitness
            self.best              = champion
            self.stale_generations = 0
        else:
            self.stale_generations += 1

    def cull(self) -> list['Individual']:
        """
        Remove the weakest members of the species. Members must be sorted.

        Young species lose their bottom 'young_cull_fraction'. Mature species
        which did not improve for more than 'max_stagnation_period' generations
        lose all their members. Other mature species lose their bottom
        'mature_cull_fraction'. Sizes are rounded down.

        Returns:
            the removed individuals
        """
        n = len(self.members)
        if self.age < self._config.young_species_age:
            num_removed = int(n * self._config.young_cull_fraction)
        elif self.stale_generations > self._config.max_stagnation_period:
            num_removed = n
        else:
            num_removed = int(n * self._config.mature_cull_fraction)

        num_kept = n - num_removed
        removed, self.members = self.members[num_kept:], self.members[:num_kept]
        return removed

    def select_member(self, rng: random.Random) -> 'Individual':
        """
        Select a member by rejection sampling, favouring the fittest.

        A member index is drawn uniformly and accepted with probability
        decay * exp(-decay * index), index 0 being the fittest member.
        After (factor * number of members) rejected attempts, the last
        drawn index is used.

        Parameters:
            rng: Source of randomness

        Returns:
            the selected member
        """
        decay        = self._config.selection_decay
        max_attempts = self._config.selection_attempts_factor * len(self.members)

        index = 0
        for _ in range(max_attempts):
            index = rng.randrange(len(self.members))
            if rng.random() < decay * math.exp(-decay * index):
                break
        return self.members[index]

    def reproduce(self, rng: random.Random) -> 'Individual':
        """
        Create one offspring: two members are selected independently and
        the fitter one is crossed over with the other one.
        If the same member is selected twice, the offspring is its genetic copy.

        Parameters:
            rng: Source of randomness

        Returns:
            the offspring (not a member of the species yet)
        """
        parent1 = self.select_member(rng)
        parent2 = self.select_member(rng)
        return parent1.mate(parent2, rng)

    def __repr__(self):
        return (f"Species(id={self.id}, size={len(self.members)}, age={self.age}, "
                f"best_fitness={self.best_fitness}, stale_generations={self.stale_generations})")
