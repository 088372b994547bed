"""
NEAT Population Module

This module implements the Population class, the top-level orchestrator for the NEAT
evolutionary algorithm. The population manages the complete lifecycle of evolution,
from initialization through ranking, culling, reproduction, mutation and speciation.

Classes:
    Population: Top-level evolutionary coordinator managing individuals and generations
"""

import logging
import math
import numbers
import random
from itertools import count
from joblib    import Parallel, delayed
from typing    import Callable, Iterable, TYPE_CHECKING

from evoneat.errors      import DegenerateFitnessError, EmptyPopulationError
from evoneat.genotype    import Genome, InnovationLedger
from evoneat.phenotype   import Individual
from evoneat.pool.species import Species

if TYPE_CHECKING:
    from evoneat.run.config import Config

logger = logging.getLogger(__name__)

class Population:
    """
    A population of evolving individuals in the NEAT algorithm.

    The Population class represents the top-level container for the evolutionary
    process. It owns all individuals, all species, the innovation ledger shared
    by the genomes of its individuals and the random source driving the run.

    One generation goes through the following steps:
        evaluate -> sort -> cull -> repopulate -> mutate -> speciate

    Evaluation is driven from outside (see 'evaluate()' and 'assign_fitness()');
    'next_generation()' performs all remaining steps.

    Public Attributes:
        individuals: List of all Individual objects in the current generation
        species:     List of all species, in creation order (re-ranked by 'sort()')
        ledger:      Innovation ledger shared by all genomes of this population
        generation:  Number of generations produced so far

    Public Methods:
        evaluate(fitness_fn, num_jobs): Evaluate and assign the fitness of every individual
        assign_fitness(values):         Assign externally computed fitness values
        get_fittest_individual():       Return the individual with highest fitness
        sort():                         Rank individuals and species members by fitness
        cull():                         Remove the weakest members of each species
        repopulate():                   Refill the population through reproduction
        mutate(num_jobs):               Mutate every individual exactly once
        speciate():                     Assign every individual to a species
        next_generation(num_jobs):      Run all steps that follow the evaluation
    """

    def __init__(self, config: 'Config', rng: random.Random | None = None):
        """
        Initialize the population with a given number of Individuals and split them into species.

        Parameters:
            config: Stores configuration parameters
            rng:    Source of randomness for the whole run. If None, one is
                    created from the 'seed' configuration parameter.
        """
        config.validate()

        self._config = config
        self._rng    = rng if rng is not None else random.Random(config.seed)

        self.ledger     : InnovationLedger = InnovationLedger(config.num_inputs, config.num_outputs)
        self.generation : int              = 0
        self.species    : list[Species]    = []
        self._species_id_generator = count(0)

        # Every individual starts as a fully connected minimal network;
        # the initial connections share their innovation numbers.
        self.individuals: list[Individual] = [Individual(Genome(config, self.ledger, self._rng))
                                              for _ in range(config.population_size)]

        # Size of each species before culling: species ID => size
        self._pre_cull_sizes: dict[int, int] = {}

        # Split the initial population into species
        self.speciate()

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(self, fitness_fn: Callable[[Individual], float], num_jobs: int = 1) -> None:
        """
        Evaluate the fitness of all individuals in the population.

        Parameters:
            fitness_fn: Computes the fitness of one individual (must be picklable if num_jobs != 1)
            num_jobs:   Number of parallel processes for fitness evaluation
                        1 = serial (no parallelization)
                       -1 = use all available CPU cores
                       >1 = use specified number of processes
        """
        if num_jobs == 1:
            fitness_all = [fitness_fn(individual) for individual in self.individuals]
        else:
            fitness_all = Parallel(num_jobs)(delayed(fitness_fn)(i) for i in self.individuals)
        self.assign_fitness(fitness_all)

    def assign_fitness(self, values: Iterable[float]) -> None:
        """
        Assign one fitness value to each individual, in population order.

        Raises:
            ValueError:             if the number of values differs from the population size
            DegenerateFitnessError: if a value is missing, non-numeric, non-finite or negative
        """
        values = list(values)
        if len(values) != len(self.individuals):
            raise ValueError(f"Expected {len(self.individuals)} fitness values, got {len(values)}")

        # Validate everything before assigning anything
        checked = [self._check_fitness(individual, value) for individual, value in zip(self.individuals, values)]
        for individual, fitness in zip(self.individuals, checked):
            individual.fitness = fitness

    @staticmethod
    def _check_fitness(individual: Individual, value) -> float:
        if value is None:
            raise DegenerateFitnessError(f"Individual {individual.ID} has no fitness")
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise DegenerateFitnessError(f"Individual {individual.ID} has non-numeric fitness {value!r}")
        if not math.isfinite(value):
            raise DegenerateFitnessError(f"Individual {individual.ID} has non-finite fitness {value}")
        if value < 0:
            raise DegenerateFitnessError(f"Individual {individual.ID} has negative fitness {value}")
        return float(value)

    def get_fittest_individual(self) -> 'Individual | None':
        """
        Find and return the individual with the highest fitness in the population.

        Returns:
            The individual with the highest fitness value, or None if population
            is empty, or the fitness of individuals has not been calculated yet
        """
        if not self.individuals:
            return None

        # 'max' raises a TypeError if called on a list that contains 'None'
        # in our case, this happens if the individual fitness has not been
        # evaluated yet.
        try:
            return max(self.individuals, key=lambda ind: ind.fitness)
        except TypeError:
            return None

    # ------------------------------------------------------------------
    # Generational steps
    # ------------------------------------------------------------------

    def sort(self) -> None:
        """
        Rank the individuals, fittest first, then the members of each species
        (updating their staleness), then the species by their champion.

        Raises:
            DegenerateFitnessError: if some individual has not been evaluated
        """
        unevaluated = [ind.ID for ind in self.individuals if ind.fitness is None]
        if unevaluated:
            raise DegenerateFitnessError(f"Individuals {unevaluated} have not been evaluated")

        self.individuals.sort(key=lambda ind: ind.fitness, reverse=True)
        for spec in self.species:
            spec.sort_members()
        self.species.sort(key=lambda spec: spec.members[0].fitness if spec.members else -math.inf, reverse=True)

    def cull(self) -> None:
        """
        Cull every species (see 'Species.cull()'); species left without members are removed.

        Raises:
            EmptyPopulationError: if no species survives
        """
        self._pre_cull_sizes = {spec.id: spec.size for spec in self.species}

        removed_ids = set()
        for spec in self.species:
            removed_ids.update(ind.ID for ind in spec.cull())
            if not spec.members:
                logger.debug("species %d removed (age %d, stale for %d generations)",
                             spec.id, spec.age, spec.stale_generations)

        self.species     = [spec for spec in self.species if spec.members]
        self.individuals = [ind for ind in self.individuals if ind.ID not in removed_ids]

        if not self.species:
            raise EmptyPopulationError(f"All species were removed in generation {self.generation}")

    def repopulate(self) -> None:
        """
        Bring every surviving species back to its size before culling, by
        reproduction among its surviving members. If whole species were removed,
        the missing individuals are then spawned by the surviving species in turn,
        best species first, so that the population size stays the same.

        Offspring join their parents' species and the population.
        """
        offspring: dict[int, list[Individual]] = {spec.id: [] for spec in self.species}

        for spec in self.species:
            num_offspring = self._pre_cull_sizes.get(spec.id, spec.size) - spec.size
            for _ in range(num_offspring):
                offspring[spec.id].append(spec.reproduce(self._rng))

        num_spawned = len(self.individuals) + sum(len(children) for children in offspring.values())
        deficit     = self._config.population_size - num_spawned
        ranked      = sorted(self.species, key=lambda spec: spec.best_fitness, reverse=True)
        for i in range(deficit):
            spec = ranked[i % len(ranked)]
            offspring[spec.id].append(spec.reproduce(self._rng))

        # Parents are selected among survivors only, children join afterwards
        for spec in self.species:
            for child in offspring[spec.id]:
                spec.add_member(child)
                self.individuals.append(child)

    def mutate(self, num_jobs: int = 1) -> None:
        """
        Mutate every individual exactly once, using the shared innovation ledger.

        Each genome gets its own random source derived from the population's,
        so that a serial run is reproducible from its seed. Mutated individuals
        lose their fitness, which must be evaluated again.

        Parameters:
            num_jobs: Number of threads mutating genomes concurrently
                      1 = serial, -1 = all available CPU cores
        """
        seeds = [self._rng.getrandbits(64) for _ in self.individuals]

        if num_jobs == 1:
            for individual, seed in zip(self.individuals, seeds):
                individual.genome.mutate(self.ledger, random.Random(seed))
        else:
            # Genomes are mutated in place and share the ledger: threads, not processes
            Parallel(n_jobs=num_jobs, require="sharedmem")(
                delayed(individual.genome.mutate)(self.ledger, random.Random(seed))
                for individual, seed in zip(self.individuals, seeds))

        for individual in self.individuals:
            individual.fitness = None

    def speciate(self) -> None:
        """
        Assign every individual to the first species (in list order) it is
        compatible with. An individual compatible with no species founds a new
        one, becoming its reference. Species left without members are removed.
        """
        for spec in self.species:
            spec.members = []

        for individual in self.individuals:
            for spec in self.species:
                if spec.is_compatible(individual):
                    spec.add_member(individual)
                    break
            else:
                spec = Species(next(self._species_id_generator), individual, self._config)
                self.species.append(spec)
                logger.debug("species %d created, generation %d", spec.id, self.generation)

        for spec in self.species:
            if not spec.members:
                logger.debug("species %d died out", spec.id)
        self.species = [spec for spec in self.species if spec.members]

    def next_generation(self, num_jobs: int = 1) -> None:
        """
        Create the next generation from the current, evaluated, one.

        The generation process follows these steps:
        1. rank individuals and species members by fitness
        2. cull the weakest members of each species, and stagnant species altogether
        3. refill the population by reproduction within the surviving species
        4. mutate every individual (survivors and offspring) exactly once
        5. split the new population into species

        Parameters:
            num_jobs: Number of threads used for mutation

        Raises:
            DegenerateFitnessError: if some individual has not been evaluated
            EmptyPopulationError:   if culling removed every species
        """
        self.sort()
        best_fitness = self.individuals[0].fitness

        self.cull()
        self.repopulate()
        self.mutate(num_jobs)
        self.speciate()

        for spec in self.species:
            spec.age += 1
        self.generation += 1

        logger.info("generation %d: %d individuals, %d species, best fitness %.4f",
                    self.generation, len(self.individuals), len(self.species), best_fitness)

    def __str__(self):
        return '\n'.join(str(individual) for individual in self.individuals)
