"""
NEAT Trial Module

This module defines the abstract base class for NEAT trials with built-in
support for CPU-based parallelization using joblib.

A trial represents one independent run of the NEAT algorithm, evolving a
population through generations until a solution is found or the maximum
number of generations is reached.
"""

import logging
from abc        import ABC, abstractmethod
from statistics import mean
from typing     import TYPE_CHECKING

from evoneat.pool       import Population
from evoneat.run.config import Config
if TYPE_CHECKING:
    from evoneat.phenotype import Individual

logger = logging.getLogger(__name__)

class Trial(ABC):
    """
    Abstract base class for implementing a NEAT trial.

    Subclasses must implement:
    - _evaluate_fitness(individual): Evaluate fitness for a single individual

    Subclasses can override:
    - _reset():           Reset trial-specific state (call super()._reset())
    - _report_progress(): Report progress after each generation (default: log a summary)
    - _final_report():    Report the final results (default: log a summary)
    - _terminate():       Custom termination logic (default: max generations + fitness threshold)

    Public Attributes:
        failed: Whether the trial ended without reaching the fitness threshold

    Public Methods:
        run(): Execute a complete NEAT trial

    Parallelization of fitness evaluation for individuals:
        num_jobs=1:  Serial evaluation (no parallelization)
        num_jobs>1:  Use specified number of parallel processes
        num_jobs=-1: Use all available CPU cores
    """

    def __init__(self, config: Config, suppress_output: bool = False):
        """
        Initialize the trial.

        Parameters:
            config:          Configuration parameters
            suppress_output: If True, suppress progress and final reports
                             (useful when running many trials in a row)
        """
        self._config            : Config     = config
        self._generation_counter: int        = 0
        self._population        : Population = None
        self._suppress_output   : bool       = suppress_output
        self.failed             : bool       = True

    @property
    def population(self) -> Population:
        return self._population

    def run(self, num_jobs: int = 1):
        """
        Run the trial.

        Resets the trial state and runs the evolutionary
        algorithm until the terminate condition is met.

        Parameters:
            num_jobs: Number of parallel processes for fitness evaluation of individuals
                      1 = serial (no parallelization)
                     -1 = use all available CPU cores
                     >1 = use specified number of processes
        """
        # Reset the trial state before starting a new run
        self._reset()

        # Create the initial population
        self._population = Population(self._config)

        # Evaluate the fitness of the initial population
        self._evaluate_fitness_all(num_jobs)

        # Display progress for the initial population
        if not self._suppress_output:
            self._report_progress()

        # Evolution loop
        while not self._terminate():
            self._generation_counter += 1

            # The members of the population mate and create offspring
            self._population.next_generation()

            # Evaluate the fitness of each individual in the new generation
            self._evaluate_fitness_all(num_jobs)

            # Display progress after each generation
            if not self._suppress_output:
                self._report_progress()

        # Produce final report
        if not self._suppress_output:
            self._final_report()

    def _reset(self):
        """
        Reset the trial state before starting a new run.

        Subclasses should call super()._reset() and then
        initialize their problem-specific data.
        """
        self._generation_counter = 0
        self.failed = True

    @abstractmethod
    def _evaluate_fitness(self, individual: 'Individual') -> float:
        """
        Evaluate and return the fitness of an individual.

        This method should test the individual's neural network on the
        problem domain and compute a fitness score. Higher fitness values
        indicate better performance and higher probability of procreating.

        IMPORTANT: The fitness must be a finite positive number (or zero).

        Parameters:
            individual: The Individual (neural network) to evaluate

        Returns:
            float: Fitness score for the individual
        """
        pass

    def _evaluate_fitness_all(self, num_jobs: int):
        """
        Evaluate fitness for all individuals in the population.

        Parameters:
            num_jobs: Number of parallel processes for fitness evaluation
        """
        self._population.evaluate(self._evaluate_fitness, num_jobs)

    def _report_progress(self):
        """
        Report trial progress after each generation.

        This method is suppressed by setting 'self._suppress_output' to 'True',
        which we might do when running many trials in a row.
        """
        fittest = self._population.get_fittest_individual()
        logger.info("generation %d: best fitness %.4f, %d species, best network has %d hidden nodes",
                    self._generation_counter, fittest.fitness, len(self._population.species),
                    fittest.genome.number_nodes_hidden)

    def _final_report(self):
        """
        Produce final report at the end of the trial.
        """
        fittest = self._population.get_fittest_individual()
        outcome = "failed" if self.failed else "succeeded"
        logger.info("trial %s after %d generations, best fitness %.4f",
                    outcome, self._generation_counter, fittest.fitness)

    def _terminate(self) -> bool:
        """
        Stop after 'max_number_generations' generations or, when
        'fitness_termination_check' is on, as soon as the population fitness
        (its max or mean, per 'fitness_criterion') reaches 'fitness_threshold'.
        The latter is the only way for a trial to succeed.

        Subclasses can override this method for custom termination logic.
        """
        out_of_generations = self._generation_counter >= self._config.max_number_generations
        if not self._config.fitness_termination_check:
            return out_of_generations

        criterion = {"max": max, "mean": mean}[self._config.fitness_criterion]
        reached   = criterion(indv.fitness for indv in self._population.individuals) >= self._config.fitness_threshold
        if reached or out_of_generations:
            self.failed = not reached
            return True
        return False
