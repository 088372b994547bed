"""
XOR Problem Implementation for NEAT

This module implements the classic XOR (exclusive OR) problem as a benchmark
for the NEAT algorithm. The XOR problem is a fundamental test case in neural
network research, demonstrating the necessity of hidden layers for solving
non-linearly separable problems.

The XOR Problem:
    XOR is a two-input, one-output boolean function where the output is True
    only when the inputs differ:
        Input (0, 0) → Output 0
        Input (0, 1) → Output 1
        Input (1, 0) → Output 1
        Input (1, 1) → Output 0

    This problem cannot be solved by a single-layer perceptron (linear classifier)
    and requires at least one hidden node, making it an ideal minimal test case
    for topology-evolving algorithms like NEAT.

Fitness Function:
    Fitness = 4.0 - Σ(output - target)²

    Maximum fitness of 4.0 is achieved when all four XOR cases produce exact outputs.

Classes:
    Trial_XOR: NEAT trial for solving XOR

Usage:
    python examples/trial_XOR.py [path/to/config.ini] [num_jobs]
"""

import logging
import sys
from pathlib import Path

from evoneat.phenotype import Individual
from evoneat.run       import Config, Trial

class Trial_XOR(Trial):
    """
    NEAT trial for solving the XOR (exclusive OR) problem.

    Problem Definition:
        Inputs: 2 binary values (0 or 1)
        Output: 1 binary value (XOR of inputs)
        Training cases: All 4 possible input combinations

    Implemented Methods:
        _evaluate_fitness(individual): Test network on all 4 XOR cases
        _report_progress(): Display generation statistics and XOR truth table
    """

    def __init__(self, config: Config, suppress_output: bool = False):
        super().__init__(config, suppress_output)
        self.xor_inputs  = [[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]]
        self.xor_outputs = [[0.0],      [1.0],      [1.0],      [0.0]]

    def _evaluate_fitness(self, individual: Individual) -> float:
        """
        Evaluate individual fitness by testing on XOR inputs.

        Returns:
            Fitness score (maximum 4.0 for perfect XOR solution)
        """
        fitness = 4.0  # max possible fitness
        for inputs, expected_output in zip(self.xor_inputs, self.xor_outputs):
            output   = individual.think(inputs)            # forward pass through network
            error    = output[0] - expected_output[0]      # calculate error
            fitness -= error ** 2                          # errors cause the fitness to decrease

        # squared errors of sigmoid outputs never exceed 1 each
        return max(fitness, 0.0)

    def _report_progress(self):
        """
        Print a report describing the current generation.
        """
        fittest = self._population.get_fittest_individual()

        s  = f"===============\n"
        s += f"GENERATION {self._generation_counter:04d}\n"
        s += f"population size = {len(self._population.individuals)}\n"
        s += f"number species  = {len(self._population.species)}\n"
        s += f"maximum fitness = {fittest.fitness:.4f}\n"
        s += '\n'
        s += str(fittest)
        s += '\n\n'

        s += "input         output   target  error\n"
        s += "------------------------------------\n"
        for inputs, target in zip(self.xor_inputs, self.xor_outputs):
            output = fittest.think(inputs)[0]
            s += f"{inputs} -> {output:.4f}    {target[0]}   {abs(output - target[0]):.4f}\n"

        print(s)

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    default_config = Path(__file__).parent / "configs" / "config_xor.ini"
    config_file    = sys.argv[1] if len(sys.argv) > 1 else str(default_config)
    num_jobs       = int(sys.argv[2]) if len(sys.argv) > 2 else 1

    trial = Trial_XOR(Config(config_file))
    trial.run(num_jobs=num_jobs)
