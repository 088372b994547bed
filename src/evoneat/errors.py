"""
NEAT Errors Module

Exceptions raised by the evolutionary engine.

Classes:
    ArityError:             Wrong number of inputs passed to a network
    InvariantViolation:     A genome's graph is no longer strictly feed-forward
    EmptyPopulationError:   Culling removed every species
    DegenerateFitnessError: A fitness value that cannot be ranked
"""

class ArityError(ValueError):
    """
    Raised when a genome is executed on an input vector of the wrong length.
    The genome itself is left untouched and can be executed again.
    """

class InvariantViolation(RuntimeError):
    """
    Raised when a genome references a node it does not own, or holds a
    connection that does not go from a lower layer to a strictly higher one.
    This always indicates a bug in the engine and is never repaired silently.
    """

class EmptyPopulationError(RuntimeError):
    """
    Raised when culling leaves no species alive; evolution cannot continue.
    """

class DegenerateFitnessError(ValueError):
    """
    Raised when a fitness is missing, negative, or not a finite number.
    """
