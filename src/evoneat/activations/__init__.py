"""
Activations Package

This package provides activation functions for the nodes of evolved networks.
Hidden and output nodes use 'sigmoid' by default, a logistic curve with
steepness 5: 1 / (1 + exp(-5 * z)).

Exported:
    activations:      Dictionary mapping activation function names to functions
    activation_codes: Dictionary mapping activation function names to 3-letter codes
    Individual activation functions: identity_activation, clamped_activation,
                                     relu_activation, sigmoid_activation, tanh_activation
"""

from evoneat.activations.basic_activations import (
    SIGMOID_STEEPNESS,
    activations,
    activation_codes,
    identity_activation,
    clamped_activation,
    relu_activation,
    sigmoid_activation,
    tanh_activation
)

__all__ = [
    'SIGMOID_STEEPNESS',
    'activations',
    'activation_codes',
    'identity_activation',
    'clamped_activation',
    'relu_activation',
    'sigmoid_activation',
    'tanh_activation'
]
