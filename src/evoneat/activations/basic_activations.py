import numpy as np

# Steepness of the logistic curve used by hidden and output nodes
SIGMOID_STEEPNESS = 5.0

def identity_activation(z):
    return z

def clamped_activation(z):
    return np.clip(z, -1.0, 1.0)

def relu_activation(z):
    return np.maximum(0.0, z)

def sigmoid_activation(z):
    Z = SIGMOID_STEEPNESS * z
    Z = np.clip(Z, -500, 500)   # to prevent overflow when calculating exp
    return 1.0 / (1.0 + np.exp(-Z))

def tanh_activation(z):
    return np.tanh(z)

activations = {
    "identity": identity_activation,
    "clamped" : clamped_activation,
    "relu"    : relu_activation,
    "sigmoid" : sigmoid_activation,
    "tanh"    : tanh_activation,
    }

# 3-letter identifiers for each activation function
activation_codes = {
    "identity": "IDN",
    "clamped" : "CLP",
    "relu"    : "RLU",
    "sigmoid" : "SIG",
    "tanh"    : "TNH",
    }
