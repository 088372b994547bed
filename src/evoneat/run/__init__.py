"""
NEAT Run Package

This package holds the configuration layer and the generational driver.

Modules:
    config: Config class, parsed from an INI file
    trial:  Trial abstract base class

Exported Classes:
    Config: Stores configuration parameters
    Trial:  One independent run of the NEAT algorithm
"""

from evoneat.run.config import Config
from evoneat.run.trial  import Trial

__all__ = ['Config',
           'Trial']
