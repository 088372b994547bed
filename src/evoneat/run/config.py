import configparser
import os

from evoneat.activations import activations

class Config:

    def __init__(self, config_file: str | None = None):
        """
        Initialize Config by parsing an INI file, or create a default Config.

        Every parameter has a default; a configuration file only needs to list
        the values it overrides. The population dimensions ('num_inputs',
        'num_outputs', 'population_size') have no meaningful default and must
        be set, either in the file or as attributes, before 'validate()' passes.

        Parameters:
            config_file: Path to the INI configuration file.
                         If None, creates a default Config for manual attribute setting.
        """
        parser = configparser.ConfigParser()
        if config_file is not None:
            if not os.path.exists(config_file):
                raise FileNotFoundError(f"Configuration file '{config_file}' not found")
            parser.read(config_file)

        # Sentinel for missing default values
        _NO_DEFAULT = object()

        # Helper function to safely parse values
        def get_value(section, key, value_type, default=_NO_DEFAULT):
            try:
                raw_value = parser.get(section, key)
                if raw_value.lower() == 'none':
                    return None
                if value_type == int:
                    return parser.getint(section, key)
                elif value_type == float:
                    return parser.getfloat(section, key)
                elif value_type == bool:
                    return parser.getboolean(section, key)
                elif value_type == str:
                    return raw_value
            except (configparser.NoSectionError, configparser.NoOptionError):
                if default is not _NO_DEFAULT:
                    return default
                raise

        # [POPULATION INIT]

        # The number of individuals in each generation.
        self.population_size = get_value('POPULATION_INIT', 'population_size', int, default=None)

        # The number of input nodes, through which the network receives inputs.
        # A bias node, whose input is always 1, is added on top of these.
        self.num_inputs = get_value('POPULATION_INIT', 'num_inputs', int, default=None)

        # The number of output nodes, to which the network delivers outputs.
        self.num_outputs = get_value('POPULATION_INIT', 'num_outputs', int, default=None)

        # Seed for the random source driving the whole run.
        # Use "None" for a non-reproducible run.
        self.seed = get_value('POPULATION_INIT', 'seed', int, default=None)

        # The activation function of hidden and output nodes.
        # For the list of all available choices, see the 'activations' package.
        self.activation = get_value('POPULATION_INIT', 'activation', str, default='sigmoid')

        # [STRUCTURAL MUTATIONS]

        # Each mutation applies exactly one of three mutation classes, chosen by
        # a single random draw r:
        #   r < node_add_probability                              -> add a node
        #   r < node_add_probability + connection_add_probability -> add a connection
        #   otherwise                                             -> mutate a weight
        self.node_add_probability       = get_value('STRUCTURAL_MUTATIONS', 'node_add_probability',       float, default=0.03)
        self.connection_add_probability = get_value('STRUCTURAL_MUTATIONS', 'connection_add_probability', float, default=0.10)

        # How many random node pairs the add-connection mutation tries before
        # enumerating all pairs that can still be connected.
        self.max_mutation_attempts = get_value('STRUCTURAL_MUTATIONS', 'max_mutation_attempts', int, default=20)

        # [CONNECTION]

        # The minimum and maximum allowed 'weight' values.
        # Weights outside this range will be clamped to this range.
        self.min_weight = get_value('CONNECTION', 'min_weight', float, default=-1.0)
        self.max_weight = get_value('CONNECTION', 'max_weight', float, default=1.0)

        # A weight mutation draws r once and then:
        #   r < replace                       -> replace the weight with a new uniform value
        #   r < replace + perturb             -> add gaussian noise to the weight
        #   r < replace + perturb + reenable  -> re-enable the connection (if disabled)
        #   otherwise                         -> no change
        self.weight_replace_prob  = get_value('CONNECTION', 'weight_replace_prob',  float, default=0.05)
        self.weight_perturb_prob  = get_value('CONNECTION', 'weight_perturb_prob',  float, default=0.45)
        self.weight_reenable_prob = get_value('CONNECTION', 'weight_reenable_prob', float, default=0.5)

        # The standard deviation of the zero-centered normal distribution
        # from which a 'weight' perturbation value is drawn.
        self.weight_perturb_strength = get_value('CONNECTION', 'weight_perturb_strength', float, default=1.0 / 30.0)

        # [SPECIATION]

        # Individuals whose compatibility distance to a species reference
        # is less than this threshold are members of that species.
        self.compatibility_threshold = get_value('SPECIATION', 'compatibility_threshold', float, default=3.0)

        # The coefficient for the excess connection count contribution to the distance.
        self.distance_excess_coeff = get_value('SPECIATION', 'distance_excess_coeff', float, default=1.0)

        # The coefficient for the mean weight difference of matching connections.
        self.distance_weight_coeff = get_value('SPECIATION', 'distance_weight_coeff', float, default=0.5)

        # The excess count is normalized by max(1, number of connections - offset),
        # so that small genomes are not normalized at all.
        self.distance_size_offset = get_value('SPECIATION', 'distance_size_offset', int, default=20)

        # The mean weight difference used when two genomes share no connection.
        # It is large enough to keep such genomes in different species.
        self.distance_no_match = get_value('SPECIATION', 'distance_no_match', float, default=1000.0)

        # [REPRODUCTION]

        # The probability that a connection present in both parents
        # is inherited from the fitter one.
        self.crossover_fitter_prob = get_value('REPRODUCTION', 'crossover_fitter_prob', float, default=0.55)

        # Parents are selected by rejection sampling with acceptance
        # probability: decay * exp(-decay * index), index 0 being the fittest.
        self.selection_decay = get_value('REPRODUCTION', 'selection_decay', float, default=0.07)

        # Rejection sampling gives up after (factor * number of members) attempts.
        self.selection_attempts_factor = get_value('REPRODUCTION', 'selection_attempts_factor', int, default=10)

        # [CULLING]

        # Species younger than this (in generations) lose only their bottom fraction.
        self.young_species_age   = get_value('CULLING', 'young_species_age',   int,   default=10)
        self.young_cull_fraction = get_value('CULLING', 'young_cull_fraction', float, default=0.25)

        # Mature species that have not improved in more than this
        # number of generations are removed altogether.
        self.max_stagnation_period = get_value('CULLING', 'max_stagnation_period', int, default=15)

        # The fraction of a mature (non stagnant) species removed each generation.
        self.mature_cull_fraction = get_value('CULLING', 'mature_cull_fraction', float, default=0.5)

        # [TERMINATION]

        # Whether to use the fitness of the most recent
        # generation as a criterion for stopping the run.
        self.fitness_termination_check = get_value('TERMINATION', 'fitness_termination_check', bool, default=False)

        # The function used to compute the termination criterion.
        # Only applicable if 'fitness_termination_check' is 'True'.
        # Allowed values:
        #   "mean" calculate the mean fitness across the entire population
        #   "max"  get the fitness of the fittest individual in the population
        self.fitness_criterion = get_value('TERMINATION', 'fitness_criterion', str, default='max')

        # The fitness value which when met or exceeded causes the run to end.
        # Only applicable if 'fitness_termination_check' is 'True'.
        self.fitness_threshold = get_value('TERMINATION', 'fitness_threshold', float, default=None)

        # The number of generations after which to stop the run.
        # If 'fitness_termination_check' is 'True', the run may stop sooner.
        self.max_number_generations = get_value('TERMINATION', 'max_number_generations', int, default=100)

    def validate(self) -> None:
        """
        Check that the configuration describes a runnable population.

        Raises:
            ValueError: if a dimension is missing or not positive, if the
                        mutation bands overlap or exceed 1, or if a
                        probability or fraction lies outside [0, 1], or if the
                        fitness termination settings are incomplete
        """
        for name in ('num_inputs', 'num_outputs', 'population_size'):
            value = getattr(self, name)
            if value is None or value < 1:
                raise ValueError(f"'{name}' must be a positive integer, got {value}")

        probabilities = ('node_add_probability', 'connection_add_probability',
                         'weight_replace_prob', 'weight_perturb_prob', 'weight_reenable_prob',
                         'crossover_fitter_prob', 'young_cull_fraction', 'mature_cull_fraction')
        for name in probabilities:
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"'{name}' must lie in [0, 1], got {value}")

        if self.node_add_probability + self.connection_add_probability > 1.0:
            raise ValueError("structural mutation probabilities add up to more than 1")

        if self.weight_replace_prob + self.weight_perturb_prob + self.weight_reenable_prob > 1.0 + 1e-12:
            raise ValueError("weight mutation probabilities add up to more than 1")

        if self.min_weight > self.max_weight:
            raise ValueError(f"'min_weight' ({self.min_weight}) exceeds 'max_weight' ({self.max_weight})")

        if self.activation not in activations:
            raise ValueError(f"Unknown activation function '{self.activation}'")

        if self.max_mutation_attempts < 1 or self.selection_attempts_factor < 1:
            raise ValueError("retry limits must be at least 1")

        if self.fitness_criterion not in ('max', 'mean'):
            raise ValueError(f"'fitness_criterion' must be 'max' or 'mean', got '{self.fitness_criterion}'")

        if self.fitness_termination_check and self.fitness_threshold is None:
            raise ValueError("'fitness_threshold' is required when 'fitness_termination_check' is on")
