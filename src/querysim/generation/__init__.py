"""Property model and its randomized construction.

- budget: remaining per-category workload quotas
- dispatch: uniform and weighted choice over one random stream
- providers: value, predicate and filler-query constructors
- properties: Property variants and their compilation to interactions
- generators: one generator per property, plus generate_property()
"""

from querysim.generation.budget import Remaining, remaining
from querysim.generation.dispatch import WeightedDispatcher, WeightedEntry, frequency, pick, pick_index
from querysim.generation.generators import (
    double_create_filler_allowed,
    generate_property,
    insert_select_filler_allowed,
    property_double_create_failure,
    property_insert_select,
    property_weights,
)
from querysim.generation.properties import DoubleCreateFailure, InsertSelect, Property
from querysim.generation.providers import (
    PredicateProvider,
    Providers,
    QueryProvider,
    RandomPredicateProvider,
    RandomQueryProvider,
    RandomValueProvider,
    ValueProvider,
)

__all__ = [
    "DoubleCreateFailure",
    "InsertSelect",
    "PredicateProvider",
    "Property",
    "Providers",
    "QueryProvider",
    "RandomPredicateProvider",
    "RandomQueryProvider",
    "RandomValueProvider",
    "Remaining",
    "ValueProvider",
    "WeightedDispatcher",
    "WeightedEntry",
    "double_create_filler_allowed",
    "frequency",
    "generate_property",
    "insert_select_filler_allowed",
    "pick",
    "pick_index",
    "property_double_create_failure",
    "property_insert_select",
    "property_weights",
    "remaining",
]
