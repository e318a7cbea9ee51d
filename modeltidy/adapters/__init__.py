"""
Model adapters.

Importing this package registers the statsmodels and scikit-learn
adapters with the default registry.
"""

from modeltidy.adapters.base import ModelAdapter, align_to_index
from modeltidy.adapters.registry import AdapterRegistry, default_registry, register_adapter
from modeltidy.adapters import sklearn_adapters, statsmodels_adapters  # noqa: F401

__all__ = [
    'ModelAdapter',
    'align_to_index',
    'AdapterRegistry',
    'default_registry',
    'register_adapter'
]
