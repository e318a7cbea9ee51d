"""
modeltidy: tidy, glance and augment tables for fitted statistical models,
with a validator for the tidy-output contract.
"""

from modeltidy.contracts import ModelOptions, TidyContractValidator, ValidationReport
from modeltidy.tidiers import augment, glance, tidy
from modeltidy.utils.errors import (
    ConflictingInputError,
    MissingInputError,
    SchemaViolationError,
    TidyError,
    UnsupportedInputError,
)

__version__ = "0.1.0"

__all__ = [
    'tidy',
    'glance',
    'augment',
    'ModelOptions',
    'TidyContractValidator',
    'ValidationReport',
    'TidyError',
    'ConflictingInputError',
    'MissingInputError',
    'SchemaViolationError',
    'UnsupportedInputError',
    '__version__'
]
