"""
Custom exception classes for modeltidy.

Usage errors (conflicting, unsupported or missing input) are raised
immediately. Schema violations are collected by the contract validator
and raised as a single batch.
"""


class TidyError(Exception):
    """Base exception for all modeltidy errors."""

    def __init__(self, message: str, details: dict = None):
        """
        Initialize exception with message and optional details.

        Args:
            message: Error message
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        """String representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InputError(TidyError):
    """Base exception for caller input errors."""
    pass


class ConflictingInputError(InputError):
    """Raised when both `data` and `newdata` are supplied."""

    def __init__(self, message: str = "Supply at most one of `data` and `newdata`",
                 supplied: list = None):
        details = {}
        if supplied:
            details['supplied'] = supplied
        super().__init__(message, details)


class UnsupportedInputError(InputError):
    """Raised when an input is not a recognized tabular structure."""

    def __init__(self, message: str, argument: str = None, input_type: str = None,
                 missing_columns: list = None):
        """
        Initialize unsupported input error.

        Args:
            message: Error message
            argument: Name of the offending argument
            input_type: Type name of the supplied object
            missing_columns: Columns the model needs but the input lacks
        """
        details = {}
        if argument:
            details['argument'] = argument
        if input_type:
            details['input_type'] = input_type
        if missing_columns:
            details['missing_columns'] = missing_columns
        super().__init__(message, details)


class MissingInputError(InputError):
    """Raised when no data is supplied and the model cannot reconstruct it."""

    def __init__(self, message: str, model_type: str = None):
        details = {}
        if model_type:
            details['model_type'] = model_type
        super().__init__(message, details)


class SchemaViolationError(TidyError):
    """Raised when a produced table breaks its role's contract."""

    def __init__(self, message: str, violations: list = None, role: str = None):
        """
        Initialize schema violation error.

        Args:
            message: Error message
            violations: Every violation found, not only the first
            role: Table role that was validated
        """
        details = {}
        if role:
            details['role'] = role
        if violations:
            details['violations'] = [str(v) for v in violations]
        super().__init__(message, details)
        self.violations = violations or []
        self.role = role


class ModelError(TidyError):
    """Base exception for model-related errors."""
    pass


class UnregisteredModelError(ModelError):
    """Raised when no adapter or schema is registered for a model type."""

    def __init__(self, message: str, model_class: str = None, model_type: str = None):
        details = {}
        if model_class:
            details['model_class'] = model_class
        if model_type:
            details['model_type'] = model_type
        super().__init__(message, details)


class ModelCapabilityError(ModelError):
    """Raised when a model type cannot honour a requested option."""

    def __init__(self, message: str, model_type: str = None, option: str = None):
        details = {}
        if model_type:
            details['model_type'] = model_type
        if option:
            details['option'] = option
        super().__init__(message, details)


class ConfigurationError(TidyError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_key: str = None, config_file: str = None):
        """
        Initialize configuration error.

        Args:
            message: Error message
            config_key: Configuration key that is invalid
            config_file: Configuration file path
        """
        details = {}
        if config_key:
            details['config_key'] = config_key
        if config_file:
            details['config_file'] = config_file
        super().__init__(message, details)
