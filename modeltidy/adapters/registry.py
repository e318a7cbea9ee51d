"""
Adapter registry keyed by model-type tag.

Model classes are matched by name through their MRO, so the adapter
modules need not import the modelling libraries. Wrapper objects that
expose the wrapped results as `_results` (statsmodels) are matched on
the wrapped class too.
"""

from typing import Any, Dict, Iterator, List, Type

from modeltidy.adapters.base import ModelAdapter
from modeltidy.utils.errors import UnregisteredModelError


class AdapterRegistry:
    """Maps model class names to a model-type tag and its adapter."""

    def __init__(self):
        self._tags: Dict[str, str] = {}
        self._adapters: Dict[str, Type[ModelAdapter]] = {}

    def register(self, model_type: str, *class_names: str):
        """
        Class decorator registering an adapter for a model type.

        Args:
            model_type: Tag used to look up the model type's schema
            class_names: Model class names handled by the adapter
        """
        def decorator(adapter_cls: Type[ModelAdapter]) -> Type[ModelAdapter]:
            self._adapters[model_type] = adapter_cls
            for name in class_names:
                self._tags[name] = model_type
            return adapter_cls
        return decorator

    def _class_names(self, model: Any) -> Iterator[str]:
        candidates = [model]
        wrapped = getattr(model, '_results', None)
        if wrapped is not None:
            candidates.append(wrapped)
        for obj in candidates:
            for klass in type(obj).__mro__:
                yield klass.__name__

    def resolve_tag(self, model: Any) -> str:
        """
        Model-type tag for a model object.

        Raises:
            UnregisteredModelError: If no adapter handles the model's class
        """
        for name in self._class_names(model):
            if name in self._tags:
                return self._tags[name]
        raise UnregisteredModelError(
            f"No adapter registered for {type(model).__name__}",
            model_class=type(model).__name__
        )

    def adapter_for(self, model: Any) -> ModelAdapter:
        """Wrap `model` in its registered adapter. Adapters pass through."""
        if isinstance(model, ModelAdapter):
            return model
        model_type = self.resolve_tag(model)
        return self._adapters[model_type](model, model_type=model_type)

    def model_types(self) -> List[str]:
        return sorted(self._adapters)


default_registry = AdapterRegistry()
register_adapter = default_registry.register
