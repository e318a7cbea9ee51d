"""
Producers of the three canonical tables.

- `tidy`: one row per model component
- `glance`: one row per model
- `augment`: one row per observation
"""

from modeltidy.tidiers.component import tidy
from modeltidy.tidiers.observation import augment
from modeltidy.tidiers.summary import glance

__all__ = ['tidy', 'glance', 'augment']
