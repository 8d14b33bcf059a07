"""
Capability catalog: every variant of every category, its names and its options.

Usage Example:
--------------

from gymnarium_app.catalog import Category, find_variant, variants

variant = find_variant(Category.ENVIRONMENT, "G_MC")      # any alias, any case
for descriptor in variant.options:
    print(descriptor.help_line())

[v.nice_name for v in variants(Category.AGENT)]            # ['Random', 'Input']
"""
from __future__ import annotations

from typing import List

from .options import (
    OptionDescriptor,
    OptionType,
    format_configuration,
    parse_configuration,
    parse_uint_pair,
)
from .variants import (
    Available,
    AvailableAgent,
    AvailableEnvironment,
    AvailableExitCondition,
    AvailableVisualiser,
    Category,
    VariantInfo,
    available_type,
)

__all__ = [
    "Category",
    "VariantInfo",
    "Available",
    "AvailableEnvironment",
    "AvailableAgent",
    "AvailableVisualiser",
    "AvailableExitCondition",
    "OptionDescriptor",
    "OptionType",
    "parse_configuration",
    "format_configuration",
    "parse_uint_pair",
    "variants",
    "find_variant",
    "describe_variant",
]


def variants(category: Category) -> List[Available]:
    """All variants of *category* in declared order."""
    return available_type(category).values()


def find_variant(category: Category, alias: str) -> Available:
    """
    Look a variant up by its nice, long or short name, ignoring case.
    Raises NotFoundError naming the alias and the category searched.
    """
    return available_type(category).from_alias(alias)


def describe_variant(variant: Available) -> str:
    """Multi-line help text: names, then one block per option."""
    lines = [f"- {variant.nice_name} ({variant.long_name}, {variant.short_name})"]
    if not variant.options:
        lines.append("  n/a")
    for descriptor in variant.options:
        lines.append(f"  > {descriptor.help_line()}")
        lines.append(f"    {descriptor.description}")
    return "\n".join(lines)
