"""Derived property metadata and apportioned totals for the production sheet."""

from .calculator import Apportionment, DerivedFieldCalculator, apportion_item

__all__ = ["Apportionment", "DerivedFieldCalculator", "apportion_item"]
