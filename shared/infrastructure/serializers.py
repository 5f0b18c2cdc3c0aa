"""Serializer fields shared by the API layers."""

from __future__ import annotations

from enum import Enum
from typing import Type

from rest_framework import serializers  # type: ignore


class EnumField(serializers.ChoiceField):
    """Reads and writes an Enum by its value"""

    def __init__(self, enum: Type[Enum], **kwargs):
        self.enum = enum
        super().__init__(choices=[member.value for member in enum], **kwargs)

    def to_internal_value(self, data):
        return self.enum(super().to_internal_value(data))

    def to_representation(self, value):
        return value.value if isinstance(value, Enum) else value


class MoneyField(serializers.DecimalField):
    def __init__(self, **kwargs):
        kwargs.setdefault('max_digits', 12)
        kwargs.setdefault('decimal_places', 2)
        super().__init__(**kwargs)
