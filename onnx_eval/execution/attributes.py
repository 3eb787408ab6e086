# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Attribute Access

Typed, validated extraction of node attributes. Each supported attribute
representation is an ``AttributeKind`` that knows its declared type and how
to pull its value out of an attribute record.
"""

from __future__ import annotations

from typing import Any, List, Optional

from ..core.node import AttributeDescriptor, NodeDescriptor
from ..core.tensor import TensorDescriptor
from ..core.types import AttributeType
from ..errors import AttributeTypeMismatchError, MissingAttributeError


def _type_name(attr_type: int) -> str:
    try:
        return AttributeType(attr_type).name
    except ValueError:
        return str(attr_type)


class AttributeKind:
    """One attribute representation: its declared type and its extractor."""

    attr_type: AttributeType = AttributeType.UNDEFINED

    def extract(self, attr: AttributeDescriptor, node: NodeDescriptor) -> Any:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"AttributeKind({self.attr_type.name})"


class _IntKind(AttributeKind):
    attr_type = AttributeType.INT

    def extract(self, attr: AttributeDescriptor, node: NodeDescriptor) -> int:
        return int(attr.i)


class _FloatKind(AttributeKind):
    attr_type = AttributeType.FLOAT

    def extract(self, attr: AttributeDescriptor, node: NodeDescriptor) -> float:
        return float(attr.f)


class _StringKind(AttributeKind):
    attr_type = AttributeType.STRING

    def extract(self, attr: AttributeDescriptor, node: NodeDescriptor) -> str:
        if isinstance(attr.s, str):
            return attr.s
        try:
            return bytes(attr.s).decode("utf-8")
        except UnicodeDecodeError as err:
            raise AttributeTypeMismatchError(
                attr.name, expected="UTF-8 STRING", received="invalid UTF-8", node=node
            ) from err


class _IntsKind(AttributeKind):
    attr_type = AttributeType.INTS

    def extract(self, attr: AttributeDescriptor, node: NodeDescriptor) -> List[int]:
        return [int(v) for v in attr.ints]


class _TensorKind(AttributeKind):
    attr_type = AttributeType.TENSOR

    def extract(
        self, attr: AttributeDescriptor, node: NodeDescriptor
    ) -> TensorDescriptor:
        if attr.t is None:
            raise MissingAttributeError(attr.name, node=node)
        return attr.t


INT = _IntKind()
FLOAT = _FloatKind()
STRING = _StringKind()
INTS = _IntsKind()
TENSOR = _TensorKind()


def _check_type(
    attr: AttributeDescriptor, kind: AttributeKind, node: NodeDescriptor
) -> None:
    if attr.type != kind.attr_type:
        raise AttributeTypeMismatchError(
            attr.name,
            expected=kind.attr_type.name,
            received=_type_name(attr.type),
            node=node,
        )


def require_attr(node: NodeDescriptor, name: str, kind: AttributeKind) -> Any:
    """
    Get a required attribute value.

    Raises:
        MissingAttributeError: If the node has no attribute with this name.
        AttributeTypeMismatchError: If the attribute has another declared type.
    """
    attr = node.find_attribute(name)
    if attr is None:
        raise MissingAttributeError(name, node=node)
    _check_type(attr, kind, node)
    return kind.extract(attr, node)


def optional_attr(node: NodeDescriptor, name: str, kind: AttributeKind) -> Any:
    """
    Get an optional attribute value, or None when absent.

    Raises:
        AttributeTypeMismatchError: If the attribute has another declared type.
    """
    attr = node.find_attribute(name)
    if attr is None:
        return None
    _check_type(attr, kind, node)
    return kind.extract(attr, node)


_REQUIRED = object()


class NodeAttributes:
    """
    Per-node attribute reader with one typed getter per representation.

    Omitting ``default`` makes the attribute required; any default, including
    None, makes it optional.

    Example:
        attrs = NodeAttributes(node)
        axis = attrs.get_int("axis")               # required
        eps = attrs.get_float("epsilon", 1e-5)     # optional
        perm = attrs.get_ints("perm", None)        # optional, None if absent
    """

    REQUIRED = _REQUIRED

    def __init__(self, node: NodeDescriptor):
        self.node = node

    def _get(self, name: str, kind: AttributeKind, default: Any) -> Any:
        if default is _REQUIRED:
            return require_attr(self.node, name, kind)
        value = optional_attr(self.node, name, kind)
        return default if value is None else value

    def get_int(self, name: str, default: Any = _REQUIRED) -> Optional[int]:
        return self._get(name, INT, default)

    def get_float(self, name: str, default: Any = _REQUIRED) -> Optional[float]:
        return self._get(name, FLOAT, default)

    def get_string(self, name: str, default: Any = _REQUIRED) -> Optional[str]:
        return self._get(name, STRING, default)

    def get_ints(self, name: str, default: Any = _REQUIRED) -> Optional[List[int]]:
        return self._get(name, INTS, default)

    def get_tensor(
        self, name: str, default: Any = _REQUIRED
    ) -> Optional[TensorDescriptor]:
        return self._get(name, TENSOR, default)

    def has(self, name: str) -> bool:
        return self.node.has_attr(name)

    def __repr__(self) -> str:
        names = [a.name for a in self.node.attributes]
        return f"NodeAttributes(node='{self.node.name}', attributes={names})"
