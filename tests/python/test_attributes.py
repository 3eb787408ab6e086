# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Tests for typed attribute access.
"""

import pytest

from onnx_eval.core import (
    AttributeDescriptor,
    AttributeType,
    NodeDescriptor,
    TensorDescriptor,
    make_attribute,
    make_node,
)
from onnx_eval.errors import AttributeTypeMismatchError, MissingAttributeError
from onnx_eval.execution.attributes import (
    FLOAT,
    INT,
    INTS,
    STRING,
    TENSOR,
    NodeAttributes,
    optional_attr,
    require_attr,
)


class TestMakeAttribute:
    """Declared types are inferred from Python values."""

    def test_scalar_types(self):
        assert make_attribute("axis", 1).type == AttributeType.INT
        assert make_attribute("training_mode", True).i == 1
        assert make_attribute("epsilon", 1e-3).type == AttributeType.FLOAT
        assert make_attribute("auto_pad", "NOTSET").s == b"NOTSET"

    def test_list_types(self):
        assert make_attribute("perm", [1, 0]).type == AttributeType.INTS
        assert make_attribute("scales", [1, 2.5]).type == AttributeType.FLOATS
        assert make_attribute("names", ["a", b"b"]).strings == [b"a", b"b"]

    def test_tensor(self):
        attr = make_attribute("value", TensorDescriptor(dims=[1]))
        assert attr.type == AttributeType.TENSOR

    def test_unknown_type(self):
        with pytest.raises(TypeError):
            make_attribute("bad", object())


class TestRequireAttr:
    """Tests for require_attr."""

    def test_present(self):
        node = make_node("Concat", ["a", "b"], ["y"], axis=-1)
        assert require_attr(node, "axis", INT) == -1

    def test_missing(self):
        node = make_node("Concat", ["a", "b"], ["y"], name="cat")
        with pytest.raises(MissingAttributeError) as exc_info:
            require_attr(node, "axis", INT)
        assert exc_info.value.op_type == "Concat"
        assert exc_info.value.node_name == "cat"

    def test_type_mismatch(self):
        node = make_node("Concat", ["a", "b"], ["y"], name="cat", axis=1.0)
        with pytest.raises(AttributeTypeMismatchError) as exc_info:
            require_attr(node, "axis", INT)
        assert exc_info.value.expected == "INT"
        assert exc_info.value.received == "FLOAT"
        assert exc_info.value.node_name == "cat"

    def test_first_match_wins(self):
        node = NodeDescriptor(
            op_type="Softmax",
            name="sm",
            inputs=["x"],
            outputs=["y"],
            attributes=[make_attribute("axis", 0), make_attribute("axis", 1)],
        )
        assert require_attr(node, "axis", INT) == 0

    def test_ints_and_float(self):
        node = make_node(
            "BatchNormalization", ["x"], ["y"], epsilon=0.5, kernel_shape=[3, 3]
        )
        assert require_attr(node, "epsilon", FLOAT) == pytest.approx(0.5)
        assert require_attr(node, "kernel_shape", INTS) == [3, 3]

    def test_ints_returns_copy(self):
        node = make_node("Transpose", ["x"], ["y"], perm=[1, 0])
        perm = require_attr(node, "perm", INTS)
        perm.append(2)
        assert node.attributes[0].ints == [1, 0]

    def test_string_decoded(self):
        node = make_node("Gelu", ["x"], ["y"], approximate="tanh")
        assert require_attr(node, "approximate", STRING) == "tanh"

    def test_invalid_utf8(self):
        node = NodeDescriptor(
            op_type="Gelu",
            name="gelu",
            inputs=["x"],
            outputs=["y"],
            attributes=[
                AttributeDescriptor(
                    name="approximate", type=AttributeType.STRING, s=b"\xff\xfe"
                )
            ],
        )
        with pytest.raises(AttributeTypeMismatchError):
            require_attr(node, "approximate", STRING)

    def test_tensor(self):
        value = TensorDescriptor(name="c", dims=[2], float_data=[1.0, 2.0])
        node = make_node("Constant", [], ["y"], value=value)
        assert require_attr(node, "value", TENSOR) is value


class TestOptionalAttr:
    """Tests for optional_attr."""

    def test_absent_is_none(self):
        node = make_node("Softmax", ["x"], ["y"])
        assert optional_attr(node, "axis", INT) is None

    def test_type_mismatch_still_fails(self):
        node = make_node("Softmax", ["x"], ["y"], axis="last")
        with pytest.raises(AttributeTypeMismatchError):
            optional_attr(node, "axis", INT)


class TestNodeAttributes:
    """Tests for the per-node reader."""

    def test_required_by_default(self):
        attrs = NodeAttributes(make_node("Cast", ["x"], ["y"]))
        with pytest.raises(MissingAttributeError):
            attrs.get_int("to")

    def test_defaults(self):
        attrs = NodeAttributes(make_node("Conv", ["x", "w"], ["y"]))
        assert attrs.get_int("group", 1) == 1
        assert attrs.get_float("epsilon", 1e-5) == pytest.approx(1e-5)
        assert attrs.get_string("auto_pad", "NOTSET") == "NOTSET"
        assert attrs.get_ints("pads", None) is None
        assert attrs.get_tensor("value", None) is None

    def test_has(self):
        attrs = NodeAttributes(make_node("Conv", ["x", "w"], ["y"], group=2))
        assert attrs.has("group")
        assert not attrs.has("pads")
        assert "group" in repr(attrs)
