# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Evaluation Configuration

Example:
    from onnx_eval import EvalConfig, simple_eval

    config = EvalConfig(release_intermediates=True)
    outputs = simple_eval(model, {"x": x}, config=config)
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .observability.logger import VERBOSITY_ENV

_FALSE_VALUES = ("0", "false", "no", "off")


def _env_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() not in _FALSE_VALUES


@dataclass
class EvalConfig:
    """
    Configuration for graph evaluation.

    Attributes:
        validate_inputs: Check caller inputs against declared dtype/shape.
        check_graph_order: Reject graphs whose nodes consume a value that
            only a later node produces.
        release_intermediates: Drop values after their last consumer.
            Graph outputs are never dropped.
        verbose: Verbosity level applied to the logger when set
            (0=SILENT .. 4=DEBUG).
    """

    validate_inputs: bool = True
    check_graph_order: bool = True
    release_intermediates: bool = False
    verbose: Optional[int] = None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "EvalConfig":
        """
        Build a config from ONNX_EVAL_* environment variables.

        Unset variables keep the dataclass defaults.
        """
        env = os.environ if env is None else env

        verbose = None
        raw_verbosity = env.get(VERBOSITY_ENV)
        if raw_verbosity is not None and raw_verbosity.strip():
            verbose = int(raw_verbosity)

        return cls(
            validate_inputs=_env_flag(env, "ONNX_EVAL_VALIDATE_INPUTS", True),
            check_graph_order=_env_flag(env, "ONNX_EVAL_CHECK_ORDER", True),
            release_intermediates=_env_flag(
                env, "ONNX_EVAL_RELEASE_INTERMEDIATES", False
            ),
            verbose=verbose,
        )
