"""
Color-vision deficiency simulation.

The simulator backend sits behind a narrow protocol so callers, and tests,
depend only on the passthrough/failure policy implemented by ``simulate``,
never on a particular set of transform matrices.
"""

from enum import Enum
from typing import Iterable, List, Optional, Protocol, Union

import numpy as np
from loguru import logger

from .model import Color
from .parser import parse
from .spaces import linear_to_srgb, srgb_to_linear


class VisionKind(str, Enum):
    NORMAL = "normal"
    PROTANOPIA = "protanopia"
    DEUTERANOPIA = "deuteranopia"
    TRITANOPIA = "tritanopia"
    ACHROMATOPSIA = "achromatopsia"


class SimulationError(RuntimeError):
    """A vision transform failed for one color."""


class VisionSimulator(Protocol):
    def transform(self, color: Color, kind: VisionKind) -> Color:
        ...


# Machado et al. (2009), severity 1.0, applied to linear sRGB
DEFICIENCY_MATRICES = {
    VisionKind.PROTANOPIA: np.array([
        [0.152286, 1.052583, -0.204868],
        [0.114503, 0.786281, 0.099216],
        [-0.003882, -0.048116, 1.051998],
    ]),
    VisionKind.DEUTERANOPIA: np.array([
        [0.367322, 0.860646, -0.227968],
        [0.280085, 0.672501, 0.047413],
        [-0.011820, 0.042940, 0.968881],
    ]),
    VisionKind.TRITANOPIA: np.array([
        [1.255528, -0.076749, -0.178779],
        [-0.078411, 0.930809, 0.147602],
        [0.004733, 0.691367, 0.303900],
    ]),
}

LUMINANCE_WEIGHTS = np.array([0.2126, 0.7152, 0.0722])


class MatrixVisionSimulator:
    """Default backend: 3x3 transforms in linear light."""

    def transform(self, color: Color, kind: VisionKind) -> Color:
        kind = VisionKind(kind)
        linear = np.array([srgb_to_linear(c) for c in color.rgb])

        if kind is VisionKind.NORMAL:
            return color
        if kind is VisionKind.ACHROMATOPSIA:
            grey = float(LUMINANCE_WEIGHTS @ linear)
            simulated = np.array([grey, grey, grey])
        else:
            simulated = DEFICIENCY_MATRICES[kind] @ linear

        if not np.all(np.isfinite(simulated)):
            raise SimulationError(f"non-finite result for {color!r}")
        simulated = np.clip(simulated, 0.0, 1.0)
        return Color.from_unclipped(
            tuple(linear_to_srgb(float(c)) for c in simulated), color.alpha
        )


_default_simulator = MatrixVisionSimulator()

ColorInput = Union[Color, str]


def simulate(color: ColorInput, kind: Union[VisionKind, str],
             simulator: Optional[VisionSimulator] = None) -> ColorInput:
    """
    Show how ``color`` appears with a color-vision deficiency.

    Args:
        color: Color value or color string
        kind: normal, protanopia, deuteranopia, tritanopia or achromatopsia
        simulator: Optional backend, defaults to the matrix simulator

    Returns:
        Simulated color of the same type as the input (strings come back as
        hex). ``normal`` and any failure return the input unchanged; failures
        are logged, never raised.
    """
    if kind == VisionKind.NORMAL:
        return color

    simulator = simulator or _default_simulator
    try:
        kind = VisionKind(kind)
        value = parse(color) if isinstance(color, str) else color
        result = simulator.transform(value, kind)
    except Exception as exc:  # noqa: BLE001
        error = exc if isinstance(exc, SimulationError) else SimulationError(str(exc))
        logger.bind(color=str(color), kind=str(kind)).warning(
            f"Vision simulation failed, keeping original color: {error}"
        )
        return color

    return result.hex_key() if isinstance(color, str) else result


def simulate_many(colors: Iterable[ColorInput], kind: Union[VisionKind, str],
                  simulator: Optional[VisionSimulator] = None) -> List[ColorInput]:
    """Apply ``simulate`` to each color independently."""
    return [simulate(color, kind, simulator) for color in colors]
