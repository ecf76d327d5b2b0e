from __future__ import annotations

from typing import List, Tuple

from hypothesis import strategies as st

from gpifasm.config import Configuration, FlagSelect
from gpifasm.constants import MAX_COUNT, MIN_COUNT, NUM_STATES, TERMINAL_STATE
from gpifasm.operands import LOGIC_FUNCTIONS, legal_operands, legal_output_pins

NDP_FLAGS = "S+GDN"

Program = Tuple[Configuration, List[str]]


@st.composite
def configurations(draw) -> Configuration:
    return Configuration(
        tristate_control=draw(st.integers(0, 1)),
        ready_config_5=draw(st.integers(0, 1)),
        ready_config_7=draw(st.integers(0, 1)),
        flag_select=draw(st.sampled_from(list(FlagSelect))),
        endpoint=draw(st.sampled_from([2, 4, 6, 8])),
        waveform_id=draw(st.integers(0, 3)),
    )


def directive_lines(config: Configuration) -> List[str]:
    return [f"{directive} {value}" for directive, value in config.describe()]


def _flag_chars(draw) -> str:
    chosen = draw(st.lists(st.sampled_from(NDP_FLAGS), unique=True))
    return "".join(char for char in NDP_FLAGS if char in chosen)


def _pins(draw, config: Configuration) -> List[str]:
    legal = legal_output_pins(config.tristate_control)
    return draw(st.lists(st.sampled_from(legal), unique=True, max_size=len(legal)))


@st.composite
def counted_states(draw, config: Configuration) -> str:
    mnemonic = _flag_chars(draw) or "-"
    operands: List[str] = []
    if draw(st.booleans()):
        operands.append(str(draw(st.integers(MIN_COUNT, MAX_COUNT))))
    operands.extend(_pins(draw, config))
    return " ".join([mnemonic, *operands])


@st.composite
def decision_points(draw, config: Configuration, total: int) -> str:
    mnemonic = "J" + _flag_chars(draw)
    if draw(st.booleans()):
        mnemonic += "*"
    terms = legal_operands(config)
    targets = st.sampled_from(sorted(set(range(min(total, TERMINAL_STATE) + 1)) | {TERMINAL_STATE}))
    operands = [
        draw(st.sampled_from(terms)),
        draw(st.sampled_from(list(LOGIC_FUNCTIONS))),
        draw(st.sampled_from(terms)),
        *_pins(draw, config),
        f"${draw(targets)}",
        f"${draw(targets)}",
    ]
    return " ".join([mnemonic, *operands])


@st.composite
def programs(draw) -> Program:
    config = draw(configurations())
    total = draw(st.integers(1, NUM_STATES))
    states = [
        draw(st.one_of(counted_states(config), decision_points(config, total)))
        for _ in range(total)
    ]
    return config, states
