from typing import List, NamedTuple, Optional

import pytest

from .config import Configuration, FlagSelect
from .instr import Instruction, encode_instruction


def _instr(text: str) -> Instruction:
    mnemonic, *operands = text.split()
    return Instruction(mnemonic=mnemonic, operands=operands)


class EncodeCase(NamedTuple):
    test_id: str
    source: str
    expected: str  # branch, opcode, logic, output as hex
    total: int = 8
    config: Configuration = Configuration()


encode_cases: List[EncodeCase] = [
    EncodeCase("single_count_pin", "S 3 CTL0", "03200001"),
    EncodeCase("default_count", "S", "01200000"),
    EncodeCase("all_ndp_flags", "S+GDN", "013E0000"),
    EncodeCase("noop_placeholder", "-", "01000000"),
    EncodeCase("count_256", "D 256", "00020000"),
    EncodeCase("count_then_pins", "N 10 CTL1 CTL5", "0A040022"),
    EncodeCase("pins_then_count", "N CTL1 10", "0A040002"),
    EncodeCase("dp_basic", "J RDY0 AND RDY1 $2 $5", "2A010100", total=6),
    EncodeCase("dp_reexecute_pin", "J* RDY0 OR PF CTL1 $1 $7", "B9014602", total=2),
    EncodeCase("dp_nand", "JD RDY3 /AND RDY4 $0 $1", "0803DC00", total=2),
    EncodeCase("dp_pins_between_targets", "J RDY0 XOR RDY0 $1 CTL0 $0", "01018001", total=2),
    EncodeCase(
        "dp_tc_intrdy",
        "J TC AND INTRDY $7 $7",
        "3F012F00",
        total=1,
        config=Configuration(ready_config_5=1, flag_select=FlagSelect.FF, ready_config_7=1),
    ),
    EncodeCase(
        "tristate_pins",
        "S OE3 CTL0 OE0",
        "01200091",
        config=Configuration(tristate_control=1),
    ),
]


@pytest.mark.parametrize("case", encode_cases, ids=lambda c: c.test_id)
def test_encode(case: EncodeCase) -> None:
    instr = _instr(case.source)
    record = encode_instruction(instr, case.config, case.total)
    assert instr.errors == []
    assert record.hex() == case.expected
    assert instr.record is record


def test_decision_point_fields_match_example() -> None:
    instr = _instr("J RDY0 AND RDY1 $2 $5")
    record = encode_instruction(instr, Configuration(), 6)
    assert record.terma == 0b000
    assert record.termb == 0b001
    assert record.lfunc == 0b00
    assert record.branch0 == 2
    assert record.branch1 == 5


class ErrorCase(NamedTuple):
    test_id: str
    source: str
    errors: List[str]
    total: int = 8
    config: Optional[Configuration] = None


error_cases: List[ErrorCase] = [
    ErrorCase("unknown_char", "X", ["Unknown opcode 'X'"]),
    ErrorCase("collects_all_chars", "SXY", ["Unknown opcode 'X'", "Unknown opcode 'Y'"]),
    ErrorCase("reexecute_without_dp", "S*", ["Unknown opcode '*'"]),
    ErrorCase(
        "reexecute_before_dp",
        "*J RDY0 AND RDY1 $0 $0",
        ["Unknown opcode '*'"],
    ),
    ErrorCase("count_zero", "S 0", ["Invalid count value 0"]),
    ErrorCase("count_257", "S 257", ["Invalid count value 257"]),
    ErrorCase("count_suffix", "S 3x", ["Invalid count '3x'"]),
    ErrorCase("count_twice", "S 3 4", ["Count specified more than once at '4'"]),
    ErrorCase("count_trailing_non_ascii_digit", "S 3٣", ["Invalid count '3٣'"]),
    ErrorCase(
        "count_non_ascii_digit_is_a_pin",
        "S ٣",
        ["invalid operand '٣' (TRICTL=0)\n  Must be one of: CTL0 CTL1 CTL2 CTL3 CTL4 CTL5"],
    ),
    ErrorCase(
        "pin_wrong_namespace",
        "S OE0",
        ["invalid operand 'OE0' (TRICTL=0)\n  Must be one of: CTL0 CTL1 CTL2 CTL3 CTL4 CTL5"],
    ),
    ErrorCase(
        "pin_wrong_namespace_tristate",
        "S CTL4",
        [
            "invalid operand 'CTL4' (TRICTL=1)\n"
            "  Must be one of: CTL0 CTL1 CTL2 CTL3 OE0 OE1 OE2 OE3"
        ],
        config=Configuration(tristate_control=1),
    ),
    ErrorCase("dp_missing_operands", "J RDY0 AND", ["missing operand A func B"]),
    ErrorCase(
        "dp_one_target",
        "J RDY0 AND RDY1 $2",
        ["Branch0 and/or branch1 states were not specified."],
    ),
    ErrorCase(
        "dp_no_targets",
        "J RDY0 AND RDY1",
        ["Branch0 and/or branch1 states were not specified."],
    ),
    ErrorCase(
        "dp_three_targets",
        "J RDY0 AND RDY1 $1 $2 $3",
        ["Too many target states starting with '$3'"],
        total=3,
    ),
    ErrorCase(
        "dp_target_beyond_count",
        "J RDY0 AND RDY1 $5 $1",
        ["invalid target state '$5'"],
        total=4,
    ),
    ErrorCase("dp_target_8", "J RDY0 AND RDY1 $8 $1", ["invalid target state '$8'"]),
    ErrorCase("dp_target_not_numeric", "J RDY0 AND RDY1 $x $1", ["invalid target state '$x'"]),
    ErrorCase("dp_target_empty", "J RDY0 AND RDY1 $ $1", ["invalid target state '$'"]),
    ErrorCase(
        "dp_target_non_ascii_digit",
        "J RDY0 AND RDY1 $١ $7",
        ["invalid target state '$١'"],
    ),
    ErrorCase(
        "dp_bad_operand_a",
        "J TC AND RDY1 $1 $1",
        ["Invalid operand A 'TC'\n  Must be one of: RDY0 RDY1 RDY2 RDY3 RDY4 RDY5 PF"],
    ),
    ErrorCase(
        "dp_bad_operand_b",
        "J RDY0 AND EF $1 $1",
        ["Invalid operand B 'EF'\n  Must be one of: RDY0 RDY1 RDY2 RDY3 RDY4 RDY5 PF"],
    ),
    ErrorCase(
        "dp_bad_function",
        "J RDY0 NAND RDY1 $1 $1",
        ["Invalid function 'NAND'\n  Must be one of: AND OR XOR /AND"],
    ),
    ErrorCase(
        "dp_count_token_is_not_a_pin",
        "J RDY0 AND RDY1 3 $1 $1",
        ["invalid operand '3' (TRICTL=0)\n  Must be one of: CTL0 CTL1 CTL2 CTL3 CTL4 CTL5"],
    ),
]


@pytest.mark.parametrize("case", error_cases, ids=lambda c: c.test_id)
def test_encode_errors(case: ErrorCase) -> None:
    instr = _instr(case.source)
    encode_instruction(instr, case.config or Configuration(), case.total)
    assert instr.errors == case.errors
    assert instr.error == "\n".join(case.errors)
    # a record is produced regardless, so the listing can show it
    assert instr.record is not None


def test_terminal_state_always_legal() -> None:
    instr = _instr("J RDY0 AND RDY1 $7 $7")
    record = encode_instruction(instr, Configuration(), 1)
    assert instr.errors == []
    assert record.branch0 == record.branch1 == 7


def test_target_equal_to_count_is_legal() -> None:
    instr = _instr("J RDY0 AND RDY1 $4 $0")
    encode_instruction(instr, Configuration(), 4)
    assert instr.errors == []


def test_targets_default_to_terminal_state() -> None:
    instr = _instr("J RDY0 AND RDY1 $3")
    record = encode_instruction(instr, Configuration(), 8)
    assert record.branch0 == 3
    assert record.branch1 == 7


def test_errors_reset_on_reencode() -> None:
    instr = _instr("S OE0")
    encode_instruction(instr, Configuration(), 1)
    assert instr.errors
    encode_instruction(instr, Configuration(tristate_control=1), 1)
    assert instr.errors == []
    assert instr.record is not None and instr.record.output == 0x10
