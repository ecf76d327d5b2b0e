from typing import Any, List, Optional, TypedDict, Union

from lark import Lark, Token, Transformer

import os

grammar_path = os.path.join(os.path.dirname(__file__), "asm.lark")
with open(grammar_path, "r") as f:
    asm_grammar = f.read()

asm_parser = Lark(asm_grammar, parser="lalr", maybe_placeholders=False)


class DirectiveNode(TypedDict):
    directive: str
    args: List[str]
    line: int
    comment: Optional[str]


class InstructionNode(TypedDict):
    mnemonic: str
    operands: List[str]
    line: int
    comment: Optional[str]


StatementNode = Union[DirectiveNode, InstructionNode]


class ProgramNode(TypedDict):
    lines: List[StatementNode]


def _comment_text(token: Token) -> Optional[str]:
    text = str(token)[1:].strip()
    return text or None


class AsmTransformer(Transformer):
    def start(self, items: List[Any]) -> ProgramNode:
        # Drop comment-only and empty lines
        return {"lines": [item for item in items if item is not None]}

    def blank(self, _: List[Any]) -> None:
        return None

    def statement(self, items: List[Token]) -> StatementNode:
        comment: Optional[str] = None
        if items[-1].type == "COMMENT":
            comment = _comment_text(items[-1])
            items = items[:-1]
        head, *rest = items
        if head.startswith("."):
            return {
                "directive": str(head),
                "args": [str(tok) for tok in rest],
                "line": head.line or 0,
                "comment": comment,
            }
        return {
            "mnemonic": str(head),
            "operands": [str(tok) for tok in rest],
            "line": head.line or 0,
            "comment": comment,
        }


def parse_source(source_text: str) -> ProgramNode:
    if not source_text.endswith("\n"):
        source_text += "\n"
    tree = asm_parser.parse(source_text)
    return AsmTransformer().transform(tree)
