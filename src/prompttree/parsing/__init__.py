"""
Formula parsing for conditional prompt nodes.

This package provides the tokenizer, parser and evaluator for the Excel-like
boolean expressions used by conditional components.
"""

from prompttree.parsing.formula import (
    MAX_NESTING,
    MAX_TREE_DEPTH,
    Binary,
    Call,
    FormulaNode,
    FormulaParser,
    Identifier,
    Literal,
    Token,
    Unary,
    evaluate_condition,
    evaluate_formula,
    is_truthy,
    parse_formula,
    tokenize,
)

__all__ = [
    "MAX_NESTING",
    "MAX_TREE_DEPTH",
    "FormulaNode",
    "FormulaParser",
    "Literal",
    "Identifier",
    "Call",
    "Unary",
    "Binary",
    "Token",
    "tokenize",
    "parse_formula",
    "evaluate_formula",
    "evaluate_condition",
    "is_truthy",
]
