#!/usr/bin/env python3
# cipherkeep/interface/parser.py
from __future__ import annotations

"""
Argument parsing helpers for commands.

Responsibilities:
- Tokenize a command line into shell-like tokens.
- Bind tokens to a callable signature with type coercion based on annotations.
- Render compact Usage strings from a function signature.

The `ctx` parameter is never bound from user input; the dispatcher injects it.
"""

import inspect
import shlex
from typing import Any, get_args, get_origin

from cipherkeep.commands import CONTEXT_PARAM

_TRUE_WORDS = ("1", "true", "yes", "y", "on")


def tokenize(command_line: str) -> list[str]:
    """Split a raw command line into tokens using POSIX rules."""
    return shlex.split(command_line, posix=True)


def _coerce_value(text_value: str, annotation: Any) -> Any:
    """
    Convert a string to the annotated type when reasonable.

    With postponed annotations the annotation is usually a string ('int',
    'bool'); both forms are accepted.
    """
    if annotation in (bool, "bool"):
        return text_value.lower() in _TRUE_WORDS
    if annotation in (int, "int"):
        try:
            return int(text_value)
        except ValueError as exc:
            raise TypeError(f"Expected an integer, got {text_value!r}.") from exc
    return text_value


def _user_parameters(func: Any) -> list[inspect.Parameter]:
    return [p for p in inspect.signature(func).parameters.values()
            if p.name != CONTEXT_PARAM]


def bind_args(func: Any, tokens: list[str]) -> tuple[tuple[Any, ...], dict[str, Any]]:
    """
    Bind a flat token list to the signature of `func`.

    Supports:
        - positional tokens
        - key=value tokens for keyword-only or normal parameters
        - *args (VAR_POSITIONAL)
    """
    parameters = _user_parameters(func)
    known = {p.name for p in parameters}

    positional_tokens: list[str] = []
    kw_tokens_raw: dict[str, str] = {}
    for token in tokens:
        key, sep, value = token.partition("=")
        # Only split on '=' for real parameter names; entry names may contain '='
        if sep and key in known:
            kw_tokens_raw[key] = value
        else:
            positional_tokens.append(token)

    bound_positional: list[Any] = []
    bound_keywords: dict[str, Any] = {}
    positional_index = 0
    var_positional: inspect.Parameter | None = None

    for parameter in parameters:
        if parameter.kind is parameter.VAR_POSITIONAL:
            var_positional = parameter
            continue

        if parameter.kind in (parameter.POSITIONAL_ONLY, parameter.POSITIONAL_OR_KEYWORD):
            if parameter.name in kw_tokens_raw:
                bound_keywords[parameter.name] = _coerce_value(
                    kw_tokens_raw[parameter.name], parameter.annotation)
            elif positional_index < len(positional_tokens):
                bound_positional.append(_coerce_value(
                    positional_tokens[positional_index], parameter.annotation))
                positional_index += 1
            elif parameter.default is not inspect._empty:
                bound_positional.append(parameter.default)
            else:
                raise TypeError(f"Missing required argument: {parameter.name}")
        elif parameter.kind is parameter.KEYWORD_ONLY:
            if parameter.name in kw_tokens_raw:
                bound_keywords[parameter.name] = _coerce_value(
                    kw_tokens_raw[parameter.name], parameter.annotation)
            elif parameter.default is inspect._empty:
                raise TypeError(f"Missing required keyword-only argument: {parameter.name}")

    if var_positional is not None:
        element = str
        args_ = get_args(var_positional.annotation) or ()
        if get_origin(var_positional.annotation) is tuple and args_:
            element = args_[0]
        bound_positional.extend(
            _coerce_value(item, element) for item in positional_tokens[positional_index:])
    elif positional_index < len(positional_tokens):
        raise TypeError("Too many positional arguments.")

    # A keyword-bound positional parameter forces the rest to keywords
    if bound_keywords and any(p.kind is p.POSITIONAL_OR_KEYWORD and p.name in bound_keywords
                              for p in parameters):
        return _all_keywords(parameters, bound_positional, bound_keywords)
    return tuple(bound_positional), bound_keywords


def _all_keywords(
    parameters: list[inspect.Parameter],
    positional: list[Any],
    keywords: dict[str, Any],
) -> tuple[tuple[Any, ...], dict[str, Any]]:
    values = iter(positional)
    merged = dict(keywords)
    for parameter in parameters:
        if parameter.kind is parameter.VAR_POSITIONAL:
            break
        if parameter.kind is parameter.POSITIONAL_OR_KEYWORD and parameter.name not in merged:
            merged[parameter.name] = next(values)
    return (), merged


def build_usage(command_name: str, func: Any) -> str:
    """
    Render a compact usage string based on `func` signature.

    Example:
        'put <name> [length=...]'
    """
    usage_parts: list[str] = []
    for parameter in _user_parameters(func):
        if parameter.kind is parameter.VAR_POSITIONAL:
            usage_parts.append(f"[{parameter.name}...]")
        elif parameter.kind is parameter.KEYWORD_ONLY:
            usage_parts.append(f"[{parameter.name}=...]")
        elif parameter.default is inspect._empty:
            usage_parts.append(f"<{parameter.name}>")
        else:
            usage_parts.append(f"[{parameter.name}]")
    return f"{command_name} " + " ".join(usage_parts) if usage_parts else command_name
