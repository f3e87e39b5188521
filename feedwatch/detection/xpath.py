"""Translate a constrained XPath dialect into CSS selectors.

Supported:

- ``//tag`` and ``//*``
- ``//tag[@attr='v']``, ``//tag[contains(@attr,'v')]``,
  ``//tag[starts-with(@attr,'v')]``, ``//tag[@attr]``
- ``//tag[contains(text(),'v')]``
- ``//a[subtag]`` (has a ``subtag`` descendant)
- ``//tag[n]`` and ``//tag[last()]``
- predicate terms joined with ``and``
- ``//`` (descendant) and ``/`` (child) between steps
- a trailing ``/@attr`` (extract that attribute) or ``/text()``
- unions of full expressions with ``|``

Quoted literals are swapped for placeholders before any rewriting and
restored once the CSS has been assembled, so their contents never take part
in the structural rewriting.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from feedwatch.errors import XPathTranslationError

_LITERAL_RE = re.compile(r"'[^']*'|\"[^\"]*\"")
_PLACEHOLDER = "__LIT{}__"
_PLACEHOLDER_RE = re.compile(r"__LIT(\d+)__")

_NAME = r"[A-Za-z_][\w.-]*"
_ATTR_SUFFIX_RE = re.compile(rf"/+@({_NAME})$")
_TEXT_SUFFIX_RE = re.compile(r"/text\(\)$")
_STEP_RE = re.compile(rf"^({_NAME}|\*)((?:\[[^\[\]]*\])*)$")
_PREDICATE_RE = re.compile(r"\[([^\[\]]*)\]")
_AND_RE = re.compile(r"\s+and\s+")

_LIT = r"(__LIT\d+__)"
_TERM_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(rf"^@({_NAME})\s*=\s*{_LIT}$"), '[{0}={1}]'),
    (re.compile(rf"^contains\(\s*@({_NAME})\s*,\s*{_LIT}\s*\)$"), '[{0}*={1}]'),
    (re.compile(rf"^starts-with\(\s*@({_NAME})\s*,\s*{_LIT}\s*\)$"), '[{0}^={1}]'),
    (re.compile(r"^contains\(\s*(?:text\(\)|\.)\s*,\s*" + _LIT + r"\s*\)$"), ":-soup-contains({0})"),
    (re.compile(rf"^@({_NAME})$"), "[{0}]"),
    (re.compile(r"^(\d+)$"), ":nth-of-type({0})"),
    (re.compile(r"^last\(\)$"), ":last-of-type"),
    (re.compile(rf"^(?:\.//)?({_NAME})$"), ":has({0})"),
]


@dataclass(frozen=True)
class TranslatedSelector:
    """A CSS selector plus what to read from the elements it matches."""

    selector: str
    is_attr: bool = False
    attr_name: str | None = None


def looks_like_xpath(selector: str) -> bool:
    """Tell XPath from CSS: CSS never uses ``/`` or ``@`` outside quoted values."""
    bare = _LITERAL_RE.sub("", selector).strip()
    if not bare:
        return False
    return bare[0] in "/(" or "/" in bare or "@" in bare


def xpath_to_css(xpath: str) -> TranslatedSelector:
    """Translate *xpath* into a CSS selector.

    Raises ``XPathTranslationError`` for anything outside the supported subset.
    """
    expr = _strip_outer_parens(xpath.strip())
    if not expr:
        raise XPathTranslationError("empty XPath expression")

    branches = _split_union(expr)
    if len(branches) > 1:
        results = [xpath_to_css(branch) for branch in branches]
        attr_name = next((r.attr_name for r in results if r.attr_name), None)
        return TranslatedSelector(
            selector=", ".join(r.selector for r in results),
            is_attr=any(r.is_attr for r in results),
            attr_name=attr_name,
        )

    return _translate_path(expr)


def _split_union(expr: str) -> list[str]:
    """Split on ``|`` outside quotes, brackets and parentheses."""
    parts: list[str] = []
    depth = 0
    quote = ""
    start = 0
    for i, ch in enumerate(expr):
        if quote:
            if ch == quote:
                quote = ""
        elif ch in "'\"":
            quote = ch
        elif ch in "[(":
            depth += 1
        elif ch in "])":
            depth -= 1
        elif ch == "|" and depth == 0:
            parts.append(expr[start:i])
            start = i + 1
    parts.append(expr[start:])
    return [_strip_outer_parens(p.strip()) for p in parts]


def _strip_outer_parens(expr: str) -> str:
    while expr.startswith("(") and expr.endswith(")") and _closing_paren(expr) == len(expr) - 1:
        expr = expr[1:-1].strip()
    return expr


def _closing_paren(expr: str) -> int:
    depth = 0
    quote = ""
    for i, ch in enumerate(expr):
        if quote:
            if ch == quote:
                quote = ""
        elif ch in "'\"":
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i
    return -1


def _protect_literals(expr: str) -> tuple[str, list[str]]:
    values: list[str] = []

    def _swap(match: re.Match[str]) -> str:
        values.append(match.group(0)[1:-1])
        return _PLACEHOLDER.format(len(values) - 1)

    protected = _LITERAL_RE.sub(_swap, expr)
    if "'" in protected or '"' in protected:
        raise XPathTranslationError(f"unterminated string literal in {expr!r}")
    return protected, values


def _restore_literals(css: str, values: list[str]) -> str:
    def _restore(match: re.Match[str]) -> str:
        value = values[int(match.group(1))]
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'

    return _PLACEHOLDER_RE.sub(_restore, css)


def _translate_path(expr: str) -> TranslatedSelector:
    protected, values = _protect_literals(expr)

    attr_name = None
    attr_match = _ATTR_SUFFIX_RE.search(protected)
    if attr_match:
        attr_name = attr_match.group(1)
        protected = protected[: attr_match.start()]
    else:
        protected = _TEXT_SUFFIX_RE.sub("", protected)

    anchored = protected.startswith("/") and not protected.startswith("//")
    protected = protected.lstrip("/")
    if not protected:
        raise XPathTranslationError(f"no element step in {expr!r}")

    css_parts: list[str] = []
    for index, (combinator, step) in enumerate(_split_steps(protected)):
        css_step = _translate_step(step, expr)
        if index == 0:
            if anchored:
                css_step += ":root"
            css_parts.append(css_step)
        else:
            css_parts.append(combinator + css_step)

    css = _restore_literals("".join(css_parts), values)
    return TranslatedSelector(selector=css, is_attr=attr_name is not None, attr_name=attr_name)


def _split_steps(path: str) -> list[tuple[str, str]]:
    """Split a location path into ``(combinator, step)`` pairs.

    ``//`` becomes the descendant combinator, ``/`` the child combinator.
    """
    steps: list[tuple[str, str]] = []
    depth = 0
    combinator = " "
    current = ""
    i = 0
    while i < len(path):
        ch = path[i]
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
        if ch == "/" and depth == 0:
            steps.append((combinator, current))
            if path.startswith("//", i):
                combinator = " "
                i += 2
            else:
                combinator = " > "
                i += 1
            current = ""
            continue
        current += ch
        i += 1
    steps.append((combinator, current))
    return steps


def _translate_step(step: str, expr: str) -> str:
    match = _STEP_RE.match(step.strip())
    if not match:
        raise XPathTranslationError(f"unsupported step {step!r} in {expr!r}")

    tag, predicates = match.groups()
    css = tag
    for predicate in _PREDICATE_RE.findall(predicates):
        for term in _AND_RE.split(predicate.strip()):
            css += _translate_term(term.strip(), expr)
    return css


def _translate_term(term: str, expr: str) -> str:
    for pattern, template in _TERM_PATTERNS:
        match = pattern.match(term)
        if match:
            return template.format(*match.groups())
    raise XPathTranslationError(f"unsupported predicate [{term}] in {expr!r}")
