from __future__ import annotations

import re
from typing import Union

from app.common.errors import BadRequestError
from app.features.judge0.languages import Language, LanguageSpec, resolve_language

_ENTRY_POINT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_JAVA_PUBLIC_RE = re.compile(r"public ")


def _check_entry_point(entry_point: str) -> str:
    if not entry_point or not _ENTRY_POINT_RE.fullmatch(entry_point):
        raise BadRequestError(f"invalid entry point: {entry_point!r}")
    return entry_point


def wrap_javascript(entry_point: str, user_code: str) -> str:
    return "\n".join([
        'const fs = require("fs");',
        'const __judgeInput = fs.readFileSync(0, "utf8").trim();',
        "",
        user_code,
        "",
        f'const __judgeResult = typeof {entry_point} === "function"',
        f"  ? {entry_point}(__judgeInput)",
        "  : undefined;",
        "",
        "if (__judgeResult !== undefined) {",
        "  console.log(String(__judgeResult));",
        "}",
        "",
    ])


def wrap_typescript(entry_point: str, user_code: str) -> str:
    return "declare const require: any;\n" + wrap_javascript(entry_point, user_code)


def wrap_python(entry_point: str, user_code: str) -> str:
    return "\n".join([
        "import sys",
        "",
        user_code,
        "",
        "input_data = sys.stdin.read().strip()",
        f"result = {entry_point}(input_data)",
        "print(str(result).lower())",
        "",
    ])


def wrap_java(entry_point: str, user_code: str) -> str:
    # Only the first ``public `` is touched; left alone when it is already static
    body = user_code
    first = _JAVA_PUBLIC_RE.search(user_code)
    if first is not None and not user_code.startswith("static ", first.end()):
        body = user_code[:first.start()] + "public static " + user_code[first.end():]
    return "\n".join([
        "import java.util.*;",
        "",
        "public class Main {",
        "",
        body,
        "",
        "  public static void main(String[] args) {",
        "    Scanner sc = new Scanner(System.in);",
        '    String input = sc.hasNextLine() ? sc.nextLine().trim() : "";',
        f"    Object result = {entry_point}(input);",
        "    System.out.println(String.valueOf(result));",
        "  }",
        "}",
        "",
    ])


def wrap_code(language: Union[str, Language, LanguageSpec], entry_point: str, user_code: str) -> str:
    """Turn a user-authored function into a standalone stdin -> stdout program.

    The user code is embedded verbatim (java aside, see ``wrap_java``); the
    generated harness reads stdin, calls ``entry_point`` and prints the
    result. Python prints the lower-cased string form, so booleans compare
    against plain ``true``/``false`` expected output.
    """
    spec = resolve_language(language)
    if user_code is None or not user_code.strip():
        raise BadRequestError("source code must not be empty")
    return spec.wrap(_check_entry_point(entry_point), user_code)


__all__ = ["wrap_code", "wrap_javascript", "wrap_typescript", "wrap_python", "wrap_java"]
