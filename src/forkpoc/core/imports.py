# src/forkpoc/core/imports.py
import re
from typing import List, Optional, Tuple

from forkpoc.errors import ImportSyntaxError
from forkpoc.models import ImportDirective, Line, Passthrough, SourceFile

# The keyword followed by whitespace, a symbol list, '*' or the path itself
_IMPORT_START_RE = re.compile(r"[ \t]*import(?=[\s{*\"'])")


def is_import_start(line: str) -> bool:
    return _IMPORT_START_RE.match(line) is not None


def _scan_statement(text: str, pos: int) -> Optional[Tuple[int, Optional[Tuple[int, int]]]]:
    """
    Scans from just after the keyword to the terminating ';', skipping
    comments and string literals. Returns (index of ';', span of the first
    quoted literal or None), or None when text ends before the statement does.
    """
    quoted = None
    i = pos
    while i < len(text):
        if text.startswith("//", i):
            i = text.find("\n", i)
            if i == -1:
                return None
            continue
        if text.startswith("/*", i):
            close = text.find("*/", i + 2)
            if close == -1:
                return None
            i = close + 2
            continue

        c = text[i]
        if c in "\"'":
            close = text.find(c, i + 1)
            if close == -1:
                return None
            if quoted is None:
                quoted = (i, close + 1)
            i = close + 1
            continue
        if c == ";":
            return i, quoted
        i += 1
    return None


def parse_lines(lines: List[str], path: str = "<memory>") -> List[Line]:
    """
    Splits physical lines into ImportDirective and Passthrough entries.
    A statement runs from its keyword to its own ';', so a multi-line symbol
    list comes back as one directive and several imports sharing a line come
    back as several. The last directive on a line keeps the rest of that line.
    """
    parsed: List[Line] = []
    i = 0
    while i < len(lines):
        if not is_import_start(lines[i]):
            parsed.append(Passthrough(lines[i]))
            i += 1
            continue

        first_line = i
        span = lines[i]
        i += 1
        pos = 0
        while True:
            keyword = _IMPORT_START_RE.match(span, pos)
            found = _scan_statement(span, keyword.end())
            while found is None and i < len(lines):
                span += lines[i]
                i += 1
                found = _scan_statement(span, keyword.end())

            line_no = first_line + span.count("\n", 0, pos) + 1
            if found is None or found[1] is None:
                raise ImportSyntaxError(path, line_no, span[pos:])

            end, (q_start, q_stop) = found
            target = span[q_start + 1:q_stop - 1]
            if not target:
                raise ImportSyntaxError(path, line_no, span[pos:])

            if _IMPORT_START_RE.match(span, end + 1) is None:
                parsed.append(ImportDirective(path=target, line_no=line_no, text=span[pos:]))
                break
            parsed.append(ImportDirective(path=target, line_no=line_no, text=span[pos:end + 1]))
            pos = end + 1
    return parsed


def parse_source(source: SourceFile) -> List[Line]:
    return parse_lines(source.lines, source.path)


def rewrite_directive(directive: ImportDirective) -> str:
    """Points the directive at ./<basename>, keeping symbol and alias clauses."""
    keyword = _IMPORT_START_RE.match(directive.text)
    found = _scan_statement(directive.text, keyword.end()) if keyword else None
    if found is None or found[1] is None:
        raise ImportSyntaxError("<memory>", directive.line_no, directive.text)
    q_start, q_stop = found[1]
    return f"{directive.text[:q_start]}\"./{directive.basename}\"{directive.text[q_stop:]}"


def rewrite_source(source: SourceFile) -> SourceFile:
    """Returns a copy of source whose imports all reference same-directory siblings."""
    out: List[str] = []
    for entry in parse_source(source):
        if isinstance(entry, ImportDirective):
            out.append(rewrite_directive(entry))
        else:
            out.append(entry.text)
    return SourceFile(path=source.path, content="".join(out))
