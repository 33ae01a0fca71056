from typing import Union


def _balanced_end(text: str, start: int) -> Union[int, None]:
    """Index of the brace closing the one at ``start``, skipping JSON strings."""
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def extract_answers_json(text: str) -> Union[str, None]:
    """Return the first balanced ``{...}`` block mentioning ``"answers"``.

    Models wrap their JSON in prose or code fences; anything before or after the
    object is ignored.
    """
    start = text.find("{")
    while start != -1:
        end = _balanced_end(text, start)
        if end is not None:
            candidate = text[start : end + 1]
            if '"answers"' in candidate:
                return candidate
            start = text.find("{", end + 1)
        else:
            start = text.find("{", start + 1)
    return None
