"""Form data parsing and decoding: URL-encoded and multipart.

``parse_form_data`` turns a request body into an immutable ``FormData``
mapping. ``decode_form`` binds those values onto a form dataclass by
name tag::

    @dataclass
    class SnippetCreateForm(Validator):
        title: str = field(default="", metadata={"form": "title"})
        expires: int = field(default=365, metadata={"form": "expires"})

Two distinct failures come out of decoding. ``DecodeError`` means the
client sent something unusable (a missing field, ``expires=abc``) and
is answered with 400. ``InvalidDecoderError`` means the form class
itself is wrong (not a dataclass, unsupported field type); that is a
bug and is deliberately left to crash the request.
"""

import dataclasses
from collections.abc import Iterator, Mapping
from typing import Any, get_type_hints
from urllib.parse import parse_qs

from python_multipart.multipart import MultipartParser, parse_options_header

from snippetbox.errors import DecodeError, InvalidDecoderError

# Metadata key naming the submitted field; "-" excludes the attribute.
FORM_TAG = "form"
SKIP = "-"


class FormData(Mapping[str, str]):
    """Immutable parsed form data.

    ``__getitem__`` returns the first value for a key.
    ``get_list`` returns all values for a key.
    """

    __slots__ = ("_data",)

    def __init__(self, data: dict[str, list[str]] | None = None) -> None:
        object.__setattr__(self, "_data", data or {})

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"FormData({list(self._data)!r})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key, []))


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_form_data(body: bytes, content_type: str) -> FormData:
    """Parse a form body into ``FormData``.

    Supports ``application/x-www-form-urlencoded`` and
    ``multipart/form-data`` (text parts only; file parts are dropped).

    Raises:
        ValueError: If the content type is not a form encoding or the
            body is malformed.
    """
    ct_lower = content_type.lower().split(";")[0].strip()

    if ct_lower == "application/x-www-form-urlencoded":
        return _parse_urlencoded(body)

    if ct_lower == "multipart/form-data":
        return _parse_multipart(body, content_type)

    msg = f"Unsupported form content type: {content_type!r}"
    raise ValueError(msg)


def _parse_urlencoded(body: bytes) -> FormData:
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        msg = "Form body is not valid UTF-8"
        raise ValueError(msg) from exc
    return FormData(parse_qs(text, keep_blank_values=True))


def _parse_multipart(body: bytes, content_type: str) -> FormData:
    _, options = parse_options_header(content_type)
    boundary = options.get(b"boundary")
    if not boundary:
        msg = "Multipart form data missing boundary parameter"
        raise ValueError(msg)

    data: dict[str, list[str]] = {}
    part_name: str | None = None
    part_is_file = False
    part_data = bytearray()
    header_field = bytearray()
    header_value = bytearray()

    def on_part_begin() -> None:
        nonlocal part_name, part_is_file
        part_name = None
        part_is_file = False
        part_data.clear()

    def on_part_data(chunk: bytes, start: int, end: int) -> None:
        part_data.extend(chunk[start:end])

    def on_part_end() -> None:
        if part_name is None or part_is_file:
            return
        data.setdefault(part_name, []).append(part_data.decode("utf-8", errors="replace"))

    def on_header_field(chunk: bytes, start: int, end: int) -> None:
        header_field.extend(chunk[start:end])

    def on_header_value(chunk: bytes, start: int, end: int) -> None:
        header_value.extend(chunk[start:end])

    def on_header_end() -> None:
        nonlocal part_name, part_is_file
        if bytes(header_field).lower() == b"content-disposition":
            _, params = parse_options_header(bytes(header_value))
            name = params.get(b"name")
            if name is not None:
                part_name = name.decode("utf-8")
            part_is_file = b"filename" in params
        header_field.clear()
        header_value.clear()

    parser = MultipartParser(
        boundary,
        {
            "on_part_begin": on_part_begin,
            "on_part_data": on_part_data,
            "on_part_end": on_part_end,
            "on_header_field": on_header_field,
            "on_header_value": on_header_value,
            "on_header_end": on_header_end,
        },
    )
    try:
        parser.write(body)
        parser.finalize()
    except Exception as exc:
        msg = f"Malformed multipart body: {exc}"
        raise ValueError(msg) from exc
    return FormData(data)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

_CONVERTERS: dict[type, Any] = {
    str: str,
    int: int,
}


def form_fields(form_cls: type) -> list[tuple[str, str, type]]:
    """Return ``(attribute, submitted_name, type)`` for each decodable field.

    Raises ``InvalidDecoderError`` if *form_cls* is not a dataclass type
    or declares a decodable field of an unsupported type.
    """
    if not (isinstance(form_cls, type) and dataclasses.is_dataclass(form_cls)):
        msg = f"Form target must be a dataclass type, got {form_cls!r}"
        raise InvalidDecoderError(msg)

    hints = get_type_hints(form_cls)
    result: list[tuple[str, str, type]] = []
    for f in dataclasses.fields(form_cls):
        name = f.metadata.get(FORM_TAG, f.name)
        if name == SKIP or not f.init:
            continue
        hint = hints.get(f.name)
        if hint not in _CONVERTERS:
            msg = (
                f"{form_cls.__name__}.{f.name} has unsupported type {hint!r}; "
                f"form fields must be one of: {', '.join(t.__name__ for t in _CONVERTERS)}"
            )
            raise InvalidDecoderError(msg)
        result.append((f.name, name, hint))
    return result


def decode_form[T](values: Mapping[str, str], form_cls: type[T]) -> T:
    """Decode submitted *values* into a new *form_cls* instance.

    Every tagged field must be present. Strings are kept exactly as
    submitted so re-rendered forms echo the user's input.

    Raises:
        DecodeError: A declared field is missing or an integer field
            does not parse.
        InvalidDecoderError: *form_cls* cannot be decoded into at all.
    """
    kwargs: dict[str, Any] = {}
    for attr, name, hint in form_fields(form_cls):
        raw = values.get(name)
        if raw is None:
            raise DecodeError(name, "field is missing")
        try:
            kwargs[attr] = _CONVERTERS[hint](raw)
        except ValueError:
            raise DecodeError(name, f"expected {hint.__name__}") from None
    return form_cls(**kwargs)


async def decode_post_form[T](request: Any, form_cls: type[T]) -> T:
    """Parse the request body and decode it into *form_cls*.

    An unparseable body is reported as ``DecodeError`` like any other
    malformed input.
    """
    form_fields(form_cls)
    try:
        values = await request.form()
    except ValueError as exc:
        raise DecodeError("body", str(exc)) from exc
    return decode_form(values, form_cls)
