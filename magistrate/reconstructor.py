"""Build instances for deserialization without running normal initialization."""

from __future__ import annotations

import inspect
import types

_TAG_NAME = "SerializeConstructTag"


class SerializeConstructTag:
    """Marker passed to constructors that build an object for deserialization."""


class ReconstructionError(TypeError):
    """Raised when no way to construct a class for deserialization exists."""


def _is_tag_annotation(annotation) -> bool:
    if annotation is SerializeConstructTag:
        return True
    if isinstance(annotation, str):
        text = annotation.strip().strip("'\"")
        return text == _TAG_NAME or text.endswith("." + _TAG_NAME)
    return False


def _takes_tag(cls: type) -> bool:
    init = cls.__init__
    if init is object.__init__:
        return False
    annotations = dict(getattr(init, "__annotations__", {}) or {})
    annotations.pop("return", None)
    return any(_is_tag_annotation(h) for h in annotations.values())


def _default_constructible(cls: type) -> bool:
    init = cls.__init__
    if init is object.__init__:
        return True
    if not isinstance(init, types.FunctionType):
        # Built-in initializers cannot be examined; try them directly.
        try:
            cls()
        except TypeError:
            return False
        return True
    code = init.__code__
    positional = code.co_argcount - 1  # without self
    defaults = len(init.__defaults__ or ())
    if positional - defaults > 0:
        return False
    kwonly_names = code.co_varnames[code.co_argcount:code.co_argcount + code.co_kwonlyargcount]
    kwdefaults = init.__kwdefaults__ or {}
    return all(name in kwdefaults for name in kwonly_names)


def construct(cls: type):
    """Construct ``cls``: tagged constructor, then ``reconstruct()``, then default."""
    if inspect.isabstract(cls):
        raise ReconstructionError(f"cannot reconstruct abstract class {cls.__qualname__}")
    if _takes_tag(cls):
        return cls(SerializeConstructTag())
    reconstruct = getattr(cls, "reconstruct", None)
    if callable(reconstruct):
        return reconstruct()
    if _default_constructible(cls):
        return cls()
    raise ReconstructionError(
        "Either a default constructor, reconstruct() function, or tagged "
        "constructor are required for de-serialization"
    )


def construct_allow_fail(cls: type):
    """Like :func:`construct`, with a failure message naming the class."""
    try:
        return construct(cls)
    except ReconstructionError as exc:
        raise ReconstructionError(
            f"Checkpoint is failing to reconstruct a class {cls.__qualname__}, due to "
            "it being abstract or the absence of a suitable constructor (default or "
            "tagged) or reconstruct()"
        ) from exc