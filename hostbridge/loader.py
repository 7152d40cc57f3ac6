"""Embedded program blob and the loader that turns it into a runnable unit.

A blob is either precompiled (the interpreter's 16-byte pyc header followed by
a marshalled code object) or UTF-8 source text. Launcher images carry the blob
between two boundary markers; an image without markers is the blob itself.
"""

from __future__ import annotations

import importlib.resources
import importlib.util
import logging
import marshal
import pathlib
from dataclasses import dataclass
from enum import Enum
from types import CodeType
from typing import Optional, Union

from hostbridge.runtime import ProgramUnit

log = logging.getLogger(__name__)

BLOB_START_MARKER = b"\x00HOSTBRIDGE-BLOB-START\x00"
BLOB_END_MARKER = b"\x00HOSTBRIDGE-BLOB-END\x00"

HEADER_SIZE = 16


class MalformedProgram(ValueError):
    """The blob looks precompiled but cannot be used as such."""


class LoadStatus(Enum):
    LOADED = "loaded"
    SYNTAX_ERROR = "syntax_error"
    MEMORY_ERROR = "memory_error"
    UNHANDLED_ERROR = "unhandled_error"


@dataclass(frozen=True)
class LoadResult:
    status: LoadStatus
    unit: Optional[ProgramUnit] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is LoadStatus.LOADED


class EmbeddedBlob:
    """Read-only view of the program bytes inside a launcher image."""

    def __init__(self, image: Union[bytes, bytearray, memoryview], start: int = 0, end: Optional[int] = None):
        size = len(image)
        end = size if end is None else end
        if not 0 <= start <= end <= size:
            raise ValueError(f"Blob bounds out of range: start={start} end={end} size={size}")
        self._image = memoryview(image).toreadonly()
        self.start = start
        self.end = end

    def __len__(self) -> int:
        return self.end - self.start

    def view(self) -> memoryview:
        return self._image[self.start:self.end]

    @classmethod
    def from_image(cls, image: Union[bytes, bytearray]) -> "EmbeddedBlob":
        start = image.find(BLOB_START_MARKER)
        if start < 0:
            return cls(image)
        start += len(BLOB_START_MARKER)
        end = image.rfind(BLOB_END_MARKER)
        if end < start:
            raise ValueError("Launcher image has a blob start marker but no end marker")
        return cls(image, start, end)

    @classmethod
    def from_file(cls, path: Union[str, pathlib.Path]) -> "EmbeddedBlob":
        return cls.from_image(pathlib.Path(path).read_bytes())

    @classmethod
    def from_resource(cls, package: str, name: str) -> "EmbeddedBlob":
        resource = importlib.resources.files(package).joinpath("programs").joinpath(name)
        if not resource.is_file():
            raise FileNotFoundError(f"{package}/programs/{name}")
        return cls.from_image(resource.read_bytes())


def wrap_image(blob: bytes, prefix: bytes = b"", suffix: bytes = b"") -> bytes:
    """Lay `blob` out between boundary markers, as the image build step does."""
    return prefix + BLOB_START_MARKER + blob + BLOB_END_MARKER + suffix


def compile_program(source: Union[str, bytes], label: str) -> bytes:
    """Compile source into the precompiled blob format."""
    code = compile(source, label, "exec", dont_inherit=True)
    header = importlib.util.MAGIC_NUMBER + (0).to_bytes(4, "little") + bytes(8)
    return header + marshal.dumps(code)


def _is_precompiled(data: memoryview) -> bool:
    # Every CPython magic number is two bytes followed by b"\r\n"; its high byte
    # is a control character, which rules out text.
    return len(data) >= 4 and data[1] < 0x20 and bytes(data[2:4]) == b"\r\n"


def _load_precompiled(data: memoryview) -> CodeType:
    if len(data) < HEADER_SIZE:
        raise MalformedProgram("truncated precompiled chunk")
    if bytes(data[:4]) != importlib.util.MAGIC_NUMBER:
        raise MalformedProgram("version mismatch in precompiled chunk")
    obj = marshal.loads(data[HEADER_SIZE:])
    if not isinstance(obj, CodeType):
        raise MalformedProgram(f"precompiled chunk holds {type(obj).__name__}, not code")
    return obj


def _describe(exc: BaseException, label: str) -> str:
    if isinstance(exc, SyntaxError) and exc.lineno:
        return f"{label}:{exc.lineno}: {exc.msg}"
    text = str(exc) or type(exc).__name__
    return f"{label}: {text}"


def load_buffer(blob: EmbeddedBlob, label: str) -> LoadResult:
    """Compile or unmarshal `blob` into a program unit named `label`."""
    data = blob.view()
    try:
        if _is_precompiled(data):
            code = _load_precompiled(data)
        else:
            code = compile(bytes(data), label, "exec", dont_inherit=True)
    except MemoryError:
        return LoadResult(LoadStatus.MEMORY_ERROR, message="not enough memory")
    except (SyntaxError, ValueError, EOFError, TypeError) as e:
        log.debug("Program %s is malformed", label, exc_info=True)
        return LoadResult(LoadStatus.SYNTAX_ERROR, message=_describe(e, label))
    except Exception as e:
        log.debug("Unexpected failure loading %s", label, exc_info=True)
        return LoadResult(LoadStatus.UNHANDLED_ERROR, message=_describe(e, label))
    return LoadResult(LoadStatus.LOADED, unit=ProgramUnit(code=code, label=label))
