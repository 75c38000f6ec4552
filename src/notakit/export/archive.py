"""In-memory zip archive builder"""

import base64 as b64
import io
import zipfile
from typing import Union


class ArchiveFolder:
    """A path prefix inside an ArchiveBuilder."""

    def __init__(self, builder: "ArchiveBuilder", prefix: str):
        self._builder = builder
        self.prefix = prefix.strip('/')

    def file(self, name: str, data: Union[str, bytes], base64: bool = False) -> None:
        self._builder.file(f"{self.prefix}/{name}", data, base64=base64)

    def folder(self, name: str) -> "ArchiveFolder":
        return self._builder.folder(f"{self.prefix}/{name}")


class ArchiveBuilder:
    """Collects files by path and serializes them to zip bytes.

    Adding a path twice replaces the earlier content.
    """

    def __init__(self):
        self._files: dict[str, bytes] = {}
        self._folders: list[str] = []

    @property
    def names(self) -> list[str]:
        return list(self._files)

    def folder(self, name: str) -> ArchiveFolder:
        folder = ArchiveFolder(self, name)
        if folder.prefix not in self._folders:
            self._folders.append(folder.prefix)
        return folder

    def file(self, path: str, data: Union[str, bytes], base64: bool = False) -> None:
        """Add a file; base64=True decodes data first (raises ValueError on bad input)."""
        if base64:
            if isinstance(data, str):
                data = ''.join(data.split())
            content = b64.b64decode(data, validate=True)
        elif isinstance(data, str):
            content = data.encode('utf-8')
        else:
            content = data
        self._files[path.lstrip('/')] = content

    def read(self, path: str) -> bytes:
        return self._files[path]

    def generate(self) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, 'w', compression=zipfile.ZIP_DEFLATED) as zf:
            for folder in self._folders:
                zf.writestr(f"{folder}/", b'')
            for path, content in self._files.items():
                zf.writestr(path, content)
        return buffer.getvalue()
