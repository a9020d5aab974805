"""Static asset serving for ``/static/{path:path}``.

Runs behind the standard chain only: no session is loaded and no cookie
is ever set for an asset request.

Security: resolves symlinks and verifies the final path is within the
configured directory to prevent path traversal. Directory listings are
never produced; a directory is only served through its index file.
"""

import mimetypes
from pathlib import Path

from snippetbox.errors import NotFound
from snippetbox.http.request import Request
from snippetbox.http.response import Response, plain_text


class StaticFiles:
    """Route handler serving files from one directory.

    Usage::

        static = StaticFiles(config.static_dir)
        router.add(Route("/static/{path:path}", standard.then(static), methods=("GET",)))
    """

    __slots__ = ("_cache_control", "_directory", "_index")

    def __init__(
        self,
        directory: str | Path,
        *,
        index: str = "index.html",
        cache_control: str = "public, max-age=3600",
    ) -> None:
        self._directory = Path(directory).resolve()
        self._index = index
        self._cache_control = cache_control

    @property
    def directory(self) -> Path:
        return self._directory

    async def __call__(self, request: Request) -> Response:
        relative = request.path_params.get("path", "").lstrip("/")

        # Resolve the file path and check for traversal
        file_path = (self._directory / relative).resolve() if relative else self._directory
        if not file_path.is_relative_to(self._directory):
            return plain_text("Forbidden", status=403)

        if file_path.is_dir():
            file_path = file_path / self._index

        if not file_path.is_file():
            raise NotFound

        return self._serve_file(file_path)

    def _serve_file(self, file_path: Path) -> Response:
        content_type, _ = mimetypes.guess_type(str(file_path))
        if content_type is None:
            content_type = "application/octet-stream"
        elif content_type.startswith("text/"):
            content_type += "; charset=utf-8"

        return Response(body=file_path.read_bytes(), content_type=content_type).with_header(
            "Cache-Control", self._cache_control
        )
