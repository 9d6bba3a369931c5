"""Path helpers for rewriting database and backup file locations.

Pure string logic -- paths usually belong to a remote SQL Server host, so
``pathlib`` (which follows the local platform) is not used.  Both ``\\``
and ``/`` are recognised when splitting; joining uses the caller's
separator.
"""

_SEPARATORS = ("\\", "/")


def split_directory(path: str) -> tuple[str, str]:
    """Split *path* on its last separator into ``(directory, file_name)``.

    A path without any separator has an empty directory.

    Examples:
        >>> split_directory("E:\\\\data\\\\Sales.mdf")
        ('E:\\\\data', 'Sales.mdf')
        >>> split_directory("Sales.mdf")
        ('', 'Sales.mdf')
    """
    index = max(path.rfind(sep) for sep in _SEPARATORS)
    if index < 0:
        return "", path
    return path[:index], path[index + 1:]


def split_extension(file_name: str) -> tuple[str, str]:
    """Split *file_name* on its last dot into ``(base_name, extension)``.

    The extension keeps its leading dot.  Without a dot the whole string
    is the base name and the extension is empty.
    """
    index = file_name.rfind(".")
    if index < 0:
        return file_name, ""
    return file_name[:index], file_name[index:]


def split_path(path: str) -> tuple[str, str, str]:
    """Split *path* into ``(directory, base_name, extension)``."""
    directory, file_name = split_directory(path)
    base_name, extension = split_extension(file_name)
    return directory, base_name, extension


def join_path(directory: str, file_name: str, separator: str) -> str:
    """Join *directory* and *file_name* with *separator*.

    An empty directory yields the bare file name; a directory that already
    ends in the separator (a root such as ``/``) is not doubled.
    """
    if not directory:
        return file_name
    if directory.endswith(separator):
        return f"{directory}{file_name}"
    return f"{directory}{separator}{file_name}"


def strip_trailing_separators(directory: str) -> str:
    """Remove trailing ``\\`` and ``/`` characters from *directory*.

    A directory made only of separators (a filesystem root) is returned
    unchanged.
    """
    stripped = directory.rstrip("".join(_SEPARATORS))
    return stripped or directory


def is_url(path: str) -> bool:
    """Whether *path* points at URL-backed storage (case-sensitive ``http``)."""
    return "http" in path
