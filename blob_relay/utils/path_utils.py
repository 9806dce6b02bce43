"""
Remote path handling utilities.

SFTP paths always use POSIX separators regardless of the local platform,
so everything here goes through ``posixpath``.
"""

import posixpath


def build_remote_directory(base_path: str, sub_path: str) -> str:
    """
    Compose the remote directory for a classified object.

    Args:
        base_path: Remote base directory (e.g. "/Inbound/")
        sub_path: Sub-path returned by the classifier

    Returns:
        Directory path ``{base_path}/{sub_path}`` without doubled separators

    Example:
        >>> build_remote_directory("/Inbound/", "Invoices")
        '/Inbound/Invoices'
    """
    return posixpath.join(base_path, sub_path.strip("/"))


def build_remote_path(base_path: str, sub_path: str, object_name: str) -> str:
    """
    Compose the remote file path for a classified object.

    Args:
        base_path: Remote base directory
        sub_path: Sub-path returned by the classifier
        object_name: Source object name

    Returns:
        File path ``{base_path}/{sub_path}/{object_name}``

    Example:
        >>> build_remote_path("/Inbound/", "Invoices", "Invoice_1001.pdf")
        '/Inbound/Invoices/Invoice_1001.pdf'
    """
    return posixpath.join(build_remote_directory(base_path, sub_path), object_name.lstrip("/"))


def is_direct_child(path: str, directory: str) -> bool:
    """
    Check that ``path`` names an entry directly inside ``directory``.

    Both paths are normalized first, so ``..`` segments and nested folders in
    an object name are caught before anything is written remotely.

    Example:
        >>> is_direct_child("/Inbound/Invoices/Invoice_1.pdf", "/Inbound/Invoices")
        True
        >>> is_direct_child("/Inbound/Invoices/Invoice_x/../../../etc/passwd", "/Inbound/Invoices")
        False
    """
    normalized = posixpath.normpath(path)
    return posixpath.dirname(normalized) == posixpath.normpath(directory) and posixpath.basename(
        normalized
    ) not in ("", ".", "..")


def parent_directories(path: str) -> list[str]:
    """
    List every directory from the root down to ``path``.

    Example:
        >>> parent_directories("/Inbound/Invoices")
        ['/Inbound', '/Inbound/Invoices']
    """
    parts = [part for part in path.split("/") if part]
    prefix = "/" if path.startswith("/") else ""
    return [prefix + "/".join(parts[: i + 1]) for i in range(len(parts))]


def object_base_name(name: str) -> str:
    """Strip any virtual folder prefix from an object name."""
    return posixpath.basename(name)


__all__ = [
    "build_remote_directory",
    "build_remote_path",
    "is_direct_child",
    "parent_directories",
    "object_base_name",
]
