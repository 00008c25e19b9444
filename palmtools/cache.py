"""Local package cache used for offline installs."""

from __future__ import annotations

import glob
import os
import subprocess
import tarfile
from collections.abc import Iterator
from pathlib import Path

_SANITIZE = str.maketrans({"/": "_", ":": "_", "@": "_"})


class CacheError(Exception):
    """Raised when fetching or bundling the cache fails."""


def cache_dir() -> str:
    """Return the cache directory."""
    base = os.environ.get("XDG_CACHE_HOME", "")
    if not base:
        base = os.path.join(str(Path.home()), ".cache")
    return os.path.join(base, "palm")


def sanitize(s: str) -> str:
    """Make a package name safe for use as a file name."""
    return s.translate(_SANITIZE)


def _run(*command: str) -> None:
    try:
        result = subprocess.run(command)
    except OSError as exc:
        raise CacheError(f"{command[0]}: {exc}") from exc
    if result.returncode != 0:
        raise CacheError(f"{' '.join(command)} exited with status {result.returncode}")


def fetch(backend: str, pkg: str) -> None:
    """Download a package into the cache for the given install backend."""
    directory = os.path.join(cache_dir(), backend)
    os.makedirs(directory, exist_ok=True)

    if backend == "pip":
        _run("pip3", "download", "-d", directory, pkg)
    elif backend == "npm":
        _run("npm", "pack", pkg, "--pack-destination", directory)
    elif backend == "docker":
        out = os.path.join(directory, sanitize(pkg) + ".tar")
        _run("docker", "pull", pkg)
        _run("docker", "save", "-o", out, pkg)
    elif backend == "brew":
        _run("brew", "fetch", pkg, "--retry")
    else:
        marker = os.path.join(directory, sanitize(pkg) + ".fetch")
        with open(marker, "w", encoding="utf-8") as handle:
            handle.write(pkg)


def is_cached(backend: str, pkg: str) -> bool:
    """Report whether a package is present in the cache."""
    directory = os.path.join(cache_dir(), backend)
    name = sanitize(pkg)
    if backend == "pip":
        return bool(glob.glob(os.path.join(directory, glob.escape(name) + "*")))
    if backend == "npm":
        return os.path.exists(os.path.join(directory, name + ".tgz"))
    if backend == "docker":
        return os.path.exists(os.path.join(directory, name + ".tar"))
    return os.path.exists(os.path.join(directory, name + ".fetch"))


def _walk(root: str) -> Iterator[str]:
    yield root
    if os.path.isdir(root) and not os.path.islink(root):
        for name in sorted(os.listdir(root)):
            yield from _walk(os.path.join(root, name))


def bundle(output: str) -> None:
    """Write the whole cache directory into a gzip-compressed tar archive."""
    root = cache_dir()
    if not os.path.exists(root):
        raise CacheError("cache is empty — run `palm fetch` first")
    with tarfile.open(output, "w:gz") as archive:
        for path in _walk(root):
            archive.add(path, arcname=os.path.relpath(path, root), recursive=False)