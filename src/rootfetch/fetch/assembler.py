"""Assemble a rootfs from a base archive and manifest-declared layers."""

import asyncio
import json
import logging
import shutil
from pathlib import Path, PurePosixPath
from typing import Iterable, Iterator, List, Tuple

from pydantic import ValidationError

from rootfetch.errors import CleanupError, ManifestError, UnpackError
from rootfetch.fetch.unpack import TarUnpacker
from rootfetch.models.artifact import LayerDescriptor


logger = logging.getLogger(__name__)

MANIFEST_FILE = "manifest.json"
REPOSITORIES_FILE = "repositories"
# Build-time noise collects here; the directories themselves stay
SCRATCH_DIRS = ("tmp", "root")


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def remove_paths(paths: Iterable[Path]) -> None:
    """Remove every path, recursively for directories.

    Missing paths are skipped. Other failures are collected and raised
    together once every path has been attempted.
    """
    failures: List[Tuple[Path, OSError]] = []
    for path in paths:
        try:
            _remove(path)
            logger.debug(f"Removed {path}")
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.warning(f"Failed to remove {path}: {e}")
            failures.append((path, e))

    if failures:
        raise CleanupError(failures)


def relative_to_root(root: Path, relpath: str) -> Path:
    """Join a manifest path onto root, refusing paths that escape it.

    Paths that name the root itself, such as "." or "", are refused too.
    """
    pure = PurePosixPath(relpath)
    if pure.is_absolute() or ".." in pure.parts:
        raise ManifestError(f"Refusing path {relpath!r} outside of {root}")
    if not pure.parts:
        raise ManifestError(f"Refusing path {relpath!r} naming the root {root}")
    return root.joinpath(*pure.parts)


class CleanupSet:
    """Ordered set of paths inside a rootfs that must not survive assembly."""

    def __init__(self, root: Path):
        """Initialize an empty set rooted at root."""
        self.root = Path(root)
        self._paths: List[Path] = []

    def add(self, path) -> None:
        """Add a path, relative paths are taken relative to the root."""
        path = Path(path)
        if not path.is_absolute():
            path = relative_to_root(self.root, path.as_posix())
        if path == self.root:
            raise ValueError(f"Refusing to schedule the rootfs {self.root} for removal")
        if path not in self._paths:
            self._paths.append(path)

    def extend(self, paths: Iterable) -> None:
        """Add several paths in order."""
        for path in paths:
            self.add(path)

    def sweep(self, directory: str) -> None:
        """Add the contents, not the directory itself."""
        target = relative_to_root(self.root, directory)
        # A link may point outside the rootfs
        if target.is_dir() and not target.is_symlink():
            self.extend(sorted(target.iterdir()))

    def __iter__(self) -> Iterator[Path]:
        return iter(list(self._paths))

    def __len__(self) -> int:
        return len(self._paths)

    def __contains__(self, path) -> bool:
        return Path(path) in self._paths

    async def purge(self) -> None:
        """Remove every pending path. Safe to call again."""
        logger.debug(f"Removing {len(self._paths)} transient paths from {self.root}")
        await asyncio.to_thread(remove_paths, list(self._paths))


def read_manifest(path: Path) -> List[LayerDescriptor]:
    """Parse a manifest.json listing image layers."""
    try:
        data = json.loads(path.read_text())
    except FileNotFoundError as e:
        raise ManifestError(f"Failed to open {str(path)!r}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"Failed to read file {str(path)!r}: {e}") from e
    except json.JSONDecodeError as e:
        raise ManifestError(f"Failed to parse {str(path)!r}: {e}") from e

    if not isinstance(data, list):
        raise ManifestError(f"Expected a JSON array in {str(path)!r}")

    descriptors = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise ManifestError(f"Entry {index} of {str(path)!r} is not an object")
        try:
            descriptors.append(LayerDescriptor(**entry))
        except ValidationError as e:
            raise ManifestError(f"Invalid entry {index} in {str(path)!r}: {e}") from e

    return descriptors


class LayeredAssembler:
    """Unpacks a base image, applies its layers and purges build leftovers."""

    def __init__(self, unpacker: TarUnpacker):
        """Initialize assembler."""
        self.unpacker = unpacker

    async def assemble(self, base_archive: Path, rootfs: Path) -> None:
        """Unpack base_archive into rootfs and apply the layers it declares."""
        logger.info(f"Unpacking image {base_archive}")
        await self.unpacker.unpack(base_archive, rootfs)

        logger.info("Unpacking layers")
        cleanup = await self.apply_layers(rootfs)
        await cleanup.purge()

    async def apply_layers(self, rootfs: Path) -> CleanupSet:
        """Apply manifest layers in order and collect what has to go.

        Nothing is removed here. If a layer fails the tree is left as is.
        """
        rootfs = Path(rootfs)
        manifest_path = rootfs / MANIFEST_FILE
        descriptors = await asyncio.to_thread(read_manifest, manifest_path)

        cleanup = CleanupSet(rootfs)
        cleanup.add(MANIFEST_FILE)
        cleanup.add(REPOSITORIES_FILE)

        for descriptor in descriptors:
            for layer in descriptor.layers:
                layer_path = relative_to_root(rootfs, layer)
                logger.info(f"Unpacking layer {layer_path}")
                try:
                    await self.unpacker.unpack(layer_path, rootfs)
                except UnpackError as e:
                    raise UnpackError(f"Failed to apply layer {layer!r}: {e}") from e

                # A layer at the top level has no directory of its own
                if layer_path.parent == rootfs:
                    cleanup.add(layer_path)
                else:
                    cleanup.add(layer_path.parent)

            cleanup.add(relative_to_root(rootfs, descriptor.config))

        for directory in SCRATCH_DIRS:
            cleanup.sweep(directory)

        return cleanup
