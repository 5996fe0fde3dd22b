# usermigrate Native Mirror
# Pure-Python copy and compare with rsync-compatible itemized output

from __future__ import annotations

import os
import shutil
import stat
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from usermigrate.mirror.base import PARTIAL_TRANSFER, VANISHED_SOURCE, Emit
from usermigrate.utils.hashing import is_prefix_of, same_content
from usermigrate.utils.paths import ensure_dir

if TYPE_CHECKING:
    from usermigrate.migrate.excludes import ExclusionRule

# Attribute flags of an itemized line: checksum, size, time, perms
NEW_ITEM = "+++++++++"


def itemize(update: str, kind: str, rel: str, *, new: bool = False, **changed: bool) -> str:
    """
    Format one rsync ``--itemize-changes`` line.

    Args:
        update: Update type: ``>`` received, ``c`` created, ``h`` hard link, ``.`` attributes only.
        kind: File type: ``f`` file, ``d`` directory, ``L`` symlink.
        rel: Path relative to the transfer root.
        new: Item is newly created.
        **changed: Any of checksum, size, time, perms set to True.

    Returns:
        Itemized line, e.g. ``>f.st...... notes.txt``.
    """
    if new:
        flags = NEW_ITEM
    else:
        chars = ["."] * 9
        for index, key in enumerate(("checksum", "size", "time", "perms")):
            if changed.get(key):
                chars[index] = key[0]
        flags = "".join(chars)
    return f"{update}{kind}{flags} {rel}"


@dataclass
class _Entry:
    rel: str
    path: Path
    st: os.stat_result

    @property
    def is_dir(self) -> bool:
        return stat.S_ISDIR(self.st.st_mode)

    @property
    def is_file(self) -> bool:
        return stat.S_ISREG(self.st.st_mode)

    @property
    def is_symlink(self) -> bool:
        return stat.S_ISLNK(self.st.st_mode)

    @property
    def display(self) -> str:
        return f"{self.rel}/" if self.is_dir else self.rel


@dataclass
class _Stats:
    files: int = 0
    regular: int = 0
    dirs: int = 0
    links: int = 0
    created: int = 0
    transferred: int = 0
    total_size: int = 0
    transferred_size: int = 0

    def lines(self, *, dry_run: bool) -> list[str]:
        lines = [
            "",
            f"Number of files: {self.files} (reg: {self.regular}, dir: {self.dirs}, link: {self.links})",
            f"Number of created files: {self.created}",
            f"Number of regular files transferred: {self.transferred}",
            f"Total file size: {self.total_size} bytes",
            f"Total transferred file size: {self.transferred_size} bytes",
        ]
        if dry_run:
            lines.append("(DRY RUN)")
        return lines


def _exit_status(failed: bool, vanished: list[str]) -> int:
    """rsync-compatible exit status: errors win over vanished files."""
    if failed:
        return PARTIAL_TRANSFER
    if vanished:
        return VANISHED_SOURCE
    return 0


def _lstat(path: Path) -> os.stat_result | None:
    try:
        return path.lstat()
    except FileNotFoundError:
        return None


class NativeMirror:
    """
    Mirror implemented with the standard library.

    Follows rsync's archive-mode behavior: first-match excludes, quick
    check by size and mtime, hard links and symlinks preserved, staged
    transfers in a partial directory that are resumed when interrupted.
    """

    name = "native"

    def __init__(self, *, partial_dir: str = ".rsync-partial"):
        self.partial_dir = partial_dir

    def describe(self) -> str:
        """Human-readable description for the run log."""
        return "native (built-in Python copier)"

    def walk(
        self,
        root: Path,
        rules: Sequence[ExclusionRule],
        on_error: Callable[[str, OSError], None] | None = None,
        on_vanished: Callable[[str], None] | None = None,
    ) -> Iterator[_Entry]:
        """
        Yield non-excluded entries under root, parents before children.

        Excluded directories are not descended into and the partial
        directory is always skipped. Entries that cannot be read are passed
        to on_error and entries deleted while walking to on_vanished, with
        their relative path; without a callback the OSError propagates.
        """
        from usermigrate.migrate.excludes import first_match

        def report(rel: str, error: OSError) -> None:
            if isinstance(error, FileNotFoundError) and on_vanished is not None:
                on_vanished(rel)
            elif on_error is not None:
                on_error(rel, error)
            else:
                raise error

        def recurse(rel_dir: str, dir_path: Path) -> Iterator[_Entry]:
            try:
                with os.scandir(dir_path) as it:
                    listing = sorted((e.name, e.is_dir(follow_symlinks=False)) for e in it)
            except OSError as e:
                report(rel_dir or ".", e)
                return
            for name, is_dir in listing:
                rel = f"{rel_dir}/{name}" if rel_dir else name
                if is_dir and name == self.partial_dir:
                    continue
                if first_match(rules, rel, is_dir=is_dir) is not None:
                    continue
                path = dir_path / name
                try:
                    st = path.lstat()
                except OSError as e:
                    report(rel, e)
                    continue
                entry = _Entry(rel, path, st)
                yield entry
                if entry.is_dir:
                    yield from recurse(rel, path)

        if root.is_dir():
            yield from recurse("", root)

    # ------------------------------------------------------------------
    # Copy
    # ------------------------------------------------------------------

    def copy_tree(
        self,
        source: Path,
        destination: Path,
        rules: Sequence[ExclusionRule],
        *,
        dry_run: bool,
        emit: Emit,
    ) -> int:
        """Copy source into destination; in dry run only report."""
        stats = _Stats()
        unreadable: list[str] = []
        vanished: list[str] = []
        failed = False
        dirs: list[tuple[Path, Path]] = [(source, destination)]
        links: dict[tuple[int, int], tuple[str, Path]] = {}

        if not dry_run:
            ensure_dir(destination)

        def on_error(rel: str, error: OSError) -> None:
            unreadable.append(rel)
            emit(f'usermigrate: opendir "{rel}" failed: {error}')

        def on_vanished(rel: str) -> None:
            vanished.append(rel)
            emit(f'file has vanished: "{source / rel}"')

        emit("sending incremental file list")
        for entry in self.walk(source, rules, on_error, on_vanished):
            target = destination / entry.rel
            stats.files += 1
            try:
                if entry.is_dir:
                    stats.dirs += 1
                    self._copy_dir(entry, target, dry_run, emit, stats)
                    dirs.append((entry.path, target))
                elif entry.is_symlink:
                    stats.links += 1
                    self._copy_symlink(entry, target, dry_run, emit, stats)
                elif entry.is_file:
                    stats.regular += 1
                    stats.total_size += entry.st.st_size
                    self._copy_file(entry, target, dry_run, emit, stats, links)
                else:
                    emit(f'skipping non-regular file "{entry.rel}"')
            except OSError as e:
                failed = True
                emit(f'usermigrate: copy "{entry.rel}" failed: {e}')

        if not dry_run:
            for src_dir, dst_dir in reversed(dirs):
                try:
                    shutil.copystat(src_dir, dst_dir)
                except OSError as e:
                    failed = True
                    emit(f'usermigrate: set attributes on "{dst_dir}" failed: {e}')

        for line in stats.lines(dry_run=dry_run):
            emit(line)
        return _exit_status(failed or bool(unreadable), vanished)

    def _copy_dir(self, entry: _Entry, target: Path, dry_run: bool, emit: Emit, stats: _Stats) -> None:
        existing = _lstat(target)
        if existing is not None and stat.S_ISDIR(existing.st_mode):
            return
        emit(itemize("c", "d", entry.display, new=True))
        stats.created += 1
        if dry_run:
            return
        if existing is not None:
            target.unlink()
        target.mkdir()

    def _copy_symlink(self, entry: _Entry, target: Path, dry_run: bool, emit: Emit, stats: _Stats) -> None:
        link_to = os.readlink(entry.path)
        existing = _lstat(target)
        if existing is not None and stat.S_ISLNK(existing.st_mode) and os.readlink(target) == link_to:
            return
        emit(itemize("c", "L", f"{entry.rel} -> {link_to}", new=existing is None, checksum=existing is not None))
        stats.created += 1
        if dry_run:
            return
        if existing is not None:
            if stat.S_ISDIR(existing.st_mode):
                raise IsADirectoryError(f"cannot delete non-empty directory: {entry.rel}")
            target.unlink()
        os.symlink(link_to, target)

    def _copy_file(
        self,
        entry: _Entry,
        target: Path,
        dry_run: bool,
        emit: Emit,
        stats: _Stats,
        links: dict[tuple[int, int], tuple[str, Path]],
    ) -> None:
        existing = _lstat(target)
        if existing is not None and stat.S_ISDIR(existing.st_mode):
            raise IsADirectoryError(f"cannot delete non-empty directory: {entry.rel}")

        key = (entry.st.st_dev, entry.st.st_ino)
        if entry.st.st_nlink > 1 and key in links:
            first_rel, first_target = links[key]
            if existing is not None and not dry_run and os.path.samefile(first_target, target):
                return
            emit(f"hf{NEW_ITEM} {entry.rel} => {first_rel}")
            stats.created += 1
            if dry_run:
                return
            if existing is not None:
                target.unlink()
            os.link(first_target, target)
            return
        if entry.st.st_nlink > 1:
            links[key] = (entry.rel, target)

        if existing is not None and stat.S_ISREG(existing.st_mode):
            same_size = existing.st_size == entry.st.st_size
            same_time = int(existing.st_mtime) == int(entry.st.st_mtime)
            if same_size and same_time:
                return
            emit(itemize(">", "f", entry.rel, size=not same_size, time=not same_time))
        else:
            emit(itemize(">", "f", entry.rel, new=True))
            stats.created += 1

        stats.transferred += 1
        if dry_run:
            stats.transferred_size += entry.st.st_size
            return
        stats.transferred_size += self._transfer(entry.path, target)

    def _transfer(self, source: Path, target: Path) -> int:
        """
        Copy one file through the staging directory.

        A staged remnant whose bytes are a prefix of the source is resumed
        rather than restarted.

        Returns:
            Number of bytes written.
        """
        staging_dir = target.parent / self.partial_dir
        staged = staging_dir / target.name
        offset = 0

        if staged.is_file() and is_prefix_of(staged, source):
            offset = staged.stat().st_size

        ensure_dir(staging_dir)
        with open(source, "rb") as fin, open(staged, "ab" if offset else "wb") as fout:
            fin.seek(offset)
            shutil.copyfileobj(fin, fout)

        shutil.copystat(source, staged)
        os.replace(staged, target)

        if not any(staging_dir.iterdir()):
            staging_dir.rmdir()

        return source.stat().st_size - offset

    # ------------------------------------------------------------------
    # Compare
    # ------------------------------------------------------------------

    def compare_tree(
        self,
        source: Path,
        destination: Path,
        rules: Sequence[ExclusionRule],
        *,
        emit: Emit,
        report_extraneous: bool = False,
    ) -> int:
        """Emit itemized, checksum-based differences. Never writes."""
        unreadable: list[str] = []
        vanished: list[str] = []
        failed = False
        seen: set[str] = set()

        def on_error(rel: str, error: OSError) -> None:
            unreadable.append(rel)
            emit(f'usermigrate: opendir "{rel}" failed: {error}')

        def on_vanished(rel: str) -> None:
            vanished.append(rel)
            emit(f'file has vanished: "{source / rel}"')

        for entry in self.walk(source, rules, on_error, on_vanished):
            seen.add(entry.rel)
            try:
                line = self._compare_entry(entry, destination / entry.rel)
            except OSError as e:
                failed = True
                emit(f'usermigrate: compare "{entry.rel}" failed: {e}')
                continue
            if line:
                emit(line)

        if report_extraneous:
            for entry in self.walk(destination, rules, on_error):
                if entry.rel not in seen:
                    emit(f"*deleting   {entry.display}")

        return _exit_status(failed or bool(unreadable), vanished)

    def _compare_entry(self, entry: _Entry, target: Path) -> str | None:
        existing = _lstat(target)

        if entry.is_dir:
            if existing is None or not stat.S_ISDIR(existing.st_mode):
                return itemize("c", "d", entry.display, new=True)
            return self._attribute_line("d", entry, existing)

        if entry.is_symlink:
            link_to = os.readlink(entry.path)
            if existing is None or not stat.S_ISLNK(existing.st_mode):
                return itemize("c", "L", f"{entry.rel} -> {link_to}", new=True)
            if os.readlink(target) != link_to:
                return itemize("c", "L", f"{entry.rel} -> {link_to}", checksum=True)
            return None

        if not entry.is_file:
            return None

        if existing is None or not stat.S_ISREG(existing.st_mode):
            return itemize(">", "f", entry.rel, new=True)

        if not same_content(entry.path, target):
            return itemize(
                ">",
                "f",
                entry.rel,
                checksum=True,
                size=existing.st_size != entry.st.st_size,
                time=int(existing.st_mtime) != int(entry.st.st_mtime),
                perms=stat.S_IMODE(existing.st_mode) != stat.S_IMODE(entry.st.st_mode),
            )
        return self._attribute_line("f", entry, existing)

    def _attribute_line(self, kind: str, entry: _Entry, existing: os.stat_result) -> str | None:
        time_differs = int(existing.st_mtime) != int(entry.st.st_mtime)
        perms_differ = stat.S_IMODE(existing.st_mode) != stat.S_IMODE(entry.st.st_mode)
        if not (time_differs or perms_differ):
            return None
        return itemize(".", kind, entry.display, time=time_differs, perms=perms_differ)
