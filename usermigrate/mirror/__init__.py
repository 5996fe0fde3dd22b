# usermigrate Mirror Module
# Copy/compare backends for directory trees

from usermigrate.config.schema import MigrateConfig, MirrorBackend
from usermigrate.mirror.base import PARTIAL_TRANSFER, VANISHED_SOURCE, Emit, Mirror
from usermigrate.mirror.native import NativeMirror, itemize
from usermigrate.mirror.rsync import RsyncCapabilities, RsyncMirror, find_rsync


def create_mirror(config: MigrateConfig) -> Mirror:
    """
    Build the mirror selected by configuration.

    Args:
        config: Migration configuration.

    Returns:
        Ready-to-use mirror.

    Raises:
        DependencyError: If the rsync backend is selected and rsync is unusable.
    """
    if config.backend == MirrorBackend.NATIVE:
        return NativeMirror(partial_dir=config.rsync.partial_dir)
    return RsyncMirror.discover(
        config.rsync.binary,
        partial_dir=config.rsync.partial_dir,
        extra_args=config.rsync.extra_args,
    )


__all__ = [
    "Mirror",
    "Emit",
    "PARTIAL_TRANSFER",
    "VANISHED_SOURCE",
    "NativeMirror",
    "RsyncMirror",
    "RsyncCapabilities",
    "find_rsync",
    "itemize",
    "create_mirror",
]
