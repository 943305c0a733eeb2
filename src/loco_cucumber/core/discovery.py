"""Feature file discovery.

Finds feature files either under a root path (a directory walked
recursively, or a single file) or by expanding a glob pattern. Only
files with a `.feature` suffix, compared case-insensitively, are kept.
The result is sorted so that runs are deterministic.
"""

from glob import glob
from logging import getLogger
from pathlib import Path

from loco_cucumber.errors import ConfigError

logger = getLogger(__name__)

FEATURE_SUFFIX = '.feature'


def is_feature_file(path: Path) -> bool:
    """Whether a path names a feature file."""
    return path.is_file() and path.suffix.lower() == FEATURE_SUFFIX


def discover_features(root: 'Path | str', pattern: str | None = None) -> list[Path]:
    """List feature files to run.

    Args:
        root: Directory or file to search when no pattern is given.
        pattern: Glob pattern overriding `root`. Recursive `**`
            components are supported. A pattern naming an existing
            file or directory is searched like `root`.

    Returns:
        Sorted list of feature file paths.

    Raises:
        ConfigError: If `root` does not exist (and no pattern is given).
    """
    if pattern and Path(pattern).exists():
        root, pattern = pattern, None

    if pattern:
        candidates = [Path(item) for item in glob(pattern, recursive=True)]  # noqa: PTH207

    else:
        try:
            base = Path(root).resolve(strict=True)

        except OSError as error:
            raise ConfigError(f'There was an error reading "{root}": {error}') from error

        candidates = [base] if base.is_file() else list(base.rglob('*'))

    paths = sorted(path for path in candidates if is_feature_file(path))
    logger.debug('Discovered %d feature files', len(paths))

    return paths
