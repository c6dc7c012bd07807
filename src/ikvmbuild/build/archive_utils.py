"""Archive Extraction Utilities.

This module unpacks Java archives for code-only builds. Jars are zip files;
only entries accepted by a filter predicate are written, so resources
(XML, images, manifests) never reach ikvmc.
"""

import logging
import zipfile
from pathlib import Path
from typing import Callable, Iterable, List

from tqdm import tqdm

from ..errors import IkvmBuildError
from ..interrupt_utils import reraise_as
from .command_builder import CLASS_SUFFIX

logger = logging.getLogger(__name__)

EntryFilter = Callable[[str], bool]


class ExtractionError(IkvmBuildError):
    """Raised when an archive cannot be extracted."""

    pass


def is_class_entry(entry_name: str) -> bool:
    """Accept compiled class entries only."""
    return entry_name.endswith(CLASS_SUFFIX)


class ArchiveExtractor:
    """Extracts matching archive entries into a target directory."""

    def __init__(self, show_progress: bool = False):
        """Initialize archive extractor.

        Args:
            show_progress: Whether to show a progress bar over archives
        """
        self.show_progress = show_progress

    def extract_matching(
        self,
        archive_path: Path,
        target_dir: Path,
        entry_filter: EntryFilter
    ) -> int:
        """Extract the entries of one archive accepted by ``entry_filter``.

        Args:
            archive_path: Path to the .jar/.zip archive
            target_dir: Directory to extract into (created if missing)
            entry_filter: Predicate on the entry name

        Returns:
            Number of entries written

        Raises:
            ExtractionError: If the archive cannot be read or written out
        """
        written = 0
        with reraise_as(ExtractionError, f"Error extracting classes from: {archive_path}"):
            target_dir.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(archive_path, "r") as zf:
                for info in zf.infolist():
                    if info.is_dir() or not entry_filter(info.filename):
                        continue
                    zf.extract(info, target_dir)
                    written += 1

        logger.debug(f"Extracted {written} entries from {archive_path}")
        return written

    def extract_classes(self, archives: Iterable[Path], target_dir: Path) -> int:
        """Extract the class files of every archive into ``target_dir``.

        The target directory is reused when it already exists. A failure on
        any archive aborts the whole extraction.

        Args:
            archives: Compile-unit archives in classifier order
            target_dir: Scratch class directory

        Returns:
            Total number of class files written

        Raises:
            ExtractionError: If any archive fails to extract
        """
        archives: List[Path] = [Path(a) for a in archives]
        total = 0
        for archive in tqdm(
            archives,
            desc="Extracting classes",
            unit="jar",
            disable=not self.show_progress,
        ):
            total += self.extract_matching(archive, target_dir, is_class_entry)
        logger.info(f"Extracted {total} class files into {target_dir}")
        return total
