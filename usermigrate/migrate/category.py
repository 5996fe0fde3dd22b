# usermigrate Category Catalog
# Fixed, ordered set of migrated home folders

from enum import Enum
from pathlib import Path


class Category(str, Enum):
    """A migrated top-level folder of a home directory.

    Definition order is migration order.
    """

    DESKTOP = "Desktop"
    DOCUMENTS = "Documents"
    DOWNLOADS = "Downloads"
    PICTURES = "Pictures"
    MOVIES = "Movies"
    MUSIC = "Music"

    def path_in(self, home: Path) -> Path:
        """Folder for this category under a home directory."""
        return home / self.value

    def is_present(self, home: Path) -> bool:
        """Check if the folder exists as a directory under home."""
        return self.path_in(home).is_dir()


CATALOG: tuple[Category, ...] = tuple(Category)


def present_categories(home: Path, catalog: tuple[Category, ...] = CATALOG) -> list[Category]:
    """Categories whose folder exists under home, in catalog order."""
    return [category for category in catalog if category.is_present(home)]
