"""Interactive menu application for kora.

Menus read one line at a time through an ``input``-like callable so the whole
application can be scripted in tests. Searching items and tags goes through
``FilterSession``; everything that mutates the store happens between
sessions, so each search works on a fresh snapshot.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Callable, List, Optional

from .config import KoraConfig
from .errors import FolderError
from .folders import create_folder, open_folder, parse_date, remove_folder, user_files
from .matching import SearchableRecord
from .normalize import comparison_key
from .output import print_output
from .presenter import ConsolePresenter
from .session import MAX_RESULTS, FilterSession, run_session
from .store import Item, Store, Tag

logger = logging.getLogger(__name__)


# -------------------------
# Records and formatting
# -------------------------


def format_item_label(item: Item) -> str:
    tags_str = f" [{', '.join(item.tags)}]" if item.tags else ""
    return f"{item.created_at} | {item.name}{tags_str}"


def record_for_item(item: Item) -> SearchableRecord:
    """Searchable fields of an item: name, description, then each tag."""
    return SearchableRecord(
        record_id=item.id,
        label=format_item_label(item),
        fields=(item.name, item.description, *item.tags),
        payload=item,
    )


def record_for_tag(tag: Tag) -> SearchableRecord:
    return SearchableRecord(
        record_id=tag.id, label=tag.name, fields=(tag.name,), payload=tag
    )


def format_description(description: Optional[str]) -> List[str]:
    if not description or not description.strip():
        return []
    return [f"| {line.rstrip()}" for line in description.splitlines()]


def format_item_details(item: Item) -> str:
    lines = [
        f"\n=== {item.name} ===",
        f"Date: {item.created_at}",
        "Tags: [" + ", ".join(f'"{t}"' for t in item.tags) + "]",
    ]
    description = format_description(item.description)
    if description:
        lines.append("")
        lines.extend(description)
    return "\n".join(lines)


# -------------------------
# Application
# -------------------------


class KoraApp:
    """Main menu loop over a store.

    Args:
        store: Open item/tag store
        config: Loaded configuration (storage dir, opener)
        read_line: ``input``-like callable used for every prompt
    """

    def __init__(
        self,
        store: Store,
        config: KoraConfig,
        read_line: Optional[Callable[[str], str]] = None,
    ) -> None:
        self.store = store
        self.config = config
        self._read_line = read_line or input

    def _ask(self, prompt: str) -> Optional[str]:
        """Read one line; None on end of input."""
        try:
            return self._read_line(prompt)
        except EOFError:
            return None

    def _say(self, message: str) -> None:
        print_output(message, level="quiet")

    def run(self) -> None:
        while True:
            self._say("\nKORA - file archive")
            self._say("1. Search Item")
            self._say("2. Find Item by Tag")
            self._say("3. Create New Item")
            self._say("0. Exit")
            choice = self._ask("Choose an option: ")

            if choice is None or choice.strip() == "0":
                return
            choice = choice.strip()
            if choice == "1":
                self.search_items()
            elif choice == "2":
                self.find_item_by_tag()
            elif choice == "3":
                self.create_item()
            else:
                self._say("Invalid option. Please try again.")

    # -------------------------
    # Searching
    # -------------------------

    def search_items(self) -> None:
        self._say("\n=== Search Items ===")
        self._say(
            f"Showing {MAX_RESULTS} most recent items "
            "(type to filter, press number to select, 0 to go back):"
        )
        snapshot = [record_for_item(item) for item in self.store.list_items()]
        session = FilterSession(snapshot, max_results=MAX_RESULTS, noun="item")
        presenter = ConsolePresenter(read_line=self._read_line)

        record = run_session(session, presenter)
        if record is not None:
            self.item_menu(record.payload)

    def find_item_by_tag(self) -> None:
        tags = sorted(self.store.list_tags(), key=lambda t: comparison_key(t.name))
        if not tags:
            self._say("No tags found in the database.")
            return

        self._say("\n=== Find Item by Tag ===")
        self._say("Available Tags (type to filter, press number to select, 0 to go back):")
        session = FilterSession(
            [record_for_tag(t) for t in tags], max_results=None, noun="tag"
        )
        presenter = ConsolePresenter(
            title="Filtered Tags",
            filtered_title="Filtered Tags",
            noun="tags",
            read_line=self._read_line,
        )

        record = run_session(session, presenter)
        if record is not None:
            self.show_items_for_tag(record.payload)

    def show_items_for_tag(self, tag: Tag) -> None:
        items = self.store.items_for_tag(tag.id)
        if not items:
            self._say(f"\nNo items found with tag '{tag.name}'")
            return

        self._say(f"\nItems tagged with '{tag.name}':")
        for index, item in enumerate(items, 1):
            self._say(f"{index}. {format_item_label(item)}")

        choice = self._ask("\nSelect item (number) or 0 to go back: ")
        if choice is None or choice.strip() == "0":
            return
        try:
            index = int(choice.strip())
        except ValueError:
            index = 0
        if 1 <= index <= len(items):
            self.item_menu(items[index - 1])
        else:
            self._say("Invalid selection.")

    # -------------------------
    # Item screens
    # -------------------------

    def item_menu(self, item: Item) -> None:
        while True:
            self._say(format_item_details(item))
            self._say("\n1. Open folder")
            self._say("2. Edit")
            self._say("9. Delete item")
            self._say("0. Back to search results")
            choice = self._ask("Choose an option: ")

            if choice is None or choice.strip() == "0":
                return
            choice = choice.strip()
            if choice == "1":
                self.open_item_folder(item)
            elif choice == "2":
                self.edit_item(item)
            elif choice == "9":
                if self.confirm_delete(item) and self.delete_item(item):
                    self._say("Item deleted successfully.")
                    return
            else:
                self._say("Invalid option.")

    def open_item_folder(self, item: Item) -> bool:
        opened = open_folder(Path(item.path), self.config.opener.argv)
        if not opened:
            self._say(f"Could not open folder: {item.path}")
        return opened

    def confirm_delete(self, item: Item) -> bool:
        answer = self._ask(f"Are you sure you want to delete '{item.name}'? (y/n): ")
        return answer is not None and answer.strip().lower() == "y"

    def delete_item(self, item: Item) -> bool:
        """Remove the item's folder, then its row; False if the folder stays."""
        if item.path:
            try:
                remove_folder(Path(item.path))
            except FolderError as e:
                logger.warning("Item %s kept: %s", item.id, e)
                self._say(f"Could not delete folder: {item.path}")
                return False
        self.store.delete_item(item)
        return True

    # -------------------------
    # Creating and editing
    # -------------------------

    def _ask_date(self, default: str) -> Optional[str]:
        """Ask for a YYYY-MM-DD date until a valid one (or empty) is given."""
        while True:
            text = self._ask(f"Date (YYYY-MM-DD) [{default}]: ")
            if text is None:
                return None
            text = text.strip()
            if not text:
                return default
            try:
                return parse_date(text).isoformat()
            except ValueError:
                self._say("Invalid date. Please use YYYY-MM-DD.")

    def _ask_yes_no(self, prompt: str) -> bool:
        answer = self._ask(prompt)
        return answer is not None and answer.strip().lower() == "y"

    def read_description(self) -> str:
        """Read lines until an empty line follows at least one line."""
        lines: List[str] = []
        while True:
            line = self._ask("")
            if line is None:
                break
            if not line and lines:
                break
            lines.append(line)
        return "\n".join(lines)

    def select_tags(self) -> List[int]:
        """Toggle tags by number, add new ones with 'new', finish with 0."""
        tags = self.store.list_tags()
        selected: List[int] = []

        while True:
            self._say("\nAvailable Tags:")
            self._say("0. Finish")
            for index, tag in enumerate(tags, 1):
                self._say(f"{index}. {tag.name}")
            names = [t.name for t in tags if t.id in selected]
            self._say(f"\nSelected: {', '.join(names)}")

            choice = self._ask(
                "Choose tag (0 to finish, number to select, 'new' to add tag): "
            )
            if choice is None or choice.strip() == "0":
                return selected
            choice = choice.strip()

            if choice.lower() == "new":
                name = self._ask("New tag name: ")
                if name is None or not name.strip():
                    self._say("Tag name cannot be empty.")
                    continue
                tag = self.store.find_or_create_tag(name)
                if not any(t.id == tag.id for t in tags):
                    tags.append(tag)
                if tag.id not in selected:
                    selected.append(tag.id)
                continue

            try:
                index = int(choice)
            except ValueError:
                index = 0
            if 1 <= index <= len(tags):
                tag_id = tags[index - 1].id
                if tag_id in selected:
                    selected.remove(tag_id)
                else:
                    selected.append(tag_id)
            else:
                self._say("Invalid choice.")

    def create_item(self) -> Optional[Item]:
        self._say("\n=== Create New Item ===")

        name = self._ask("Name: ")
        if name is None or not name.strip():
            return None
        name = name.strip()

        created_at = self._ask_date(date.today().isoformat())
        if created_at is None:
            return None

        try:
            path = create_folder(self.config.storage.storage_dir, name, created_at)
        except FolderError as e:
            logger.warning("Item not created: %s", e)
            self._say(f"Could not create folder for '{name}'.")
            return None
        tag_ids = self.select_tags()

        description: Optional[str] = None
        if self._ask_yes_no("Description (y/n)? "):
            self._say("Enter description (press Enter twice to finish):")
            description = self.read_description() or None

        item = Item(
            id=None,
            name=name,
            created_at=created_at,
            path=str(path),
            description=description,
        )
        self.store.save_item(item)
        self.store.set_item_tags(item.id, tag_ids)
        self._say("Item created successfully!")

        self.open_item_folder(item)
        self.wait_for_files(path)
        return item

    def wait_for_files(self, path: Path) -> bool:
        """Block until ``path`` holds at least one file; False on end of input."""
        self._say(
            f"\nIMPORTANT: Please add at least one file to the opened folder '{path.name}'."
        )
        self._say("You cannot continue until at least one file has been added to the folder.")
        while True:
            files = user_files(path)
            if files:
                self._say(
                    f"\nFound {len(files)} file(s) in the folder. Item creation complete!"
                )
                return True
            if self._ask("\nStill waiting for files... Press Enter to check again: ") is None:
                logger.warning("Input ended before any file was added to %s", path)
                return False

    def edit_item(self, item: Item) -> None:
        self._say("\n=== Edit Item ===")

        name = self._ask(f"Name [{item.name}]: ")
        if name is None:
            return
        if name.strip():
            item.name = name.strip()

        created_at = self._ask_date(item.created_at)
        if created_at is None:
            return
        item.created_at = created_at

        tag_ids = self.select_tags()

        if self._ask_yes_no("Update description (y/n)? "):
            self._say("\nCurrent description:")
            self._say("\n".join(format_description(item.description)) or "(no description)")
            self._say(
                "\nEnter new description "
                "(press Enter twice to finish, or just Enter to keep current):"
            )
            description = self.read_description()
            if description.strip():
                item.description = description

        self.store.save_item(item)
        if tag_ids:
            self.store.set_item_tags(item.id, tag_ids)
            item.tags = sorted(
                (t.name for t in self.store.list_tags() if t.id in tag_ids),
                key=str.lower,
            )
        self._say("Item updated successfully!")
        self._say(format_item_details(item))
