"""Console rendering for filter sessions."""

from __future__ import annotations

from typing import Callable, List, Optional

from .output import print_output
from .session import SessionView

FILTER_PROMPT = "\nType to filter or select (number/0 to go back): "


def format_view(
    view: SessionView,
    title: str = "Recent Items",
    filtered_title: str = "Filtered Items",
    noun: str = "items",
) -> str:
    """Format a session view as a numbered list.

    Args:
        view: View returned by the session
        title: Header used when no filter is active
        filtered_title: Header used when a filter is active
        noun: Plural noun used in the "no matches" message

    Returns:
        Text to print before the next prompt
    """
    lines: List[str] = []
    if view.error:
        lines.append(view.error)

    if not view.visible:
        lines.append(
            f"\nNo {noun} match '{view.filter_text}'. "
            "Keep typing or press Enter to clear filter."
        )
        return "\n".join(lines)

    if view.filtered:
        lines.append(f"\n{filtered_title} (filter: '{view.filter_text}'):")
    else:
        lines.append(f"\n{title}:")
    for index, record in enumerate(view.visible, 1):
        lines.append(f"{index}. {record.label}")
    return "\n".join(lines)


class ConsolePresenter:
    """Prints session views and reads lines with ``input``-like callables."""

    def __init__(
        self,
        title: str = "Recent Items",
        filtered_title: str = "Filtered Items",
        noun: str = "items",
        read_line: Optional[Callable[[str], str]] = None,
        prompt: str = FILTER_PROMPT,
    ) -> None:
        self.title = title
        self.filtered_title = filtered_title
        self.noun = noun
        self.prompt = prompt
        self._read_line = read_line or input

    def show(self, view: SessionView) -> None:
        print_output(
            format_view(view, self.title, self.filtered_title, self.noun),
            level="quiet",
        )

    def read_line(self) -> Optional[str]:
        try:
            return self._read_line(self.prompt)
        except EOFError:
            return None
