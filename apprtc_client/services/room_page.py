"""Scraping of the server-rendered room page."""
import re
from typing import List, Optional

from bs4 import BeautifulSoup

from ..config import settings
from ..exceptions import DuplicateVariableError, MissingVariableError

ROOM_FULL_PATTERN = re.compile(r"^[ \t]*Sorry, this room is full\.", re.MULTILINE)


class RoomPage:
    """A fetched room page and the script variables declared in it."""

    def __init__(self, html: str, excerpt_length: Optional[int] = None):
        """Parse the page.

        Args:
            html: Raw room page HTML
            excerpt_length: How much of the page to quote in error messages
        """
        self.html = html
        self.excerpt_length = (
            excerpt_length
            if excerpt_length is not None
            else settings.html_excerpt_length
        )
        self._soup = BeautifulSoup(html, "lxml")
        self._script_text = "\n".join(
            script.get_text() for script in self._soup.find_all("script")
        )

    @property
    def is_full(self) -> bool:
        """Whether the server refused us because the room already has two peers."""
        return bool(ROOM_FULL_PATTERN.search(self._soup.get_text()))

    def get_var_value(self, var_name: str, strip_quotes: bool = False) -> str:
        """Return the value assigned to a `var` declared in the page scripts.

        Args:
            var_name: Variable name, e.g. "channelToken"
            strip_quotes: Drop the first and last characters of the value

        Returns:
            The value text, up to the trailing semicolon

        Raises:
            MissingVariableError: If the variable is not declared
            DuplicateVariableError: If it is declared more than once
        """
        values = self._find_declarations(var_name)
        if not values:
            raise MissingVariableError(
                f"Missing {var_name} in HTML: {self._excerpt()}"
            )
        if len(values) > 1:
            raise DuplicateVariableError(
                f"Too many {var_name} in HTML: {self._excerpt()}"
            )

        value = values[0]
        if strip_quotes:
            value = value[1:-1]
        return value

    def _find_declarations(self, var_name: str) -> List[str]:
        pattern = re.compile(
            r"^ *var " + re.escape(var_name) + r" = ([^\n]*);[ \t\r]*$",
            re.MULTILINE,
        )
        return pattern.findall(self._script_text)

    def _excerpt(self) -> str:
        if len(self.html) <= self.excerpt_length:
            return self.html
        return self.html[: self.excerpt_length] + "..."
