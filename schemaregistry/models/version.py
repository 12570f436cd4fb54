"""
Subject version numbers, including the two request-only sentinels.
"""

from typing import ClassVar


class Version(int):
    """
    A subject version as assigned by the registry service.

    `Version.LATEST` and `Version.ALL` are request selectors for
    `Registry.register`; they are never stored in the cache.
    """

    LATEST: ClassVar["Version"]
    ALL: ClassVar["Version"]

    @property
    def is_selector(self) -> bool:
        return self < 0

    def __str__(self) -> str:
        if self == -1:
            return "Latest"
        if self == -2:
            return "All"
        return str(int(self))

    def __repr__(self) -> str:
        return f"Version({self})"


Version.LATEST = Version(-1)
Version.ALL = Version(-2)
