from typing import Iterable, Iterator

DEFAULT_BLOCKED_PROCESSES: tuple[str, ...] = (
    # Browsers
    "chrome",
    "msedge",
    "firefox",
    "opera",
    "brave",
    "vivaldi",
    # Game launchers
    "steam",
    "epicgameslauncher",
    "riotclientservices",
    "leagueclient",
    "valorant",
    "battle.net",
    "upc",
    "origin",
    "eadesktop",
    "minecraftlauncher",
)


class BlockList:
    __slots__ = ("_names",)

    def __init__(self, names: Iterable[str]):
        cleaned = (str(n).strip().lower() for n in names if n is not None)
        self._names: frozenset[str] = frozenset(n for n in cleaned if n)

    @classmethod
    def default(cls) -> "BlockList":
        return cls(DEFAULT_BLOCKED_PROCESSES)

    def matches(self, proc_name: str | None) -> bool:
        if not proc_name:
            return False
        return proc_name.lower() in self._names

    def __contains__(self, proc_name: object) -> bool:
        return isinstance(proc_name, str) and self.matches(proc_name)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._names))

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"BlockList({sorted(self._names)!r})"
