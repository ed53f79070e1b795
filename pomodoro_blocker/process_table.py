import os
from typing import NamedTuple, Protocol

import psutil

from .config import KILL_WAIT_SEC, TERMINATE_WAIT_SEC


class ProcessTableError(Exception):
    pass


class ProcessGoneError(ProcessTableError):
    pass


class TerminationError(ProcessTableError):
    pass


class ProcessEntry(NamedTuple):
    pid: int
    name: str


class ProcessTable(Protocol):
    def list_processes(self) -> list[ProcessEntry]: ...

    def terminate_tree(self, pid: int) -> int: ...


def normalize_process_name(name: str | None) -> str:
    if not name:
        return ""
    name = os.path.basename(name.strip())
    if name.lower().endswith(".exe"):
        name = name[:-4]
    return name


class PsutilProcessTable:
    def __init__(
        self,
        *,
        terminate_wait_sec: float = TERMINATE_WAIT_SEC,
        kill_wait_sec: float = KILL_WAIT_SEC,
        own_pid: int | None = None,
    ):
        self._terminate_wait_sec = terminate_wait_sec
        self._kill_wait_sec = kill_wait_sec
        self._own_pid = os.getpid() if own_pid is None else own_pid

    def list_processes(self) -> list[ProcessEntry]:
        entries: list[ProcessEntry] = []
        for proc in psutil.process_iter(["pid", "name"]):
            try:
                info = proc.info
                name = normalize_process_name(info.get("name"))
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
            if not name:
                continue
            entries.append(ProcessEntry(int(info.get("pid") or proc.pid), name))
        return entries

    def terminate_tree(self, pid: int) -> int:
        try:
            root = psutil.Process(pid)
            children = [c for c in root.children(recursive=True) if c.pid != self._own_pid]
        except psutil.NoSuchProcess as e:
            raise ProcessGoneError(f"pid {pid} no longer exists") from e
        except psutil.AccessDenied as e:
            raise TerminationError(f"access denied for pid {pid}") from e
        except psutil.Error as e:
            raise TerminationError(f"cannot inspect pid {pid}: {e}") from e

        signalled: list[psutil.Process] = []
        for child in children:
            try:
                child.terminate()
                signalled.append(child)
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue

        try:
            root.terminate()
        except psutil.NoSuchProcess as e:
            if not signalled:
                raise ProcessGoneError(f"pid {pid} exited before termination") from e
        except psutil.AccessDenied as e:
            raise TerminationError(f"access denied terminating pid {pid}") from e
        except psutil.Error as e:
            raise TerminationError(f"terminate failed for pid {pid}: {e}") from e
        else:
            signalled.append(root)

        _, alive = psutil.wait_procs(signalled, timeout=self._terminate_wait_sec)
        for proc in alive:
            try:
                proc.kill()
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
        if alive:
            _, still_alive = psutil.wait_procs(alive, timeout=self._kill_wait_sec)
            if any(p.pid == pid for p in still_alive):
                raise TerminationError(f"pid {pid} survived kill")

        return len(signalled)
