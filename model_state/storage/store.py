"""model_state - Storage layer with atomic JSON persistence"""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path, PurePath
from typing import Callable, Optional

import aiofiles
import aiofiles.os

from model_state.core.exceptions import CorruptStateError, PersistenceError
from model_state.core.models import PreferenceState
from model_state.core.preferences import PreferenceStore
from model_state.storage.codec import deserialize, serialize

__all__ = ["load_state", "save_state", "StateStorage"]


logger = logging.getLogger(__name__)


def _ensure_dir(path: Path) -> None:
    """Create the parent directory of path if needed"""
    if path.parent.is_dir():
        return
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise PersistenceError(f"Failed to create state directory {path.parent}: {e}", path=path) from e
    logger.debug(f"Created state directory {path.parent}")


def _make_temp(path: Path) -> Path:
    """Reserve a temporary file next to path so the final rename stays on one filesystem"""
    try:
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    except OSError as e:
        raise PersistenceError(f"Failed to create temporary file for {path}: {e}", path=path) from e
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        os.chmod(tmp_path, _target_mode(path))
    except OSError as e:
        _discard_temp(tmp_path)
        raise PersistenceError(f"Failed to set permissions on temporary file for {path}: {e}", path=path) from e
    return tmp_path


def _target_mode(path: Path) -> int:
    """Mode for the replacement file: the existing file's, else 0666 minus the umask"""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _discard_temp(tmp_path: Path) -> None:
    try:
        tmp_path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove temporary file {tmp_path}: {e}")


def _decode(raw: bytes, path: Path) -> PreferenceState:
    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CorruptStateError(f"State file {path} is not valid UTF-8: {e}", path=path) from e
    return deserialize(content, path=path)


def load_state(path: PurePath) -> PreferenceState:
    """Load the preference document from path

    A missing file is the normal first-run condition and yields an
    empty document. The file is never modified by this call.

    Raises:
        CorruptStateError: If the file exists but cannot be decoded.
        PersistenceError: If the file exists but cannot be read.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        logger.debug(f"No state file at {path}, using empty state")
        return PreferenceState.empty()
    except OSError as e:
        raise PersistenceError(f"Failed to read state file {path}: {e}", path=path) from e

    state = _decode(raw, path)
    logger.debug(f"Loaded state from {path} ({len(state.recent)} recent, {len(state.favorite)} favorite)")
    return state


def save_state(path: PurePath, state: PreferenceState) -> None:
    """Atomically replace the document at path with state

    The content is written to a temporary file in the same directory,
    synced, then renamed over the destination. Readers see either the
    previous file or the new one, never a partial write.

    Raises:
        PersistenceError: If the directory, temporary file or rename fails.
            The previous file is left untouched.
    """
    path = Path(path)
    content = serialize(state)
    _ensure_dir(path)
    tmp_path = _make_temp(path)
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except OSError as e:
        _discard_temp(tmp_path)
        raise PersistenceError(f"Failed to write state file {path}: {e}", path=path) from e
    logger.debug(f"Saved state to {path}")


class StateStorage:
    """Async access to a single model state file"""

    def __init__(self, path: PurePath):
        """Initialize storage for the state file at path"""
        self.path = Path(path)

    async def load(self) -> PreferenceState:
        """Read the document, or an empty one if the file does not exist"""
        try:
            async with aiofiles.open(self.path, mode="rb") as f:
                raw = await f.read()
        except FileNotFoundError:
            logger.debug(f"No state file at {self.path}, using empty state")
            return PreferenceState.empty()
        except OSError as e:
            raise PersistenceError(f"Failed to read state file {self.path}: {e}", path=self.path) from e
        return _decode(raw, self.path)

    async def save(self, state: PreferenceState) -> None:
        """Atomically write the document"""
        content = serialize(state)
        _ensure_dir(self.path)
        tmp_path = _make_temp(self.path)
        try:
            async with aiofiles.open(tmp_path, mode="w", encoding="utf-8") as f:
                await f.write(content)
                await f.flush()
            await aiofiles.os.replace(tmp_path, self.path)
        except OSError as e:
            _discard_temp(tmp_path)
            raise PersistenceError(f"Failed to write state file {self.path}: {e}", path=self.path) from e
        logger.debug(f"Saved state to {self.path}")

    async def update(self, fn: Callable[[PreferenceStore], Optional[object]]) -> PreferenceState:
        """Load, apply fn to a PreferenceStore, and save

        Nothing is written if loading or fn raises.
        """
        store = PreferenceStore(await self.load())
        fn(store)
        await self.save(store.state)
        return store.state

    async def exists(self) -> bool:
        """Whether the state file is present on disk"""
        return await aiofiles.os.path.exists(self.path)
