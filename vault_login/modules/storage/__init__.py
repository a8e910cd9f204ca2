"""
Storage Module - Black Box Interface

Purpose: Persist issued credentials for other processes
Interface: CredentialStore.save_token(), CredentialStore.save_accessor(),
           CredentialStore.discard()
Hidden: Temporary files, permission bits, atomic replacement

Can be replaced with any other sink (tmpfs, shared volume) without
affecting other modules.
"""

import logging
import os
import tempfile

from ...exceptions import CredentialWriteError

logger = logging.getLogger(__name__)

TOKEN_FILE_MODE = 0o600
ACCESSOR_FILE_MODE = 0o644


class CredentialStore:
    """Black box credential writer."""

    def write(self, path: str, content: str, mode: int) -> None:
        """
        Atomically write content to path with exactly the given mode.

        The destination is only replaced once the full content is on disk,
        so a failure never leaves a partial file behind.
        """
        directory = os.path.dirname(os.path.abspath(path))
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".vault-login-")
            with os.fdopen(fd, "wb") as f:
                os.fchmod(f.fileno(), mode)
                f.write(content.encode("utf-8"))
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
            tmp_path = None
        except OSError as e:
            raise CredentialWriteError(path) from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def save_token(self, token: str, path: str) -> None:
        """Persist the Vault token, readable by the owner only."""
        self.write(path, token, TOKEN_FILE_MODE)

    def save_accessor(self, accessor: str, path: str) -> None:
        """Persist the token accessor, world readable."""
        self.write(path, accessor, ACCESSOR_FILE_MODE)

    def discard(self, path: str) -> None:
        """Remove a credential file left by a run that failed later."""
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Failed to remove {path}: {e}")


__all__ = ["CredentialStore", "TOKEN_FILE_MODE", "ACCESSOR_FILE_MODE"]
