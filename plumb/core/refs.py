"""HEAD handling for Plumb.

Only the default pointer is managed: HEAD is read, resolved to a commit
hash, and the branch it names is advanced after a commit.
"""

from typing import Optional

from .errors import NotFoundError
from .hash import is_valid_hash

SYMREF_PREFIX = 'ref: '
DEFAULT_BRANCH = 'refs/heads/main'


class RefManager:
    """Reads and advances the repository's HEAD."""

    def __init__(self, repo):
        self.repo = repo
        self.git_dir = repo.git_dir
        self.head_file = repo.head_file

    def read_head(self) -> str:
        """
        Return the raw HEAD content without the trailing newline.

        Raises:
            NotFoundError: If HEAD is missing
        """
        try:
            with open(self.head_file, 'r') as f:
                return f.read().strip()
        except FileNotFoundError:
            raise NotFoundError('HEAD', what='Reference')

    def head_ref(self) -> Optional[str]:
        """Return the ref HEAD points to, or None if HEAD is detached."""
        content = self.read_head()
        if content.startswith(SYMREF_PREFIX):
            return content[len(SYMREF_PREFIX):].strip()
        return None

    def read_ref(self, ref_name: str) -> Optional[str]:
        """Return the hash stored in a ref file, or None if it doesn't exist."""
        ref_path = self.git_dir / ref_name
        if not ref_path.is_file():
            return None
        with open(ref_path, 'r') as f:
            value = f.read().strip()
        if not is_valid_hash(value):
            return None
        return value.lower()

    def resolve_head(self) -> Optional[str]:
        """
        Resolve HEAD to a commit hash.

        Returns:
            Commit hash, or None when HEAD's branch has no commits yet
        """
        ref = self.head_ref()
        if ref is None:
            value = self.read_head()
            return value.lower() if is_valid_hash(value) else None
        return self.read_ref(ref)

    def update_head(self, commit_hash: str) -> str:
        """
        Point HEAD's branch (or HEAD itself when detached) at commit_hash.

        Returns:
            The ref that was written ('HEAD' when detached)
        """
        if not is_valid_hash(commit_hash):
            raise ValueError(f"Invalid commit hash: {commit_hash!r}")

        ref = self.head_ref() or 'HEAD'
        ref_path = self.git_dir / ref
        ref_path.parent.mkdir(parents=True, exist_ok=True)
        with open(ref_path, 'w') as f:
            f.write(commit_hash.lower() + '\n')
        return ref
