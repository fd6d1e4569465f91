from typing import Optional, Tuple
import logging

from ..config import PlacementConfig
from ..models import ScopeMode
from ..repository import NodeRepository, NodeNotFoundError

logger = logging.getLogger(__name__)


class ScopeResolver:
    """
    Translates registration vocabulary into a canonical scope.

    • invite code present → SUBTREE rooted at the inviter
    • no invite code      → DIRECT rooted at the configured ACF root,
                            or the system root until that node exists
    """

    def __init__(self, repository: NodeRepository, config: PlacementConfig) -> None:
        self._repository = repository
        self._config = config

    def resolve(self, invite_code: Optional[str]) -> Tuple[str, ScopeMode]:

        code = self.normalize(invite_code)
        if code:
            return code, ScopeMode.SUBTREE

        return self.acf_root(), ScopeMode.DIRECT

    def acf_root(self) -> str:
        """
        Root for registrations without an invite code.

        Raises NodeNotFoundError before the system root is bootstrapped.
        """
        configured = self._config.acf_root_id
        if configured and self._repository.has_node(configured):
            return configured

        root = self._repository.root_id()
        if root is None:
            raise NodeNotFoundError("The tree has no system root yet.")

        if configured:
            logger.info(
                "[SCOPE] ACF root %s not registered yet, using system root %s",
                configured,
                root,
            )
        return root

    @staticmethod
    def normalize(invite_code: Optional[str]) -> Optional[str]:
        """Invite codes are member ids; surrounding whitespace is ignored."""
        if invite_code is None:
            return None
        code = invite_code.strip()
        return code or None
