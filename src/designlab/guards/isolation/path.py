"""
Path-based isolation between design candidates.

During generation each candidate's agent may only touch its own part of the
designs tree. The guard is stateless: the owner and protected root come in
with every call as an IsolationScope.
"""

import logging
import os
from functools import partial
from pathlib import PurePath

from designlab.domain.exceptions import IsolationViolation
from designlab.domain.interfaces import ToolGuardHook
from designlab.domain.models import IsolationScope, OperationKind, ToolCall

logger = logging.getLogger(__name__)


def _normalize(path: str) -> PurePath:
    return PurePath(os.path.normpath(os.path.abspath(path)))


class IsolationGuard:
    """
    Decides whether a tool operation may touch a path.

    A path is protected when it lies under scope.root_path. Inside the root,
    the owner may use the directory ``<root>/<owner_id>/`` and files directly
    in the root named ``<owner_id>.<ext>``. Everything else in the root is
    denied, and with no owner bound the whole root is denied.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    # -------------------------------------------------------------------------
    # Path classification
    # -------------------------------------------------------------------------

    def is_protected(self, target_path: str, scope: IsolationScope) -> bool:
        """True if target_path is the protected root or inside it."""
        return _normalize(target_path).is_relative_to(_normalize(scope.root_path))

    def is_owned(self, target_path: str, scope: IsolationScope) -> bool:
        """True if target_path belongs to the scope's owner."""
        if not scope.owner_id:
            return False
        root = _normalize(scope.root_path)
        target = _normalize(target_path)
        if target.is_relative_to(root / scope.owner_id):
            return True
        return target.parent == root and target.name.startswith(f"{scope.owner_id}.")

    def references_root(self, command: str, scope: IsolationScope) -> bool:
        """True if command text mentions the protected root."""
        raw = os.path.normpath(scope.root_path)
        return raw in command or str(_normalize(scope.root_path)) in command

    def is_allowed(
        self, operation: OperationKind, target_path: str, scope: IsolationScope
    ) -> bool:
        """
        Check one operation against the scope.

        Args:
            operation: Kind of tool operation
            target_path: Filesystem path, or command text for COMMAND
            scope: Protected root and current owner

        Returns:
            True if the operation may proceed
        """
        if not self.enabled:
            return True

        match operation:
            case OperationKind.READ | OperationKind.WRITE:
                if not self.is_protected(target_path, scope):
                    return True
                return self.is_owned(target_path, scope)
            case OperationKind.COMMAND:
                if scope.owner_id:
                    return True
                return not self.references_root(target_path, scope)

    # -------------------------------------------------------------------------
    # Enforcement
    # -------------------------------------------------------------------------

    def enforce(self, tool_call: ToolCall, scope: IsolationScope) -> None:
        """
        Raise if the tool call crosses an isolation boundary.

        Raises:
            IsolationViolation: When the operation is denied
        """
        if self.is_allowed(tool_call.operation, tool_call.target, scope):
            return

        match tool_call.operation:
            case OperationKind.READ:
                message = "Cannot read from other designs during design generation phase."
            case OperationKind.WRITE if not scope.owner_id:
                message = "Cannot write to designs directory without a design ID."
            case OperationKind.WRITE:
                message = "Cannot write to other designs during design generation phase."
            case OperationKind.COMMAND:
                message = "Cannot access other designs using shell commands."

        logger.warning(
            "Denied %s of %s for owner %s",
            tool_call.operation.value,
            tool_call.target,
            scope.owner_id or "<none>",
        )
        raise IsolationViolation(message, path=tool_call.target, owner_id=scope.owner_id)

    def hook(self, scope: IsolationScope) -> ToolGuardHook:
        """Bind a scope, giving the per-call hook an agent client runs."""
        return partial(self.enforce, scope=scope)
