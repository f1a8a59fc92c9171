"""
Service layer.

Resource services return tagged results (see results.py), the auth
service raises ApiError directly.
"""

from .auth_service import AuthService, LoginRedirect, LoginResult
from .folder_service import FolderService
from .health_service import HealthService
from .note_service import NoteService
from .permission_service import PermissionService
from .results import Failure, Ok, ServiceResult, unwrap
from .server_service import ServerService, check_server_health
from .user_service import UserService
from .workspace_service import WorkspaceService, WorkspaceView, to_public_workspace

__all__ = [
    "AuthService",
    "LoginRedirect",
    "LoginResult",
    "FolderService",
    "HealthService",
    "NoteService",
    "PermissionService",
    "ServerService",
    "check_server_health",
    "UserService",
    "WorkspaceService",
    "WorkspaceView",
    "to_public_workspace",
    "Failure",
    "Ok",
    "ServiceResult",
    "unwrap",
]
