"""Services module - Annotation engine and supporting services"""

from .change_log_resolver import ChangeLogResolver
from .config_manager import ConfigManager
from .errors import AnnotationError, InvalidPage, MalformedData, NotFound, RequestFailed
from .github_client import GitHubClient
from .hashing import content_hash
from .merge import deep_merge
from .overlay import describe_change, render
from .page import PageView, resolve_identity
from .projection import project
from .scanner import PageScanner

__all__ = [
    "ChangeLogResolver",
    "ConfigManager",
    "AnnotationError",
    "InvalidPage",
    "MalformedData",
    "NotFound",
    "RequestFailed",
    "GitHubClient",
    "content_hash",
    "deep_merge",
    "describe_change",
    "render",
    "PageView",
    "resolve_identity",
    "project",
    "PageScanner",
]
