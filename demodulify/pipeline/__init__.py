"""Pipeline stages, in execution order."""

from .entrypoints import EntrypointResolver
from .guard import InvariantGuard
from .exports import ExportSurfaceResolver
from .reachability import ReachabilityCollector
from .sanitizer import SourceSanitizer
from .assembler import CodeAssembler

__all__ = [
    "CodeAssembler",
    "EntrypointResolver",
    "ExportSurfaceResolver",
    "InvariantGuard",
    "ReachabilityCollector",
    "SourceSanitizer",
]
