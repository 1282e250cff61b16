"""Docsprep core package.

The docsprep package is organized into focused modules with clear separation of concerns:

- **processor**: Main orchestration class that walks the input tree and copies docs
- **matcher**: ``DocumentMatcher``, one doc type's path regex, output template and copy
- **doc_types**: Built-in doc type catalogue and merging with configured doc types
- **dispatcher**: First-match classification of relative paths
- **file_discovery**: Source file discovery and exclude filtering
- **globs**: Exclude pattern compilation and matching
- **match_handler**: Duplicate destination policies, dry-run and copy execution
- **run_summary**: Logging summaries, run recaps, and statistics formatting

Most modules are internal implementation details and should be imported directly
when needed (e.g., ``from docsprep.file_discovery import should_skip_path``).

The main entry point for file processing is the ``Processor`` class.
"""

from .matcher import DocumentMatcher
from .processor import Processor
from .version import __version__

__all__ = [
    "__version__",
    "DocumentMatcher",
    "Processor",
]
