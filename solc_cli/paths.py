import os
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .shared import ConfigurationError

logger = logging.getLogger(__name__)

FILE_NOT_FOUND_MESSAGE = 'File not found inside the base path or any of the include paths.'

ImportResult = Dict[str, str]


def with_unix_path_separators(path: str) -> str:
    '''
    Replace native separators with `/`. Only done where the native separator is a backslash,
    elsewhere a backslash is a legal filename character.
    '''
    if os.path.sep == '\\':
        return path.replace('\\', '/')
    return path


@dataclass(frozen=True)
class SearchPath:
    '''
    Base path followed by include paths, in the order imports are looked up.
    An empty base path means the current directory.
    '''
    base_path: str = ''
    include_paths: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'base_path', self.base_path or '')
        object.__setattr__(self, 'include_paths', tuple(self.include_paths or ()))

        if any(p == '' for p in self.include_paths):
            raise ConfigurationError('Empty values are not allowed in --include-path.')
        if self.include_paths and not self.base_path:
            raise ConfigurationError('--include-path option requires a non-empty base path.')

    @property
    def prefixes(self) -> List[str]:
        return [self.base_path] + list(self.include_paths)


class ImportResolver():
    '''Looks up the import strings reported by the compiler under a `SearchPath`'''

    def __init__(self, search_path: SearchPath) -> None:
        self.search_path = search_path

    def candidates(self, import_path: str) -> List[str]:
        return [f'{prefix}/{import_path}' if prefix else import_path
                for prefix in self.search_path.prefixes]

    def resolve(self, import_path: str) -> ImportResult:
        '''
        Return `{'contents': text}` for the first candidate that exists, or `{'error': message}`.

        Existence is checked before reading so a missing file and an unreadable one are reported
        differently. A file removed between the two steps shows up as a read error.
        '''
        for candidate in self.candidates(import_path):
            if not os.path.lexists(candidate):
                continue

            logger.debug('Import %s resolved to %s', import_path, candidate)
            try:
                with open(candidate, 'r', encoding='utf-8', errors='replace') as f:
                    return {'contents': f.read()}
            except OSError as e:
                return {'error': f'Error reading {candidate}: {e}'}

        logger.debug('Import %s not found in %s', import_path, self.search_path.prefixes)
        return {'error': FILE_NOT_FOUND_MESSAGE}

    __call__ = resolve


def _escapes(relative_path: str) -> bool:
    return relative_path == os.pardir or relative_path.startswith(os.pardir + os.sep)


def _relative_to(prefix: str, path: str) -> Optional[str]:
    try:
        return os.path.relpath(path, prefix)
    except ValueError:
        # different drives on windows
        return None


def strip_base_path(source_path: str, base_path: str = '', include_paths: Sequence[str] = ()) -> str:
    '''
    Source key for a path given on the command line: relative to the base path or the first
    include path containing it, otherwise absolute. Separators are always `/`.

    This only approximates the base path stripping solc does for its own diagnostics, drive
    letters, UNC paths and symlinks get no special treatment.
    '''
    absolute_source_path = os.path.abspath(source_path)
    prefixes = [os.path.abspath(base_path or os.curdir)] + [os.path.abspath(p) for p in include_paths]

    for prefix in prefixes:
        relative_source_path = _relative_to(prefix, absolute_source_path)
        if relative_source_path is not None and not _escapes(relative_source_path):
            if relative_source_path == os.curdir:
                # the prefix itself
                return ''
            return with_unix_path_separators(relative_source_path)

    return with_unix_path_separators(absolute_source_path)


class SourceKeyMapper():
    def __init__(self, search_path: SearchPath) -> None:
        self.search_path = search_path

    def canonicalize(self, source_path: str) -> str:
        return strip_base_path(source_path, self.search_path.base_path, self.search_path.include_paths)
