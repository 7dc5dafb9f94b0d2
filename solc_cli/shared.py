import json
import logging
import re
from typing import List, Optional

import semantic_version
import solcx

logger = logging.getLogger(__name__)


class SolcCliError(ValueError):
    pass


class ConfigurationError(SolcCliError):
    pass


class SourceReadError(SolcCliError):
    pass


class CompilerError(SolcCliError):
    pass


def to_formatted_json(data, pretty: bool = False) -> str:
    '''Serialize compiler input or output, indented by 4 spaces when `pretty` is set'''
    if pretty:
        return json.dumps(data, indent=4)
    return json.dumps(data, separators=(',', ':'))


def version_str_from_line(line) -> Optional[str]:
    '''
    Extract solc version string from input line
    '''
    if line.strip().startswith('pragma') and 'solidity' in line:
        ver = line.strip().split(maxsplit=2)[-1].split(';', maxsplit=1)[0]
        if 'solidity' in ver:
            ver = ver.split('solidity', maxsplit=1)[-1]
        ver = re.sub(r'([\^>=<~]+)\s+', r'\1', ver)
        return re.sub(r'(\.0+)', '.0', ver)
    return None


def version_str_from_sources(sources: dict) -> Optional[str]:
    '''
    Merge the `pragma solidity` constraints of every source in a standard json `sources` map
    '''
    versions = set()
    for source in sources.values():
        if not isinstance(source, dict):
            continue
        content = source.get('content') or ''
        versions.update(version_str_from_line(line) for line in content.split('\n')
                        if line.strip().startswith('pragma') and 'solidity' in line)

    versions.discard(None)
    if not versions:
        logger.warning('No pragma directive found in source code')
        return None

    return ' '.join(sorted(versions))


def get_solc_candidates(merged_version: Optional[str], available: List[semantic_version.Version]) -> List[str]:
    '''
    Filter `available` versions by a merged pragma constraint, sorted in ascending order
    '''
    available = sorted(available)
    if not merged_version:
        return [str(v) for v in available]

    try:
        spec = semantic_version.NpmSpec(merged_version)
    except ValueError:
        logger.warning('Unable to parse version pragma: %s', merged_version)
        return [str(v) for v in available]

    return [str(v) for v in spec.filter(available)]


def _as_semantic(versions) -> List[semantic_version.Version]:
    # solcx may hand back `packaging` versions
    return sorted(semantic_version.Version(str(v)) for v in versions)


def get_installed_versions() -> List[semantic_version.Version]:
    return _as_semantic(solcx.get_installed_solc_versions())


def get_installable_versions() -> List[semantic_version.Version]:
    return _as_semantic(solcx.get_installable_solc_versions())
