import copy
import json
import logging
import re
import subprocess
import tempfile
from typing import Callable, Dict, List, Optional

import solcx
from solcx.exceptions import SolcInstallationError, SolcNotInstalled
from solcx.install import get_executable

from . import shared as s
from .shared import CompilerError

logger = logging.getLogger(__name__)

ImportCallback = Callable[[str], Dict[str, str]]

RE_SOURCE_NOT_FOUND = re.compile(r'Source "([^"]*)" not found')


def run_solc(solc: str, input_json: dict, cwd: Optional[str] = None) -> dict:
    '''
    Compile standard input json and parse output as json.
    Parameters:
        solc: full path to the solc executable
        input_json: standard json input
        cwd: working directory of the solc process
    '''
    try:
        solc_output = subprocess.check_output(
            [solc, "--standard-json",],
            input=json.dumps(input_json),
            text=True,
            stderr=subprocess.PIPE,
            cwd=cwd,
        )
    except subprocess.CalledProcessError as e:
        raise CompilerError(f'solc exited with code {e.returncode}: {(e.stderr or "").strip()}') from e
    except OSError as e:
        raise CompilerError(f'Unable to run solc at {solc}: {e}') from e

    try:
        return json.loads(solc_output)
    except json.JSONDecodeError as e:
        raise CompilerError(f'Unable to parse solc output: {e}') from e


def missing_sources(output_json: dict) -> List[str]:
    '''Source unit names the compiler reported as not found, in report order'''
    names = []
    for error in output_json.get('errors', []):
        found = RE_SOURCE_NOT_FOUND.search(error.get('message') or '')
        if found and found.group(1) not in names:
            names.append(found.group(1))
    return names


def apply_import_errors(output_json: dict, import_errors: Dict[str, str]) -> dict:
    '''
    Replace the compiler's reason in "not found" diagnostics with the error from the import callback
    '''
    if not import_errors:
        return output_json

    def _replace(text: str) -> str:
        def _sub(m):
            name = m.group(1)
            if name not in import_errors:
                return m.group(0)
            return f'Source "{name}" not found: {import_errors[name]}'
        return re.sub(r'Source "([^"]*)" not found(?::[^\n]*)?', _sub, text)

    for error in output_json.get('errors', []):
        for key in ('message', 'formattedMessage'):
            if error.get(key):
                error[key] = _replace(error[key])
    return output_json


class SolcCompiler():
    '''
    Runs a native solc binary managed by solcx in `--standard-json` mode.

    solc is started in an empty scratch directory so it can not read imports from disk itself.
    Every source it reports as not found is handed to the import callback and the request is
    compiled again with the returned contents, until no new source is found.
    '''

    def __init__(self, version: Optional[str] = None, install: bool = False) -> None:
        self.version = version
        self.install = install

    def select_version(self, sources: dict) -> str:
        if self.version:
            return self.version

        merged_version = s.version_str_from_sources(sources)
        candidates = s.get_solc_candidates(merged_version, s.get_installed_versions())
        if not candidates and self.install:
            candidates = s.get_solc_candidates(merged_version, s.get_installable_versions())
        if not candidates:
            installed = s.get_installed_versions()
            if not installed:
                raise CompilerError('No solc version installed, pass --install or --solc-version')
            logger.warning('No installed solc satisfies %s, using %s', merged_version, installed[-1])
            candidates = [str(installed[-1])]

        self.version = candidates[-1]
        logger.debug('Selected solc %s for pragma %s', self.version, merged_version)
        return self.version

    def executable(self, version: str) -> str:
        try:
            if self.install and version not in {str(v) for v in s.get_installed_versions()}:
                logger.info('Installing solc %s', version)
                solcx.install_solc(version)
            return str(get_executable(version=version))
        except (SolcNotInstalled, SolcInstallationError) as e:
            raise CompilerError(str(e)) from e

    def compile(self, input_json: dict, import_callback: Optional[ImportCallback] = None) -> dict:
        request = copy.deepcopy(input_json)
        request.setdefault('sources', {})
        solc = self.executable(self.select_version(request['sources']))

        import_errors: Dict[str, str] = {}
        with tempfile.TemporaryDirectory(prefix='solc-cli-') as scratch:
            while True:
                output = run_solc(solc, request, cwd=scratch)
                if import_callback is None:
                    break

                pending = [name for name in missing_sources(output)
                           if name not in import_errors and name not in request['sources']]
                if not pending:
                    break

                resolved = 0
                for name in pending:
                    result = import_callback(name)
                    if 'contents' in result:
                        request['sources'][name] = {'content': result['contents']}
                        resolved += 1
                    else:
                        import_errors[name] = result.get('error', '')
                if not resolved:
                    break

        return apply_import_errors(output, import_errors)
