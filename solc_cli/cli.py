#!/usr/bin/env python3
import argparse
import json
import logging
import sys
from typing import List, Optional

from . import __version__
from .artifacts import write_artifacts
from .compiler import SolcCompiler
from .paths import ImportResolver, SearchPath, SourceKeyMapper
from .shared import ConfigurationError, SolcCliError, SourceReadError, to_formatted_json
from .smt import handle_smt_queries, smt_warning

logger = logging.getLogger(__name__)

DEFAULT_OPTIMIZE_RUNS = 200


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='solcpy', description='Compile Solidity sources with a solc managed by solcx.')
    parser.add_argument('files', nargs='*', help='Solidity source files to compile')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--optimize', action='store_true', help='Enable bytecode optimizer')
    parser.add_argument('--optimize-runs', type=int, default=DEFAULT_OPTIMIZE_RUNS,
                        help='The number of runs specifies roughly how often each opcode of the deployed code will be executed across the lifetime of the contract')
    parser.add_argument('--bin', action='store_true', help='Binary of the contracts in hex')
    parser.add_argument('--abi', action='store_true', help='ABI of the contracts')
    parser.add_argument('--standard-json', action='store_true', help='Turn on Standard JSON Input / Output mode, input is read from stdin')
    parser.add_argument('--base-path', type=str, help='Root of the project source tree, imports are looked up here first')
    parser.add_argument('--include-path', action='append', help='Extra directory to look up imports in, after the base path. Can be repeated')
    parser.add_argument('-o', '--output-dir', type=str, default='.', help='Output directory for the contracts')
    parser.add_argument('-p', '--pretty-json', action='store_true', help='Pretty-print all JSON output')
    parser.add_argument('-v', '--verbose', action='store_true', help='More detailed console output')
    parser.add_argument('--solc-version', type=str, help='solc version to use, detected from the pragma directives by default')
    parser.add_argument('--install', action='store_true', help='Download the selected solc version if it is not installed')
    return parser


def validate_file_mode(args) -> None:
    if not (args.bin or args.abi):
        raise ConfigurationError('Invalid option selected, must specify either --bin or --abi')
    if not args.files:
        raise ConfigurationError('Must provide a file')


def read_sources(files: List[str], key_mapper: SourceKeyMapper) -> dict:
    sources = {}
    for file in files:
        try:
            with open(file, 'r', encoding='utf-8', errors='replace') as f:
                sources[key_mapper.canonicalize(file)] = {'content': f.read()}
        except OSError as e:
            raise SourceReadError(f'Error reading {file}: {e}') from e
    return sources


def build_input_json(sources: dict, optimize: bool = False, runs: int = DEFAULT_OPTIMIZE_RUNS) -> dict:
    return {
        'language': 'Solidity',
        'settings': {
            'optimizer': {
                'enabled': optimize,
                'runs': runs,
            },
            'outputSelection': {
                '*': {
                    '*': ['abi', 'evm.bytecode'],
                },
            },
        },
        'sources': sources,
    }


def compile_with_smt(compiler, input_json: dict, import_callback=None, verbose=False, pretty=False) -> dict:
    '''
    Compile, then compile once more if solc asked for SMT query responses.
    Any failure while answering the queries ends up as a warning in the output.
    '''
    output = compiler.compile(input_json, import_callback)
    try:
        retry_json = handle_smt_queries(input_json, output)
        if retry_json:
            if verbose:
                print('>>> Retrying compilation with SMT solver results:\n' + to_formatted_json(retry_json, pretty))
            output = compiler.compile(retry_json, import_callback)
    except Exception as e:
        logger.debug('SMT retry failed', exc_info=True)
        output.setdefault('errors', []).append(smt_warning(e))
    return output


def report_diagnostics(output_json: dict) -> bool:
    '''Print compiler diagnostics, returns True if any of them is an error'''
    has_error = False
    for error in output_json.get('errors', []):
        if error.get('severity') == 'error':
            print(error.get('formattedMessage'), file=sys.stderr)
            has_error = True
        else:
            print(error.get('formattedMessage'))
    return has_error


def json_error(message: str) -> dict:
    return {'errors': [{'component': 'general', 'formattedMessage': message, 'message': message,
                        'severity': 'error', 'type': 'JSONError'}]}


def request_shape_error(input_json) -> Optional[str]:
    '''Returns why `input_json` can not be a standard json request, or None'''
    if not isinstance(input_json, dict):
        return 'Input is not a JSON object.'
    sources = input_json.get('sources', {})
    if not isinstance(sources, dict):
        return '"sources" is not a JSON object.'
    for key, source in sources.items():
        if not isinstance(source, dict):
            return f'"sources.{key}" must be an object.'
    return None


def run_standard_json(args, search_path: SearchPath, compiler, stdin) -> int:
    raw_input = stdin.read()
    if args.verbose:
        print('>>> Compiling:\n' + raw_input + '\n')

    try:
        input_json = json.loads(raw_input)
        message = request_shape_error(input_json)
    except json.JSONDecodeError as e:
        message = f'Found invalid JSON input: {e}'

    if message:
        print(to_formatted_json(json_error(message), args.pretty_json))
        return 0

    import_callback = ImportResolver(search_path) if search_path.base_path else None
    output = compile_with_smt(compiler, input_json, import_callback, args.verbose, args.pretty_json)
    print(to_formatted_json(output, args.pretty_json))
    return 0


def run_files(args, search_path: SearchPath, compiler) -> int:
    sources = read_sources(args.files, SourceKeyMapper(search_path))
    input_json = build_input_json(sources, args.optimize, args.optimize_runs)
    if args.verbose:
        print('>>> Compiling:\n' + to_formatted_json(input_json, args.pretty_json) + '\n')

    output = compile_with_smt(compiler, input_json, ImportResolver(search_path), args.verbose, args.pretty_json)
    has_error = report_diagnostics(output)
    write_artifacts(output, args.output_dir, bin=args.bin, abi=args.abi, pretty=args.pretty_json)
    return 1 if has_error else 0


def main(argv: Optional[List[str]] = None, compiler=None, stdin=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    try:
        search_path = SearchPath(args.base_path or '', tuple(args.include_path or ()))
        if not args.standard_json:
            validate_file_mode(args)

        compiler = compiler or SolcCompiler(args.solc_version, install=args.install)
        if args.standard_json:
            return run_standard_json(args, search_path, compiler, stdin or sys.stdin)
        return run_files(args, search_path, compiler)
    except SolcCliError as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
