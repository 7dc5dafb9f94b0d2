import os
import re
import logging
from typing import List

import addict

from .shared import to_formatted_json

logger = logging.getLogger(__name__)

RE_UNSAFE_FILENAME_CHARS = re.compile(r'[:./\\]')


def contract_file_name(source_key: str, contract_name: str) -> str:
    '''
    Filesystem safe name of a contract. Example: src/Main.sol + Main -> src_Main_sol_Main
    '''
    return RE_UNSAFE_FILENAME_CHARS.sub('_', f'{source_key}:{contract_name}')


def write_file(output_dir: str, file_name: str, content: str) -> str:
    path = os.path.join(output_dir, file_name)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(content)
    logger.debug('Wrote %s', path)
    return path


def write_artifacts(output_json: dict, output_dir: str, bin: bool = False, abi: bool = False, pretty: bool = False) -> List[str]:
    '''
    Write `<name>.bin` and / or `<name>.abi` for every compiled contract, returns the written paths
    '''
    os.makedirs(output_dir, exist_ok=True)
    written = []
    output = addict.Dict(output_json)

    for source_key, contracts in output.contracts.items():
        for contract_name, contract in contracts.items():
            name = contract_file_name(source_key, contract_name)
            if bin:
                written.append(write_file(output_dir, f'{name}.bin', contract.evm.bytecode.object or ''))
            if abi:
                written.append(write_file(output_dir, f'{name}.abi', to_formatted_json(contract.abi or [], pretty)))

    return written
