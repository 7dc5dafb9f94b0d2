# Answers the SMT-LIB2 queries solc asks for when the model checker runs with the `smtlib2` solver.
#
# solc returns the queries under `auxiliaryInputRequested.smtlib2queries`, keyed by the hash of each
# query. The responses go back in `auxiliaryInput.smtlib2responses` under the same keys and the
# request is compiled again.

import copy
import logging
from typing import Callable, Optional

import z3

logger = logging.getLogger(__name__)

SMT_TIMEOUT_MS = 10000

SmtSolver = Callable[[str], str]


def z3_solver(query: str) -> str:
    '''Evaluate an SMT-LIB2 script with z3 and return its textual output'''
    ctx = z3.Context()
    script = f'(set-option :timeout {SMT_TIMEOUT_MS})\n{query}'
    return z3.Z3_eval_smtlib2_string(ctx.ref(), script)


def smt_queries(output_json: dict) -> dict:
    requested = (output_json or {}).get('auxiliaryInputRequested') or {}
    return requested.get('smtlib2queries') or {}


def handle_smt_queries(input_json: dict, output_json: dict, solver: SmtSolver = z3_solver) -> Optional[dict]:
    '''
    Returns a copy of `input_json` carrying the solver responses, or None when solc asked for nothing
    '''
    queries = smt_queries(output_json)
    if not queries:
        return None

    responses = {}
    for hsh, query in queries.items():
        logger.debug('Solving SMT query %s', hsh)
        responses[hsh] = solver(query)

    retry_json = copy.deepcopy(input_json)
    retry_json['auxiliaryInput'] = {'smtlib2responses': responses}
    return retry_json


def smt_warning(e: Exception) -> dict:
    message = f'{type(e).__name__}: {e}'
    return {
        'component': 'general',
        'formattedMessage': message,
        'message': message,
        'severity': 'warning',
        'type': 'Warning',
    }
