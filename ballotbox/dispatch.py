'''Mapping of named requests onto election engine operations.

Whatever carries requests to the engine (the command line tool, a
transcript replay, a server) can name the operation in either the Python
form (``cast_vote``) or the camel case form used by contract-style callers
(``castVote``) and pass the positional arguments as a list.
'''

from typing import Any, List, Dict, Hashable, NamedTuple

from ballotbox.engine import ElectionEngine


class UnknownOperation(ValueError):
    '''The requested operation is not offered by the engine.'''
    def __init__(self, op: Any):
        self.op = op
        super().__init__(
            f'unknown operation: {op!r}, available: '
            + ', '.join(sorted(OPERATIONS.keys()))
        )


class Operation(NamedTuple):
    method: str
    n_args: int
    takes_caller: bool


OPERATIONS: Dict[str, Operation] = {
    'add_candidate': Operation('add_candidate', 2, True),
    'add_voter': Operation('add_voter', 1, True),
    'start_election': Operation('start_election', 0, True),
    'end_election': Operation('end_election', 0, True),
    'delegate_vote': Operation('delegate_vote', 1, True),
    'cast_vote': Operation('cast_vote', 1, True),
    'get_candidate_details': Operation('get_candidate_details', 1, False),
    'get_voter_details': Operation('get_voter_details', 1, False),
    'show_election_results': Operation('show_election_results', 1, False),
    'show_all_results': Operation('show_all_results', 0, False),
    'show_election_winner': Operation('show_election_winner', 0, False),
    'get_total_candidates': Operation('get_total_candidates', 0, False),
    'get_total_voters': Operation('get_total_voters', 0, False),
    'check_election_status': Operation('check_election_status', 0, False),
    'get_voter_profile': Operation('get_voter_profile', 1, False),
}

CAMEL_CASE_ALIASES: Dict[str, str] = {
    'addCandidate': 'add_candidate',
    'addVoter': 'add_voter',
    'startElection': 'start_election',
    'endElection': 'end_election',
    'delegateVote': 'delegate_vote',
    'castVote': 'cast_vote',
    'getCandidateDetails': 'get_candidate_details',
    'getVoterDetails': 'get_voter_details',
    'showElectionResults': 'show_election_results',
    'showElectionWinner': 'show_election_winner',
    'getTotalCandidates': 'get_total_candidates',
    'getTotalVoters': 'get_total_voters',
    'checkElectionStatus': 'check_election_status',
    'getVoterProfile': 'get_voter_profile',
}


def get_operation(op: str) -> Operation:
    '''Look up an operation by its Python or camel case name.'''
    try:
        return OPERATIONS[CAMEL_CASE_ALIASES.get(op, op)]
    except KeyError as e:
        raise UnknownOperation(op) from e


def dispatch(engine: ElectionEngine,
             caller: Hashable,
             op: str,
             args: List[Any] = (),
             ) -> Any:
    '''Invoke an engine operation on behalf of a caller.

    :param engine: The engine to invoke the operation on.
    :param caller: Identifier of the caller; ignored by queries.
    :param op: Name of the operation.
    :param args: Positional arguments of the operation, without the caller.
    :returns: Whatever the operation returns.
    :raises UnknownOperation: If there is no such operation.
    :raises TypeError: If the number of arguments does not fit.
    :raises ballotbox.errors.ElectionError: If the engine rejects the call.
    '''
    operation = get_operation(op)
    if len(args) != operation.n_args:
        raise TypeError(f'{op} takes {operation.n_args} arguments,'
                        f' got {len(args)}')
    method = getattr(engine, operation.method)
    if operation.takes_caller:
        return method(caller, *args)
    else:
        return method(*args)
